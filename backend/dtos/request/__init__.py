"""
Request DTOs

DTOs behind the forms. Their field names line up with the parameters of the
entity methods they feed, e.g. AddReviewDto.num_stars -> Book.add_review(num_stars, ...).
"""
