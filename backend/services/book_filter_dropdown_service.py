"""
Book Filter Dropdown Service

Builds the values shown in the filter dropdown once a filter type is picked.
"""

from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from dtos.internal.sort_filter_page import BooksFilterBy, COMING_SOON_FILTER, DropdownOption
from repositories.book_repository import BookRepository

VOTE_FILTER_OPTIONS = [
    DropdownOption("4", "4 stars and up"),
    DropdownOption("3", "3 stars and up"),
    DropdownOption("2", "2 stars and up"),
    DropdownOption("1", "1 star and up"),
]


class BookFilterDropdownService:
    def __init__(self, db: Session):
        self.book_repo = BookRepository(db)

    def get_filter_drop_down_values(self, filter_by: BooksFilterBy, today: Optional[date] = None) -> List[DropdownOption]:
        """
        Options for the filter value dropdown.

        For BY_PUBLICATION_YEAR: "Coming Soon" first when there are
        unpublished books, then each year with published books, newest first.
        """
        if filter_by == BooksFilterBy.BY_VOTES:
            return list(VOTE_FILTER_OPTIONS)
        if filter_by == BooksFilterBy.BY_PUBLICATION_YEAR:
            options = []
            if self.book_repo.any_coming_soon(today):
                options.append(DropdownOption(COMING_SOON_FILTER, COMING_SOON_FILTER))
            options.extend(DropdownOption(str(year), str(year)) for year in self.book_repo.get_published_years(today))
            return options
        return []
