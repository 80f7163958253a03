from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import Column, Date, ForeignKey, Integer, Numeric, String, Text, CheckConstraint, func, select
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import Session, relationship

from database import Base
from generic_services.status import StatusGeneric, StatusGenericWithResult

MAX_STARS = 5


class Author(Base):
    """
    A book author.

    All attributes are public, so GenericServices updates an Author by
    copying DTO fields straight onto it.
    """
    __tablename__ = 'authors'

    author_id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    email = Column(String(256))

    books_link = relationship("BookAuthor", back_populates="author")

    __table_args__ = (
        CheckConstraint("name != ''"),
    )


class Book(Base):
    """
    A book in the shop.

    Title, description, publisher, image and publication date are public.
    Prices and the promotion text are private columns that only change
    through the promotion methods; reviews change through add_review and
    remove_review.
    """
    __tablename__ = 'books'

    book_id = Column(Integer, primary_key=True)
    title = Column(String(256), nullable=False)
    description = Column(Text)
    published_on = Column(Date, nullable=False)
    publisher = Column(String(64))
    image_url = Column(String(512))

    _org_price = Column('org_price', Numeric(9, 2), nullable=False)
    _actual_price = Column('actual_price', Numeric(9, 2), nullable=False)
    _promotional_text = Column('promotional_text', String(200))

    reviews = relationship("Review", back_populates="book", cascade="all, delete-orphan")
    author_links = relationship(
        "BookAuthor",
        back_populates="book",
        cascade="all, delete-orphan",
        order_by="BookAuthor.order",
    )

    def __init__(
        self,
        title: str,
        description: Optional[str],
        published_on: date,
        publisher: Optional[str],
        price: Decimal,
        image_url: Optional[str],
        authors: List["Author"],
    ):
        if not authors:
            raise ValueError("You must have at least one Author for a book.")
        self.title = title
        self.description = description
        self.published_on = published_on
        self.publisher = publisher
        self.image_url = image_url
        self._org_price = price
        self._actual_price = price
        self.reviews = []
        self.author_links = [BookAuthor(author=author, order=i) for i, author in enumerate(authors)]

    @hybrid_property
    def org_price(self):
        return self._org_price

    @hybrid_property
    def actual_price(self):
        return self._actual_price

    @hybrid_property
    def promotional_text(self):
        return self._promotional_text

    @hybrid_property
    def reviews_count(self):
        return len(self.reviews)

    @reviews_count.expression
    def reviews_count(cls):
        return (
            select(func.count(Review.review_id))
            .where(Review.book_id == cls.book_id)
            .scalar_subquery()
        )

    @hybrid_property
    def average_votes(self):
        if not self.reviews:
            return None
        return sum(review.num_stars for review in self.reviews) / len(self.reviews)

    @average_votes.expression
    def average_votes(cls):
        return (
            select(func.avg(Review.num_stars))
            .where(Review.book_id == cls.book_id)
            .scalar_subquery()
        )

    @classmethod
    def create_book(
        cls,
        title: str,
        description: Optional[str],
        published_on: date,
        publisher: Optional[str],
        price: Decimal,
        image_url: Optional[str],
        author_ids: List[int],
        db: Session,
    ) -> StatusGenericWithResult["Book"]:
        """Build a Book from author ids, reporting bad input as status errors"""
        status = StatusGenericWithResult()
        if not title or not title.strip():
            status.add_error("The book title cannot be empty.", "title")
        if not author_ids:
            status.add_error("You must have at least one Author for a book.", "author_ids")

        authors = []
        for author_id in author_ids:
            author = db.get(Author, author_id)
            if author is None:
                status.add_error(f"Could not find an author with id {author_id}.", "author_ids")
            else:
                authors.append(author)

        if status.has_errors:
            return status
        return status.set_result(cls(title, description, published_on, publisher, price, image_url, authors))

    def update_published_on(self, published_on: date):
        self.published_on = published_on

    def add_review(self, num_stars: int, comment: str, voter_name: str, db: Optional[Session] = None) -> StatusGeneric:
        """
        Add a review.

        If the reviews collection has not been loaded and a session is given,
        the review is added through the session instead of loading them all.
        """
        status = StatusGeneric()
        if num_stars < 0 or num_stars > MAX_STARS:
            return status.add_error(f"This must be between 0 and {MAX_STARS}.", "num_stars")

        review = Review(num_stars=num_stars, comment=comment, voter_name=voter_name)
        if db is not None and self.book_id and 'reviews' in sa_inspect(self).unloaded:
            review.book_id = self.book_id
            db.add(review)
        else:
            self.reviews.append(review)
        return status

    def remove_review(self, review_id: int) -> StatusGeneric:
        status = StatusGeneric()
        review = next((r for r in self.reviews if r.review_id == review_id), None)
        if review is None:
            return status.add_error(f"Could not find the review with id {review_id}.", "review_id")
        self.reviews.remove(review)
        return status

    def add_promotion(self, actual_price: Decimal, promotional_text: str) -> StatusGeneric:
        status = StatusGeneric()
        if not promotional_text or not promotional_text.strip():
            return status.add_error("You must provide some text to go with the promotion.", "promotional_text")
        self._actual_price = actual_price
        self._promotional_text = promotional_text
        return status

    def remove_promotion(self):
        self._actual_price = self._org_price
        self._promotional_text = None

    def validate(self) -> List[str]:
        """Errors checked before saving when validation on save is on"""
        errors = []
        if not self.title or not self.title.strip():
            errors.append("The book title cannot be empty.")
        if self._actual_price is not None and self._actual_price < 0:
            errors.append("The price cannot be negative.")
        return errors


class BookAuthor(Base):
    """Many-to-many link between books and authors, holding the author order"""
    __tablename__ = 'book_authors'

    book_id = Column(Integer, ForeignKey('books.book_id'), primary_key=True)
    author_id = Column(Integer, ForeignKey('authors.author_id'), primary_key=True)
    order = Column(Integer, nullable=False, default=0)

    book = relationship("Book", back_populates="author_links")
    author = relationship("Author", back_populates="books_link")


class Review(Base):
    __tablename__ = 'reviews'

    review_id = Column(Integer, primary_key=True)
    voter_name = Column(String(100))
    num_stars = Column(Integer, nullable=False)
    comment = Column(Text)
    book_id = Column(Integer, ForeignKey('books.book_id'), nullable=False)

    book = relationship("Book", back_populates="reviews")

    __table_args__ = (
        CheckConstraint("num_stars >= 0 AND num_stars <= 5", name="ck_reviews_num_stars"),
    )
