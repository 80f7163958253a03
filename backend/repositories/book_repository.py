"""
Book repository: the sort, filter and page queries behind the book list.
"""

from datetime import date
from typing import List, Optional

from sqlalchemy import extract
from sqlalchemy.orm import Query, Session

from dtos.internal.sort_filter_page import BooksFilterBy, COMING_SOON_FILTER, OrderByOptions
from models import Author, Book
from .base_repository import BaseRepository


class BookRepository(BaseRepository[Book]):
    """Repository for Book model queries."""

    def __init__(self, db: Session):
        super().__init__(db, Book)

    def filter_books(self, query: Query, filter_by: BooksFilterBy, filter_value: Optional[str], today: Optional[date] = None) -> Query:
        """
        Apply a list filter.

        Args:
            query: Query over Book
            filter_by: Which filter to apply
            filter_value: Minimum stars for BY_VOTES; a year or "Coming Soon"
                for BY_PUBLICATION_YEAR. An empty value means no filter.
            today: Date that separates published from coming-soon books

        Raises:
            ValueError: If the filter value is not a number where one is needed
        """
        if not filter_value or filter_by == BooksFilterBy.NO_FILTER:
            return query
        today = today or date.today()

        if filter_by == BooksFilterBy.BY_VOTES:
            return query.filter(Book.average_votes >= int(filter_value))

        if filter_value == COMING_SOON_FILTER:
            return query.filter(Book.published_on > today)
        return query.filter(
            extract('year', Book.published_on) == int(filter_value),
            Book.published_on <= today,
        )

    def order_books(self, query: Query, order_by: OrderByOptions) -> Query:
        if order_by == OrderByOptions.BY_VOTES:
            return query.order_by(Book.average_votes.desc().nulls_last(), Book.book_id.desc())
        if order_by == OrderByOptions.BY_PUBLICATION_DATE:
            return query.order_by(Book.published_on.desc())
        if order_by == OrderByOptions.BY_PRICE_LOWEST_FIRST:
            return query.order_by(Book.actual_price.asc(), Book.book_id)
        if order_by == OrderByOptions.BY_PRICE_HIGHEST_FIRST:
            return query.order_by(Book.actual_price.desc(), Book.book_id)
        return query.order_by(Book.book_id.desc())

    def page(self, query: Query, offset: int, page_size: int) -> Query:
        return query.offset(offset).limit(page_size)

    def get_published_years(self, today: Optional[date] = None) -> List[int]:
        """Distinct years of already published books, newest first"""
        today = today or date.today()
        year = extract('year', Book.published_on)
        rows = (
            self.db.query(year)
            .filter(Book.published_on <= today)
            .distinct()
            .order_by(year.desc())
            .all()
        )
        return [int(row[0]) for row in rows]

    def any_coming_soon(self, today: Optional[date] = None) -> bool:
        today = today or date.today()
        return self.query().filter(Book.published_on > today).count() > 0


class AuthorRepository(BaseRepository[Author]):
    """Repository for Author model queries."""

    def __init__(self, db: Session):
        super().__init__(db, Author)

    def ordered_by_name(self) -> Query:
        return self.query().order_by(Author.name)
