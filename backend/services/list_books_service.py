"""
List Books Service

Sorts, filters and pages the book list, returning BookListDto rows built by
GenericServices.
"""

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from dtos.internal.sort_filter_page import SortFilterPageOptions
from dtos.response.book_responses import BookListDto
from exceptions import ValidationError
from generic_services import GenericService, GenericServicesRegistry
from repositories.book_repository import BookRepository
from utils.logging_utils import log_operation

logger = logging.getLogger(__name__)


class ListBooksService:
    """Service behind the book list page."""

    def __init__(self, db: Session, registry: GenericServicesRegistry):
        """
        Initialize ListBooksService.

        Args:
            db: Database session
            registry: GenericServices registry holding BookListDto
        """
        self.db = db
        self.book_repo = BookRepository(db)
        self.generic_service = GenericService(db, registry)

    @log_operation("sort_filter_page")
    def sort_filter_page(self, options: SortFilterPageOptions, today: Optional[date] = None) -> List[BookListDto]:
        """
        Get one page of the book list.

        Updates options.num_pages, options.page_num and options.prev_check_state.

        Raises:
            ValidationError: If the filter value is not valid for the filter
        """
        try:
            query = self.book_repo.filter_books(self.book_repo.query(), options.filter_by, options.filter_value, today)
        except ValueError:
            raise ValidationError(
                f"'{options.filter_value}' is not a valid value for {options.filter_by.label}",
                {"filter_value": options.filter_value},
            )

        options.set_up_restore_page(query.count())
        query = self.book_repo.order_books(query, options.order_by)
        query = self.book_repo.page(query, options.offset, options.page_size)

        books = self.generic_service.read_many_no_tracked(BookListDto, query)
        logger.debug(
            f"Book list page {options.page_num}/{options.num_pages}: {len(books)} book(s), "
            f"order={options.order_by.value}, filter={options.filter_by.value}:{options.filter_value}"
        )
        return books
