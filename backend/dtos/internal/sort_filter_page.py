"""
Internal Sort/Filter/Page DTOs

Options for the book list, passed from the page to ListBooksService.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

PAGE_SIZES = [5, 10, 20, 50, 100, 500]
DEFAULT_PAGE_SIZE = 10
COMING_SOON_FILTER = "Coming Soon"


class OrderByOptions(str, Enum):
    SIMPLE_ORDER = "simple_order"
    BY_VOTES = "by_votes"
    BY_PUBLICATION_DATE = "by_publication_date"
    BY_PRICE_LOWEST_FIRST = "by_price_lowest_first"
    BY_PRICE_HIGHEST_FIRST = "by_price_highest_first"

    @property
    def label(self) -> str:
        return {
            OrderByOptions.SIMPLE_ORDER: "Sort by...",
            OrderByOptions.BY_VOTES: "Votes ↑",
            OrderByOptions.BY_PUBLICATION_DATE: "Publication Date ↑",
            OrderByOptions.BY_PRICE_LOWEST_FIRST: "Price ↓",
            OrderByOptions.BY_PRICE_HIGHEST_FIRST: "Price ↑",
        }[self]


class BooksFilterBy(str, Enum):
    NO_FILTER = "no_filter"
    BY_VOTES = "by_votes"
    BY_PUBLICATION_YEAR = "by_publication_year"

    @property
    def label(self) -> str:
        return {
            BooksFilterBy.NO_FILTER: "Filter by...",
            BooksFilterBy.BY_VOTES: "By Votes...",
            BooksFilterBy.BY_PUBLICATION_YEAR: "By Year published...",
        }[self]


@dataclass(frozen=True)
class DropdownOption:
    value: str
    text: str


@dataclass
class SortFilterPageOptions:
    """
    Sort, filter and paging choices for the book list.

    prev_check_state remembers the filter and page size used to produce the
    page the user is looking at; when either changes the list goes back to
    page 1.
    """

    order_by: OrderByOptions = OrderByOptions.SIMPLE_ORDER
    filter_by: BooksFilterBy = BooksFilterBy.NO_FILTER
    filter_value: Optional[str] = None
    page_num: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    num_pages: int = 1
    prev_check_state: Optional[str] = None
    page_sizes: List[int] = field(default_factory=lambda: list(PAGE_SIZES))

    def check_state(self) -> str:
        return f"{self.filter_by.value}|{self.filter_value or ''}|{self.page_size}"

    def set_up_restore_page(self, total_count: int) -> None:
        """
        Work out the number of pages and fix up the page number.

        Args:
            total_count: Number of books after filtering
        """
        if self.page_size not in self.page_sizes:
            self.page_size = DEFAULT_PAGE_SIZE
        self.num_pages = max(1, math.ceil(total_count / self.page_size))

        new_state = self.check_state()
        if self.prev_check_state is not None and self.prev_check_state != new_state:
            self.page_num = 1
        self.page_num = min(max(1, self.page_num), self.num_pages)
        self.prev_check_state = new_state

    @property
    def offset(self) -> int:
        return (self.page_num - 1) * self.page_size
