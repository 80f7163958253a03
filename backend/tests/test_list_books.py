"""
Tests for sorting, filtering and paging the book list, and for the filter dropdown.
"""

from datetime import date

import pytest

from dtos.internal.sort_filter_page import BooksFilterBy, COMING_SOON_FILTER, OrderByOptions, SortFilterPageOptions
from exceptions import ValidationError
from services.book_filter_dropdown_service import BookFilterDropdownService, VOTE_FILTER_OPTIONS
from services.list_books_service import ListBooksService

TODAY = date(2026, 10, 19)


@pytest.fixture
def list_service(db_session, registry, four_books):
    return ListBooksService(db_session, registry)


def titles(books):
    return [book.title for book in books]


class TestSortFilterPageOptions:
    def test_num_pages(self):
        options = SortFilterPageOptions(page_size=5)

        options.set_up_restore_page(11)

        assert options.num_pages == 3

    def test_page_num_clamped(self):
        options = SortFilterPageOptions(page_size=5, page_num=9)

        options.set_up_restore_page(11)

        assert options.page_num == 3
        assert options.offset == 10

    def test_empty_list_has_one_page(self):
        options = SortFilterPageOptions()

        options.set_up_restore_page(0)

        assert options.num_pages == 1
        assert options.page_num == 1

    def test_changing_filter_goes_back_to_first_page(self):
        options = SortFilterPageOptions(page_size=5, page_num=2)
        options.set_up_restore_page(20)
        previous_state = options.prev_check_state

        changed = SortFilterPageOptions(
            page_size=5, page_num=2, filter_by=BooksFilterBy.BY_VOTES, filter_value="4", prev_check_state=previous_state,
        )
        changed.set_up_restore_page(20)

        assert changed.page_num == 1

    def test_same_state_keeps_page(self):
        options = SortFilterPageOptions(page_size=5, page_num=2)
        options.set_up_restore_page(20)

        again = SortFilterPageOptions(page_size=5, page_num=3, prev_check_state=options.prev_check_state)
        again.set_up_restore_page(20)

        assert again.page_num == 3

    def test_unknown_page_size_replaced(self):
        options = SortFilterPageOptions(page_size=7)

        options.set_up_restore_page(4)

        assert options.page_size == 10


class TestListBooksService:
    def test_default_order_is_newest_first(self, list_service):
        books = list_service.sort_filter_page(SortFilterPageOptions(), TODAY)

        assert [b.book_id for b in books] == [4, 3, 2, 1]

    def test_order_by_price(self, list_service):
        lowest = list_service.sort_filter_page(SortFilterPageOptions(order_by=OrderByOptions.BY_PRICE_LOWEST_FIRST), TODAY)
        highest = list_service.sort_filter_page(SortFilterPageOptions(order_by=OrderByOptions.BY_PRICE_HIGHEST_FIRST), TODAY)

        assert titles(lowest)[0] == "Refactoring"
        assert titles(highest)[0] == "Quantum Networking"

    def test_order_by_publication_date(self, list_service):
        books = list_service.sort_filter_page(SortFilterPageOptions(order_by=OrderByOptions.BY_PUBLICATION_DATE), TODAY)

        assert titles(books)[0] == "Quantum Networking"
        assert titles(books)[-1] == "Refactoring"

    def test_order_by_votes(self, list_service):
        books = list_service.sort_filter_page(SortFilterPageOptions(order_by=OrderByOptions.BY_VOTES), TODAY)

        assert titles(books)[0] == "Quantum Networking"

    def test_filter_by_votes(self, list_service):
        options = SortFilterPageOptions(filter_by=BooksFilterBy.BY_VOTES, filter_value="4")

        assert titles(list_service.sort_filter_page(options, TODAY)) == ["Quantum Networking"]

    def test_filter_by_year(self, list_service):
        options = SortFilterPageOptions(filter_by=BooksFilterBy.BY_PUBLICATION_YEAR, filter_value="2002")

        assert titles(list_service.sort_filter_page(options, TODAY)) == ["Patterns of Enterprise Application Architecture"]

    def test_filter_coming_soon(self, list_service):
        options = SortFilterPageOptions(filter_by=BooksFilterBy.BY_PUBLICATION_YEAR, filter_value=COMING_SOON_FILTER)

        assert titles(list_service.sort_filter_page(options, TODAY)) == ["Quantum Networking"]

    def test_empty_filter_value_means_no_filter(self, list_service):
        options = SortFilterPageOptions(filter_by=BooksFilterBy.BY_VOTES, filter_value=None)

        assert len(list_service.sort_filter_page(options, TODAY)) == 4

    def test_bad_filter_value(self, list_service):
        options = SortFilterPageOptions(filter_by=BooksFilterBy.BY_VOTES, filter_value="lots")

        with pytest.raises(ValidationError):
            list_service.sort_filter_page(options, TODAY)

    def test_paging(self, list_service):
        options = SortFilterPageOptions(page_size=5)
        options.page_sizes = [2, 5]
        options.page_size = 2
        options.page_num = 2

        books = list_service.sort_filter_page(options, TODAY)

        assert options.num_pages == 2
        assert [b.book_id for b in books] == [2, 1]

    def test_list_rows(self, list_service):
        books = {b.book_id: b for b in list_service.sort_filter_page(SortFilterPageOptions(), TODAY)}

        assert books[3].authors_ordered == "Eric Evans"
        assert books[4].promotional_text == "Save $1 if you order 40 years ahead!"
        assert books[4].reviews_count == 2


class TestBookFilterDropdownService:
    def test_no_filter_has_no_values(self, db_session, four_books):
        service = BookFilterDropdownService(db_session)

        assert service.get_filter_drop_down_values(BooksFilterBy.NO_FILTER) == []

    def test_vote_values(self, db_session, four_books):
        service = BookFilterDropdownService(db_session)

        assert service.get_filter_drop_down_values(BooksFilterBy.BY_VOTES) == VOTE_FILTER_OPTIONS

    def test_year_values(self, db_session, four_books):
        service = BookFilterDropdownService(db_session)

        values = service.get_filter_drop_down_values(BooksFilterBy.BY_PUBLICATION_YEAR, TODAY)

        assert [v.value for v in values] == [COMING_SOON_FILTER, "2003", "2002", "1999"]

    def test_year_values_without_future_books(self, db_session, four_books):
        service = BookFilterDropdownService(db_session)

        values = service.get_filter_drop_down_values(BooksFilterBy.BY_PUBLICATION_YEAR, date(2100, 1, 1))

        assert [v.value for v in values] == ["2057", "2003", "2002", "1999"]
