"""
Tests for GenericService: create, read, update and delete through DTOs and entities.
"""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from dtos.request.author_requests import AuthorDto
from dtos.request.book_requests import AddPromotionDto, AddReviewDto, ChangePubDateDto, CreateBookDto, RemovePromotionDto
from dtos.response.book_responses import AuthorNameDto, BookListDto
from exceptions import MethodMatchError, ValidationError
from generic_services import (
    GenericService,
    GenericServicesConfig,
    GenericServicesRegistry,
    StatusGeneric,
    setup_generic_services,
)
from models import Author, Book, Review
from dependencies import DTO_MODULES


def fresh_service(session_factory, registry):
    return GenericService(session_factory(), registry)


class TestRead:
    def test_read_single_entity(self, db_session, registry, four_books):
        service = GenericService(db_session, registry)

        book = service.read_single(Book, 1)

        assert service.is_valid
        assert book.title == "Refactoring"

    def test_read_single_dto(self, db_session, registry, four_books):
        service = GenericService(db_session, registry)

        dto = service.read_single(AddPromotionDto, 4)

        assert dto.title == "Quantum Networking"
        assert dto.org_price == Decimal("220")
        assert dto.actual_price == Decimal("219")

    def test_read_single_dto_keeps_default_for_missing_value(self, db_session, registry, four_books):
        service = GenericService(db_session, registry)

        dto = service.read_single(AddPromotionDto, 1)

        assert service.is_valid
        assert dto.promotional_text == ""
        assert dto.actual_price == Decimal("40")

    def test_read_single_dto_keeps_none_for_optional_field(self, db_session, registry, four_books):
        service = GenericService(db_session, registry)

        assert service.read_single(RemovePromotionDto, 1).promotional_text is None

    def test_read_single_by_filter(self, db_session, registry, four_books):
        service = GenericService(db_session, registry)

        dto = service.read_single(AuthorDto, name="Eric Evans")

        assert dto.email == "eric@nospam.com"

    def test_read_single_not_found(self, db_session, registry, four_books):
        service = GenericService(db_session, registry)

        assert service.read_single(ChangePubDateDto, 99) is None
        assert not service.is_valid
        assert service.get_all_errors() == "Sorry, I could not find the Book you were looking for."

    def test_wrong_number_of_keys(self, db_session, registry, four_books):
        service = GenericService(db_session, registry)

        with pytest.raises(ValidationError):
            service.read_single(Book, 1, 2)

    def test_read_many_dto_uses_read_mapping(self, db_session, registry, four_books):
        service = GenericService(db_session, registry)

        books = {b.book_id: b for b in service.read_many_no_tracked(BookListDto)}

        assert len(books) == 4
        assert books[2].authors_ordered == "Martin Fowler"
        assert books[4].reviews_count == 2
        assert books[4].average_votes == 5
        assert books[4].on_promotion
        assert books[1].average_votes is None
        assert not books[1].on_promotion

    def test_read_many_with_query(self, db_session, registry, four_books):
        service = GenericService(db_session, registry)
        query = db_session.query(Author).order_by(Author.name)

        names = [a.name for a in service.read_many_no_tracked(AuthorNameDto, query)]

        assert names == ["Eric Evans", "Future Person", "Martin Fowler"]

    def test_read_many_entities_are_detached(self, session_factory, registry, four_books):
        db = session_factory()
        service = GenericService(db, registry)

        authors = service.read_many_no_tracked(Author)

        assert len(authors) == 3
        assert all(author not in db for author in authors)

        authors[0].email = "changed@nospam.com"
        service.update_and_save(AuthorDto(author_id=authors[1].author_id, email="other@nospam.com"))

        assert service.is_valid, service.get_all_errors()
        assert session_factory().query(Author).filter_by(email="changed@nospam.com").count() == 0


class TestUpdate:
    def test_update_via_copy_keeps_read_only_fields(self, session_factory, registry, four_books):
        author_id = session_factory().query(Author).filter_by(name="Eric Evans").one().author_id
        service = fresh_service(session_factory, registry)

        service.update_and_save(AuthorDto(author_id=author_id, name="Someone Else", email="new@nospam.com"))

        assert service.is_valid, service.get_all_errors()
        assert service.message == "Successfully updated the Author"
        author = session_factory().get(Author, author_id)
        assert author.name == "Eric Evans"
        assert author.email == "new@nospam.com"

    def test_update_picks_method_by_fields(self, session_factory, registry, four_books):
        service = fresh_service(session_factory, registry)

        service.update_and_save(ChangePubDateDto(book_id=1, published_on=date(2000, 1, 1)))

        assert service.is_valid, service.get_all_errors()
        assert session_factory().get(Book, 1).published_on == date(2000, 1, 1)

    def test_update_with_named_method(self, session_factory, registry, four_books):
        service = fresh_service(session_factory, registry)

        service.update_and_save(RemovePromotionDto(book_id=4), "remove_promotion")

        assert service.is_valid, service.get_all_errors()
        book = session_factory().get(Book, 4)
        assert book.actual_price == Decimal("220")
        assert book.promotional_text is None

    def test_update_uses_per_dto_config(self, session_factory, registry, four_books):
        service = fresh_service(session_factory, registry)

        service.update_and_save(RemovePromotionDto(book_id=4))

        assert service.is_valid, service.get_all_errors()
        assert session_factory().get(Book, 4).actual_price == Decimal("220")

    def test_add_review_injects_session(self, session_factory, registry, four_books):
        service = fresh_service(session_factory, registry)

        service.update_and_save(AddReviewDto(book_id=1, voter_name="Reader", num_stars=4, comment="Good"))

        assert service.is_valid, service.get_all_errors()
        db = session_factory()
        assert db.query(Review).count() == 3
        assert db.get(Book, 1).reviews[0].voter_name == "Reader"

    def test_entity_method_errors_become_status_errors(self, session_factory, registry, four_books):
        service = fresh_service(session_factory, registry)

        service.update_and_save(AddPromotionDto(book_id=1, actual_price=Decimal("30"), promotional_text=" "))

        assert not service.is_valid
        assert service.get_all_errors() == "You must provide some text to go with the promotion."
        assert session_factory().get(Book, 1).actual_price == Decimal("40")

    def test_update_not_found(self, db_session, registry, four_books):
        service = GenericService(db_session, registry)

        service.update_and_save(ChangePubDateDto(book_id=99, published_on=date(2000, 1, 1)))

        assert service.get_all_errors() == "Sorry, I could not find the Book you wanted to update."
        assert service.message == "Failed with 1 error"

    def test_named_method_that_does_not_fit_raises(self, db_session, registry, four_books):
        service = GenericService(db_session, registry)

        with pytest.raises(MethodMatchError) as exc_info:
            service.update_and_save(ChangePubDateDto(book_id=1), "add_review")

        assert exc_info.value.message.startswith(
            "Could not find a method of name add_review. The method that fit the properties in the DTO/VM are:"
        )

    def test_update_entity_directly(self, db_session, registry, four_books):
        service = GenericService(db_session, registry)
        book = db_session.get(Book, 2)
        book.publisher = "Pearson"

        service.update_and_save(book)

        assert service.message == "Successfully updated the Book"

    def test_validation_on_save(self, session_factory, four_books):
        registry = setup_generic_services(*DTO_MODULES, config=GenericServicesConfig(direct_access_validate_on_save=True))
        db = session_factory()
        service = GenericService(db, registry)
        book = db.get(Book, 2)
        book.title = "   "

        service.update_and_save(book)

        assert service.get_all_errors() == "The book title cannot be empty."
        assert session_factory().get(Book, 2).title == "Patterns of Enterprise Application Architecture"


class TestCreate:
    def test_create_via_factory(self, session_factory, registry, four_books):
        author_ids = [a.author_id for a in session_factory().query(Author).order_by(Author.name)]
        service = fresh_service(session_factory, registry)
        dto = CreateBookDto(
            title="Test Book",
            published_on=date(2020, 1, 1),
            price=Decimal("10"),
            author_ids=author_ids[:2],
        )

        result = service.create_and_save(dto)

        assert service.is_valid, service.get_all_errors()
        assert service.message == "Successfully created a Book"
        assert result is dto
        assert dto.book_id == 5
        book = session_factory().get(Book, 5)
        assert [link.author.name for link in book.author_links] == ["Eric Evans", "Future Person"]

    def test_factory_errors_are_returned(self, db_session, registry, four_books):
        service = GenericService(db_session, registry)

        result = service.create_and_save(CreateBookDto(title="", author_ids=[]))

        assert result is None
        assert len(service.errors) == 2
        assert db_session.query(Book).count() == 4

    def test_create_via_copy(self, session_factory, registry, four_books):
        service = fresh_service(session_factory, registry)

        dto = service.create_and_save(AuthorNameDto(author_id=0, name="Kent Beck"))

        assert service.is_valid, service.get_all_errors()
        assert dto.author_id == 4
        assert session_factory().get(Author, 4).name == "Kent Beck"

    def test_create_entity_directly(self, session_factory, registry, four_books):
        service = fresh_service(session_factory, registry)

        author = service.create_and_save(Author(name="Kent Beck"))

        assert service.message == "Successfully created a Author"
        assert author.author_id is not None

    def test_handled_database_error(self, session_factory, four_books):
        def handler(error, db):
            if isinstance(error, IntegrityError):
                return StatusGeneric().add_error("That author is not valid.")
            return None

        registry = GenericServicesRegistry(GenericServicesConfig(save_changes_exception_handler=handler))
        service = fresh_service(session_factory, registry)

        result = service.create_and_save(Author(name=""))

        assert result is None
        assert service.get_all_errors() == "That author is not valid."

    def test_unhandled_database_error_propagates(self, session_factory, registry, four_books):
        service = fresh_service(session_factory, registry)

        with pytest.raises(IntegrityError):
            service.create_and_save(Author(name=""))


class TestDelete:
    def test_delete(self, session_factory, registry, four_books):
        service = fresh_service(session_factory, registry)

        service.delete_and_save(Book, 4)

        assert service.message == "Successfully deleted a Book"
        db = session_factory()
        assert db.get(Book, 4) is None
        assert db.query(Review).count() == 0

    def test_delete_not_found(self, db_session, registry, four_books):
        service = GenericService(db_session, registry)

        service.delete_and_save(Book, 99)

        assert service.get_all_errors() == "Sorry, I could not find the Book you wanted to delete."

    def test_delete_action_can_stop_delete(self, session_factory, registry, four_books):
        def only_unreviewed(db, book):
            status = StatusGeneric()
            if book.reviews:
                status.add_error("This book has reviews, so it cannot be deleted.")
            return status

        service = fresh_service(session_factory, registry)
        service.delete_with_action_and_save(Book, only_unreviewed, 4)

        assert service.get_all_errors() == "This book has reviews, so it cannot be deleted."
        assert session_factory().get(Book, 4) is not None

        service = fresh_service(session_factory, registry)
        service.delete_with_action_and_save(Book, only_unreviewed, 1)

        assert service.is_valid
        assert session_factory().get(Book, 1) is None


class TestBookMethods:
    def test_remove_review(self, db_session, four_books):
        book = db_session.get(Book, 4)
        review_id = book.reviews[0].review_id

        assert book.remove_review(review_id).is_valid
        db_session.commit()

        assert db_session.query(Review).count() == 1

    def test_remove_missing_review(self, db_session, four_books):
        status = db_session.get(Book, 1).remove_review(99)

        assert status.get_all_errors() == "Could not find the review with id 99."

    def test_add_review_stars_out_of_range(self, db_session, four_books):
        status = db_session.get(Book, 1).add_review(6, "Too good", "Fan")

        assert status.errors[0].member_names == ("num_stars",)
