"""
Tests for GenericServiceAsync over an aiosqlite database.
"""

from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from database import Base, make_async_engine
from dtos.request.author_requests import AuthorDto
from dtos.request.book_requests import AddReviewDto, ChangePubDateDto, RemovePromotionDto
from dtos.response.book_responses import BookListDto
from exceptions import MethodMatchError
from generic_services import GenericServiceAsync
from models import Author, Book, Review
from services.book_seed import seed_database_four_books


@pytest_asyncio.fixture
async def async_session_factory():
    engine = make_async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as db:
        await db.run_sync(seed_database_four_books)

    yield factory
    await engine.dispose()


class TestGenericServiceAsync:
    @pytest.mark.asyncio
    async def test_read_single_dto(self, async_session_factory, registry):
        async with async_session_factory() as db:
            service = GenericServiceAsync(db, registry)

            dto = await service.read_single_async(ChangePubDateDto, 3)

        assert service.is_valid
        assert dto.title == "Domain-Driven Design"
        assert dto.published_on == date(2003, 8, 30)

    @pytest.mark.asyncio
    async def test_read_many(self, async_session_factory, registry):
        async with async_session_factory() as db:
            service = GenericServiceAsync(db, registry)

            books = await service.read_many_no_tracked_async(BookListDto)

        assert sorted(b.book_id for b in books) == [1, 2, 3, 4]

    @pytest.mark.asyncio
    async def test_update_via_copy(self, async_session_factory, registry):
        async with async_session_factory() as db:
            author_id = await db.scalar(select(Author.author_id).where(Author.name == "Martin Fowler"))
            service = GenericServiceAsync(db, registry)

            await service.update_and_save_async(AuthorDto(author_id=author_id, name="Not Used", email="mf@nospam.com"))

        assert service.message == "Successfully updated the Author"
        async with async_session_factory() as db:
            author = await db.get(Author, author_id)
        assert author.name == "Martin Fowler"
        assert author.email == "mf@nospam.com"

    @pytest.mark.asyncio
    async def test_update_default_method(self, async_session_factory, registry):
        async with async_session_factory() as db:
            service = GenericServiceAsync(db, registry)

            await service.update_and_save_async(ChangePubDateDto(book_id=1, published_on=date(2000, 1, 1)))

        assert service.is_valid, service.get_all_errors()
        async with async_session_factory() as db:
            assert (await db.get(Book, 1)).published_on == date(2000, 1, 1)

    @pytest.mark.asyncio
    async def test_update_named_method(self, async_session_factory, registry):
        async with async_session_factory() as db:
            service = GenericServiceAsync(db, registry)

            await service.update_and_save_async(RemovePromotionDto(book_id=4), "remove_promotion")

        assert service.is_valid, service.get_all_errors()
        async with async_session_factory() as db:
            assert (await db.get(Book, 4)).actual_price == Decimal("220")

    @pytest.mark.asyncio
    async def test_add_review(self, async_session_factory, registry):
        async with async_session_factory() as db:
            service = GenericServiceAsync(db, registry)

            await service.update_and_save_async(AddReviewDto(book_id=1, voter_name="Reader", num_stars=3, comment="Fine"))

        assert service.is_valid, service.get_all_errors()
        async with async_session_factory() as db:
            assert await db.scalar(select(func.count(Review.review_id))) == 3

    @pytest.mark.asyncio
    async def test_named_method_that_does_not_fit(self, async_session_factory, registry):
        async with async_session_factory() as db:
            service = GenericServiceAsync(db, registry)

            with pytest.raises(MethodMatchError) as exc_info:
                await service.update_and_save_async(ChangePubDateDto(book_id=1), "add_review")

        assert exc_info.value.message.startswith(
            "Could not find a method of name add_review. The method that fit the properties in the DTO/VM are:"
        )

    @pytest.mark.asyncio
    async def test_delete_not_found(self, async_session_factory, registry):
        async with async_session_factory() as db:
            service = GenericServiceAsync(db, registry)

            await service.delete_and_save_async(Book, 99)

        assert service.get_all_errors() == "Sorry, I could not find the Book you wanted to delete."
