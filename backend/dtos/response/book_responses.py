"""
Book Response DTOs

Read-only DTOs used to display books and authors.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field
from sqlalchemy.orm import selectinload

from generic_services import LinkToEntity, PerDtoConfig
from models import Author, Book, BookAuthor


class BookListDto(BaseModel, LinkToEntity[Book]):
    """
    One row of the book list.

    authors_ordered is built by the read mapping below; the other fields
    come straight from Book's attributes.
    """

    book_id: int = Field(description="Book ID")
    title: str = Field(description="Book title")
    published_on: date = Field(description="Publication date")
    org_price: Decimal = Field(description="Original price")
    actual_price: Decimal = Field(description="Current selling price")
    promotional_text: Optional[str] = Field(None, description="Promotion text, if on promotion")
    authors_ordered: str = Field("", description="Author names in order")
    reviews_count: int = Field(0, description="Number of reviews")
    average_votes: Optional[float] = Field(None, description="Average stars, None with no reviews")

    @property
    def on_promotion(self) -> bool:
        return self.promotional_text is not None


class BookListConfig(PerDtoConfig[BookListDto, Book]):
    read_mapping = {
        "authors_ordered": lambda book: ", ".join(link.author.name for link in book.author_links),
    }
    read_options = (
        selectinload(Book.reviews),
        selectinload(Book.author_links).selectinload(BookAuthor.author),
    )


class AuthorNameDto(BaseModel, LinkToEntity[Author]):
    """Author id and name for pick lists"""

    author_id: int
    name: str
