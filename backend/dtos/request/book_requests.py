"""
Book Request DTOs

DTOs behind the book forms. Each links to the Book entity; GenericServices
matches their fields to Book's methods by name.
"""

from datetime import date
from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import BaseModel, Field

from generic_services import LinkToEntity, PerDtoConfig, ReadOnly
from models import Book


class AddReviewDto(BaseModel, LinkToEntity[Book]):
    """Form for adding a review. Updates via Book.add_review."""

    book_id: int = Field(0, description="Book ID")
    title: Annotated[str, ReadOnly] = Field("", description="Book title, shown only")
    voter_name: str = Field("", max_length=100, description="Name of the reviewer")
    num_stars: int = Field(5, ge=0, le=5, description="Stars given, 0 to 5")
    comment: str = Field("", description="Review text")


class ChangePubDateDto(BaseModel, LinkToEntity[Book]):
    """Form for changing the publication date. Updates via Book.update_published_on."""

    book_id: int = Field(0, description="Book ID")
    title: Annotated[str, ReadOnly] = Field("", description="Book title, shown only")
    published_on: date = Field(default_factory=date.today, description="New publication date")


class AddPromotionDto(BaseModel, LinkToEntity[Book]):
    """Form for putting a book on promotion. Updates via Book.add_promotion."""

    book_id: int = Field(0, description="Book ID")
    title: Annotated[str, ReadOnly] = Field("", description="Book title, shown only")
    org_price: Annotated[Decimal, ReadOnly] = Field(Decimal("0"), description="Original price, shown only")
    actual_price: Decimal = Field(Decimal("0"), ge=0, description="Promotional price")
    promotional_text: str = Field("", max_length=200, description="Text shown with the promotion")


class RemovePromotionDto(BaseModel, LinkToEntity[Book]):
    """Confirmation form for ending a promotion."""

    book_id: int = Field(0, description="Book ID")
    title: Annotated[str, ReadOnly] = ""
    org_price: Annotated[Decimal, ReadOnly] = Decimal("0")
    actual_price: Annotated[Decimal, ReadOnly] = Decimal("0")
    promotional_text: Annotated[Optional[str], ReadOnly] = None


class RemovePromotionConfig(PerDtoConfig[RemovePromotionDto, Book]):
    update_method = "remove_promotion"


class CreateBookDto(BaseModel, LinkToEntity[Book]):
    """Form for adding a book. Creates via Book.create_book."""

    book_id: int = Field(0, description="Set to the new book's ID once created")
    title: str = Field("", max_length=256)
    description: Optional[str] = None
    published_on: date = Field(default_factory=date.today)
    publisher: Optional[str] = Field(None, max_length=64)
    price: Decimal = Field(Decimal("0"), ge=0)
    image_url: Optional[str] = Field(None, max_length=512)
    author_ids: List[int] = Field(default_factory=list, description="Authors, in order")
