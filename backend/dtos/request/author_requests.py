"""
Author Request DTOs
"""

from typing import Annotated, Optional

from pydantic import BaseModel, Field

from generic_services import LinkToEntity, ReadOnly
from models import Author


class AuthorDto(BaseModel, LinkToEntity[Author]):
    """
    Form for editing an author's email.

    The name is shown but read-only, so an update only ever changes the email.
    """

    author_id: int = Field(0, description="Author ID")
    name: Annotated[str, ReadOnly] = Field("", description="Author name, shown only")
    email: Optional[str] = Field(None, max_length=256, description="Contact email")
