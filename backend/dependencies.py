"""
Dependency injection providers for FastAPI.

This module provides factory functions for creating repository and service instances,
following the Dependency Inversion Principle. The GenericServices registry is
built once at startup and kept on app.state; everything else is created per request.
"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from database import get_db
from dtos.request import author_requests, book_requests
from dtos.response import book_responses
from generic_services import GenericService, GenericServicesConfig, GenericServicesRegistry, setup_generic_services
from repositories.book_repository import AuthorRepository
from services.book_filter_dropdown_service import BookFilterDropdownService
from services.list_books_service import ListBooksService

DTO_MODULES = (book_requests, author_requests, book_responses)


def build_generic_services_registry(config: GenericServicesConfig | None = None) -> GenericServicesRegistry:
    """
    Register every DTO the pages use.

    Raises:
        ConfigurationError: If any DTO does not fit its entity
    """
    return setup_generic_services(*DTO_MODULES, config=config)


def get_registry(request: Request) -> GenericServicesRegistry:
    """The GenericServices registry built at startup"""
    return request.app.state.generic_services


def get_generic_service(
    db: Session = Depends(get_db),
    registry: GenericServicesRegistry = Depends(get_registry),
) -> GenericService:
    """
    Factory function for creating GenericService instances.

    Args:
        db: Database session (injected)
        registry: GenericServices registry (injected)

    Returns:
        GenericService for this request
    """
    return GenericService(db, registry)


def get_list_books_service(
    db: Session = Depends(get_db),
    registry: GenericServicesRegistry = Depends(get_registry),
) -> ListBooksService:
    return ListBooksService(db, registry)


def get_filter_dropdown_service(db: Session = Depends(get_db)) -> BookFilterDropdownService:
    return BookFilterDropdownService(db)


def get_author_repository(db: Session = Depends(get_db)) -> AuthorRepository:
    return AuthorRepository(db)
