"""
Error handling decorators and utilities for API endpoints.

This module implements the DRY principle by centralizing the mapping from
application exceptions to HTTP responses.
"""

import inspect
from functools import wraps
from typing import Callable, Tuple
from fastapi import HTTPException
import logging

from constants import HTTPStatus
from exceptions import (
    ApplicationError,
    ConfigurationError,
    DatabaseError,
    MethodMatchError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def status_for_error(error: ApplicationError) -> Tuple[int, str]:
    """
    HTTP status code and detail text for an application error.

    Args:
        error: The application error raised

    Returns:
        (status code, detail)
    """
    if isinstance(error, ValidationError):
        return HTTPStatus.BAD_REQUEST, error.message
    if isinstance(error, MethodMatchError):
        return HTTPStatus.INTERNAL_SERVER_ERROR, f"No entity method fits: {error.message}"
    if isinstance(error, ConfigurationError):
        return HTTPStatus.INTERNAL_SERVER_ERROR, f"Configuration error: {error.message}"
    if isinstance(error, DatabaseError):
        return HTTPStatus.INTERNAL_SERVER_ERROR, f"Database operation failed: {error.message}"
    return HTTPStatus.INTERNAL_SERVER_ERROR, error.message


def _to_http_exception(operation_name: str, error: ApplicationError) -> HTTPException:
    status_code, detail = status_for_error(error)
    if status_code < HTTPStatus.INTERNAL_SERVER_ERROR:
        logger.warning(f"{operation_name} - {type(error).__name__}: {error.message}")
    else:
        logger.error(f"{operation_name} - {type(error).__name__}: {error.message}", exc_info=True)
    return HTTPException(status_code=status_code, detail=detail)


def handle_api_errors(operation_name: str):
    """
    Decorator to handle common API errors consistently across endpoints.

    This decorator catches application exceptions and converts them
    to HTTPException responses with consistent error messages.

    Args:
        operation_name: Human-readable name of the operation (e.g., "Filter values")

    Returns:
        Decorated function that handles errors uniformly

    Example:
        @router.get("/filter-values")
        @handle_api_errors("Filter values")
        def filter_values(...):
            return service.get_filter_drop_down_values(filter_by)
    """
    def decorator(func: Callable):
        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except ApplicationError as e:
                raise _to_http_exception(operation_name, e)

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except ApplicationError as e:
                raise _to_http_exception(operation_name, e)

        # Return appropriate wrapper based on whether the function is async
        if inspect.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator
