"""
Custom exception classes for the application.

This module defines domain-specific exceptions that provide better error handling
and clearer error messages throughout the application.
"""


class ApplicationError(Exception):
    """Base exception for all application errors"""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(ApplicationError):
    """Raised when GenericServices or the app is set up incorrectly"""

    def __init__(self, message: str, problems: list[str] | None = None):
        details = {"problems": problems} if problems else {}
        super().__init__(message, details)


class MethodMatchError(ApplicationError):
    """Raised when no entity method/ctor fits a DTO"""

    def __init__(self, message: str, entity_name: str | None = None, dto_name: str | None = None):
        details = {}
        if entity_name:
            details["entity"] = entity_name
        if dto_name:
            details["dto"] = dto_name
        super().__init__(message, details)


class ValidationError(ApplicationError):
    """Raised when validation fails"""

    def __init__(self, message: str, invalid_fields: dict | None = None):
        details = {"invalid_fields": invalid_fields} if invalid_fields else {}
        super().__init__(message, details)


class DatabaseError(ApplicationError):
    """Raised when database operations fail"""

    def __init__(self, operation: str, message: str):
        details = {"operation": operation}
        super().__init__(message, details)
