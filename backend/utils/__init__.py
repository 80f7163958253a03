"""
Logging set-up and the error-to-HTTP mapping shared by the pages.
"""

from .error_handlers import handle_api_errors, status_for_error
from .logging_utils import configure_logging, log_operation

__all__ = ["configure_logging", "handle_api_errors", "log_operation", "status_for_error"]
