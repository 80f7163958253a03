"""
Application-wide constants.

This module centralizes the magic strings and numbers used by the pages and
services to improve maintainability and reduce duplication.
"""


class ServerConfig:
    """Server configuration constants"""

    HOST = "127.0.0.1"
    PORT = 5000

    @classmethod
    def url(cls) -> str:
        """Get the full server URL"""
        return f"http://{cls.HOST}:{cls.PORT}"


class PageMessages:
    """Flash messages and titles shown by the pages"""

    MESSAGE_QUERY_PARAM = "message"
    ERROR_TITLE = "Error"
    UNEXPECTED_ERROR = "An error occurred while processing your request."


class HTTPStatus:
    """HTTP status codes used throughout the application"""

    # Success
    OK = 200
    SEE_OTHER = 303

    # Client Errors
    BAD_REQUEST = 400
    NOT_FOUND = 404

    # Server Errors
    INTERNAL_SERVER_ERROR = 500
