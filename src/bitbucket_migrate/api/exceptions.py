"""Hosting provider API exceptions."""

from typing import Any, Optional


class APIError(Exception):
    """Base exception for hosting provider API errors."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_data: Any = None,
        payload: Any = None,
    ):
        """Initialize API error.

        Args:
            message: Error message
            status_code: HTTP status code
            response_data: Decoded response body from API
            payload: Request body that was sent
        """
        super().__init__(message)
        self.status_code = status_code
        self.response_data = response_data
        self.payload = payload


class AuthenticationError(APIError):
    """Authentication error with the API."""

    pass


class ForbiddenError(APIError):
    """Permission denied error."""

    pass


class NotFoundError(APIError):
    """Resource not found error."""

    pass


class RateLimitError(APIError):
    """Rate limit exceeded error."""

    def __init__(self, message: str, retry_after: int = 60, **kwargs):
        """Initialize rate limit error.

        Args:
            message: Error message
            retry_after: Seconds to wait before retry
            **kwargs: Additional arguments for base class
        """
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class SchemaValidationError(APIError):
    """Response body does not have the expected shape."""

    pass
