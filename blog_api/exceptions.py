"""
Exceptions raised by blog_api views.

Views raise these and ``ApiErrorMiddleware`` renders them as the standard
JSON error envelope.
"""


class ApiError(Exception):
    """An error that maps directly onto an HTTP response."""

    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message=None, status_code=None, errors=None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.errors = errors
        super().__init__(self.message)

    def __str__(self):
        return f"{self.status_code}: {self.message}"


class BadRequest(ApiError):
    status_code = 400
    default_message = "Bad request"


class Unauthorized(ApiError):
    status_code = 401
    default_message = "Authentication required"


class Forbidden(ApiError):
    status_code = 403
    default_message = "Insufficient permissions"


class NotFound(ApiError):
    status_code = 404
    default_message = "Not found"


class PayloadTooLarge(ApiError):
    status_code = 413
    default_message = "Request body too large"


class TooManyRequests(ApiError):
    status_code = 429
    default_message = "Too many requests, try again later"


class TokenError(Exception):
    """Raised when a JWT cannot be decoded or has expired."""
