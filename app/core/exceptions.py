"""
Domain exceptions.

Services raise these instead of HTTP errors; ``app.main`` translates them
into JSON responses with the matching status code.
"""


class AppError(Exception):
    """Base exception for business rule violations."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Raised when input data is invalid or violates a domain rule."""

    status_code = 400


class AuthenticationError(AppError):
    """Raised when credentials or the session token are invalid."""

    status_code = 401


class PermissionDeniedError(AppError):
    """Raised when a user lacks permission for an action."""

    status_code = 403


class NotFoundError(AppError):
    """Raised when a requested record does not exist."""

    status_code = 404
