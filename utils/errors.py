"""Application error taxonomy.

Every error raised on purpose by the auth core is an `AppError`. The exception
handlers registered in `middleware.error_handler` turn them into the
`{"success": false, "message": ...}` envelope with the matching status code.
"""

from fastapi import status


class AppError(Exception):
    """Base class for expected application errors.

    Args:
        message (str): Human readable description, safe to return to clients when operational.
        status_code (int, optional): HTTP status code. Defaults to the class default.
    """

    default_status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    is_operational: bool = True

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code or self.default_status_code

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, status_code={self.status_code})"


class ConfigError(AppError):
    """Missing secret or other misconfiguration. Never caused by the caller."""

    is_operational = False


class ValidationError(AppError):
    """Malformed or missing input."""

    default_status_code = status.HTTP_400_BAD_REQUEST


class AuthError(AppError):
    """Credential or token failure (401, or 403 for stale/superseded tokens)."""

    default_status_code = status.HTTP_401_UNAUTHORIZED


class InvalidTokenError(AuthError):
    """Token is malformed, badly signed or expired."""


class ConflictError(AppError):
    """Uniqueness violation."""

    default_status_code = status.HTTP_409_CONFLICT


class InternalError(AppError):
    """Unexpected downstream failure wrapped before it reaches the transport layer."""
