"""
Portal error taxonomy.

Each error carries the HTTP status it is rendered with; ``main.py`` turns any
``PortalError`` into the standard ``{errCode, msg, data}`` envelope.
"""
from typing import Any, Optional


class PortalError(Exception):
    """Base class for errors raised by services and CRUD helpers"""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        data: Any = None,
    ) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)
        if status_code is not None:
            self.status_code = status_code
        self.data = data


class ValidationError(PortalError):
    """Missing or malformed input"""
    status_code = 400
    default_message = "Invalid request"


class AuthError(PortalError):
    """Missing/invalid credential, or a locked/disabled account"""
    status_code = 401
    default_message = "Please log in first"


class ForbiddenError(PortalError):
    status_code = 403
    default_message = "You do not have permission to perform this action"


class NotFoundError(PortalError):
    """Resource absent or not owned by the caller"""
    status_code = 404
    default_message = "Resource not found"


class ConflictError(PortalError):
    """Duplicate names, exceeded caps. Rendered as 400 unless told otherwise."""
    status_code = 400
    default_message = "Resource conflict"


class DependencyError(PortalError):
    """
    An upstream main-system call failed or timed out.

    Reserved for the read-through proxy routes, which this service does not host.
    """
    status_code = 502
    default_message = "Upstream service unavailable"


class StorageError(PortalError):
    """A database statement failed"""
    status_code = 500
    default_message = "Database operation failed"
