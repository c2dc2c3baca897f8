from typing import Dict, Optional, Type
from fastapi import HTTPException, status
import logging

logger = logging.getLogger(__name__)


class BookingError(Exception):
    """Base class for typed failures raised by the booking engine.

    The engine never deals in transport status codes; the HTTP layer maps
    each subclass through ``http_status_for``.
    """

    def __init__(self, message: str, field_errors: Optional[Dict[str, str]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.field_errors = dict(field_errors or {})


class ValidationError(BookingError):
    """Malformed input, invalid interval ordering or an illegal status transition."""


class NotFoundError(BookingError):
    """Room, equipment, booking or staff assignment is absent."""


class StaffAssignmentNotFound(NotFoundError):
    """A staff principal has no studio assignment to scope their access by."""


class ConflictError(BookingError):
    """An active booking on the same room overlaps the requested interval."""


class ForbiddenError(BookingError):
    """The principal may not perform the action on this booking."""


class UnauthenticatedError(BookingError):
    """No valid identity context accompanies the request."""


_HTTP_STATUS: Dict[Type[BookingError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    UnauthenticatedError: status.HTTP_401_UNAUTHORIZED,
}


def http_status_for(exc: BookingError) -> int:
    for cls in type(exc).__mro__:
        if cls in _HTTP_STATUS:
            return _HTTP_STATUS[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(
    message: str,
    field_errors: Dict[str, str],
    code: int = status.HTTP_422_UNPROCESSABLE_ENTITY,
) -> HTTPException:
    """Return an HTTPException with a consistent structure and log details."""
    logger.error("%s %s", message, field_errors)
    detail = {"message": message, "field_errors": field_errors}
    return HTTPException(status_code=code, detail=detail)
