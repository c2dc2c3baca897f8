from .json_utils import dumps
from .errors import (
    BookingError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    StaffAssignmentNotFound,
    UnauthenticatedError,
    ValidationError,
    error_response,
    http_status_for,
)
