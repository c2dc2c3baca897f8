from .user import User, UserRole
from .studio import Studio, Room, StaffAssignment
from .equipment import Equipment, BookingEquipment
from .booking import Booking
from .booking_status import BookingStatus, PaymentStatus, ACTIVE_BOOKING_STATUSES

__all__ = [
    "User",
    "UserRole",
    "Studio",
    "Room",
    "StaffAssignment",
    "Equipment",
    "BookingEquipment",
    "Booking",
    "BookingStatus",
    "PaymentStatus",
    "ACTIVE_BOOKING_STATUSES",
]
