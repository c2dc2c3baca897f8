from .user import OwnerSummary
from .booking import (
    BookingBase,
    BookingCreate,
    BookingUpdate,
    BookingResponse,
    BookingDeleteResponse,
    BookingEquipmentLine,
    EquipmentSummary,
    RoomSummary,
    StudioSummary,
    BusySlot,
    RoomAvailabilityResponse,
)

__all__ = [
    "OwnerSummary",
    "BookingBase",
    "BookingCreate",
    "BookingUpdate",
    "BookingResponse",
    "BookingDeleteResponse",
    "BookingEquipmentLine",
    "EquipmentSummary",
    "RoomSummary",
    "StudioSummary",
    "BusySlot",
    "RoomAvailabilityResponse",
]
