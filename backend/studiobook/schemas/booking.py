from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Annotated
from datetime import date, datetime, timezone
from decimal import Decimal
from ..models.booking_status import BookingStatus, PaymentStatus
from .user import OwnerSummary


def _to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Offsets are converted to UTC; naive values are taken as UTC already."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


# Shared properties for Booking
class BookingBase(BaseModel):
    room_id: int
    start_time: datetime
    end_time: datetime
    notes: Optional[str] = None


# Properties to receive on item creation. The owner is always the caller.
class BookingCreate(BookingBase):
    # Repeating an id raises that line's quantity.
    equipment_ids: List[int] = Field(default_factory=list)

    @field_validator("start_time", "end_time", mode="after")
    @classmethod
    def normalize_instant(cls, value: datetime) -> datetime:
        return _to_naive_utc(value)


# Partial update. Only fields present in the request body are applied, see
# ``model_fields_set``; an explicit null is distinct from an omitted field.
class BookingUpdate(BaseModel):
    status: Optional[BookingStatus] = None
    payment_status: Optional[PaymentStatus] = None
    notes: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    model_config = {"extra": "forbid"}

    @field_validator("start_time", "end_time", mode="after")
    @classmethod
    def normalize_instant(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _to_naive_utc(value)


class StudioSummary(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


class RoomSummary(BaseModel):
    id: int
    name: str
    hourly_rate: Annotated[Decimal, Field()]
    studio: StudioSummary

    model_config = {"from_attributes": True}


class EquipmentSummary(BaseModel):
    id: int
    name: str
    daily_rate: Annotated[Decimal, Field()]

    model_config = {"from_attributes": True}


class BookingEquipmentLine(BaseModel):
    equipment_id: int
    quantity: int
    equipment: EquipmentSummary

    model_config = {"from_attributes": True}


# Properties to return to client
class BookingResponse(BookingBase):
    id: int
    owner_id: int
    status: BookingStatus
    payment_status: PaymentStatus
    total_price: Annotated[Decimal, Field()]
    created_at: datetime
    updated_at: datetime

    room: Optional[RoomSummary] = None
    owner: Optional[OwnerSummary] = None
    equipment_items: List[BookingEquipmentLine] = Field(default_factory=list)

    model_config = {
        "from_attributes": True
    }


class BookingDeleteResponse(BaseModel):
    id: int
    message: str = "Booking deleted successfully"


class BusySlot(BaseModel):
    start_time: datetime
    end_time: datetime
    status: BookingStatus

    model_config = {"from_attributes": True}


class RoomAvailabilityResponse(BaseModel):
    room_id: int
    day: date
    busy: List[BusySlot] = Field(default_factory=list)
