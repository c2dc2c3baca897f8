# backend/studiobook/models/booking.py

from sqlalchemy import CheckConstraint, Column, Integer, DateTime, Numeric, ForeignKey, String
from sqlalchemy.orm import relationship

from .base import BaseModel, value_enum
from .booking_status import BookingStatus, PaymentStatus


class Booking(BaseModel):
    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("end_time > start_time", name="ck_bookings_interval"),
        CheckConstraint("total_price >= 0", name="ck_bookings_total_price"),
    )

    id             = Column(Integer, primary_key=True, index=True)
    room_id        = Column(Integer, ForeignKey("rooms.id"), nullable=False, index=True)
    owner_id       = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    start_time     = Column(DateTime, nullable=False, index=True)
    end_time       = Column(DateTime, nullable=False)
    status         = Column(
        value_enum(BookingStatus, "bookingstatus"),
        nullable=False,
        default=BookingStatus.PENDING,
        index=True,
    )
    payment_status = Column(
        value_enum(PaymentStatus, "paymentstatus"),
        nullable=False,
        default=PaymentStatus.PENDING,
    )
    total_price    = Column(Numeric(10, 2), nullable=False)
    notes          = Column(String, nullable=True)

    # Relationships
    room  = relationship("Room", back_populates="bookings")
    owner = relationship("User", back_populates="bookings")
    # Equipment links are removed explicitly before the booking row (see
    # CRUDBooking.delete_booking); passive_deletes keeps the ORM from
    # nulling their foreign keys on its own.
    equipment_items = relationship(
        "BookingEquipment",
        back_populates="booking",
        passive_deletes="all",
        order_by="BookingEquipment.id",
    )
