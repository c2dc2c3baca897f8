from sqlalchemy import Column, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import BaseModel


class Equipment(BaseModel):
    __tablename__ = "equipment"

    id         = Column(Integer, primary_key=True, index=True)
    name       = Column(String, nullable=False)
    daily_rate = Column(Numeric(10, 2), nullable=False)
    studio_id  = Column(Integer, ForeignKey("studios.id"), nullable=True, index=True)


class BookingEquipment(BaseModel):
    """Add-on equipment attached to a booking. Owned by the booking."""

    __tablename__ = "booking_equipment"
    __table_args__ = (
        UniqueConstraint("booking_id", "equipment_id", name="uq_booking_equipment_item"),
    )

    id           = Column(Integer, primary_key=True, index=True)
    booking_id   = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    equipment_id = Column(Integer, ForeignKey("equipment.id"), nullable=False)
    quantity     = Column(Integer, nullable=False, default=1)

    booking   = relationship("Booking", back_populates="equipment_items")
    equipment = relationship("Equipment")
