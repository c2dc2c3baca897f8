from sqlalchemy import Column, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import BaseModel


class Studio(BaseModel):
    __tablename__ = "studios"

    id      = Column(Integer, primary_key=True, index=True)
    name    = Column(String, nullable=False)
    address = Column(String, nullable=True)

    rooms = relationship("Room", back_populates="studio", order_by="Room.id")
    staff = relationship("StaffAssignment", back_populates="studio")


class Room(BaseModel):
    """A bookable resource. Read-only from the booking engine's point of view."""

    __tablename__ = "rooms"

    id          = Column(Integer, primary_key=True, index=True)
    studio_id   = Column(Integer, ForeignKey("studios.id"), nullable=False, index=True)
    name        = Column(String, nullable=False)
    hourly_rate = Column(Numeric(10, 2), nullable=False)
    capacity    = Column(Integer, nullable=True)

    studio   = relationship("Studio", back_populates="rooms")
    bookings = relationship("Booking", back_populates="room")


class StaffAssignment(BaseModel):
    __tablename__ = "staff_assignments"
    __table_args__ = (UniqueConstraint("user_id", name="uq_staff_assignments_user"),)

    id        = Column(Integer, primary_key=True, index=True)
    user_id   = Column(Integer, ForeignKey("users.id"), nullable=False)
    studio_id = Column(Integer, ForeignKey("studios.id"), nullable=False, index=True)

    user   = relationship("User", back_populates="staff_assignment")
    studio = relationship("Studio", back_populates="staff")
