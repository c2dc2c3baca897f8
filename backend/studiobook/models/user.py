# backend/studiobook/models/user.py

from sqlalchemy import Boolean, Column, Integer, String
from sqlalchemy.orm import relationship
from .base import BaseModel, value_enum
import enum


class UserRole(str, enum.Enum):
    """Enumeration of all supported user roles."""

    CLIENT = "client"
    STAFF = "staff"
    MANAGER = "manager"
    ADMIN = "admin"


class User(BaseModel):
    __tablename__ = "users"

    id           = Column(Integer, primary_key=True, index=True)
    email        = Column(String, unique=True, index=True, nullable=False)
    first_name   = Column(String, nullable=False)
    last_name    = Column(String, nullable=False)
    phone_number = Column(String, nullable=True)
    role         = Column(value_enum(UserRole, "userrole"), nullable=False, default=UserRole.CLIENT)
    is_active    = Column(Boolean, default=True)

    bookings = relationship("Booking", back_populates="owner")

    # ↔–↔ Staff members manage exactly one studio
    staff_assignment = relationship(
        "StaffAssignment",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )
