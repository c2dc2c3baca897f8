# backend/studiobook/api/api_booking.py

from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import ORJSONResponse
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.booking import (
    BookingCreate,
    BookingDeleteResponse,
    BookingResponse,
    BookingUpdate,
)
from ..services.booking_lifecycle import BookingManager
from ..services.booking_policy import Principal
from .dependencies import get_booking_manager, get_current_principal

router = APIRouter(tags=["bookings"], default_response_class=ORJSONResponse)


@router.post("/", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    *,
    db: Session = Depends(get_db),
    booking_in: BookingCreate,
    principal: Principal = Depends(get_current_principal),
    manager: BookingManager = Depends(get_booking_manager),
) -> Any:
    """Book a room for the caller. The caller always becomes the owner."""
    return manager.create(db, principal, booking_in)


@router.get("/", response_model=List[BookingResponse])
def read_bookings(
    *,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    manager: BookingManager = Depends(get_booking_manager),
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1, le=500),
) -> Any:
    """Bookings visible to the caller, earliest start first.

    Admins and managers see everything, staff see their studio, clients see
    their own bookings.
    """
    return manager.list(db, principal, skip=skip, limit=limit)


@router.get("/{booking_id}", response_model=BookingResponse)
def read_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    manager: BookingManager = Depends(get_booking_manager),
) -> Any:
    return manager.get(db, principal, booking_id)


@router.put("/{booking_id}", response_model=BookingResponse)
@router.patch("/{booking_id}", response_model=BookingResponse)
def update_booking(
    booking_id: int,
    patch: BookingUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    manager: BookingManager = Depends(get_booking_manager),
) -> Any:
    """Apply the fields present in the body.

    Changing the time requires both ``start_time`` and ``end_time``; the
    conflict check and price are re-run against the room's current rate.
    """
    return manager.update(db, principal, booking_id, patch)


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    manager: BookingManager = Depends(get_booking_manager),
) -> Any:
    return manager.cancel(db, principal, booking_id)


@router.delete("/{booking_id}", response_model=BookingDeleteResponse)
def delete_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    manager: BookingManager = Depends(get_booking_manager),
) -> Any:
    deleted_id = manager.delete(db, principal, booking_id)
    return BookingDeleteResponse(id=deleted_id)
