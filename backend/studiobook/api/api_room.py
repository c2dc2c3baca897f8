# backend/studiobook/api/api_room.py

import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import ORJSONResponse
from sqlalchemy.orm import Session

from .. import crud
from ..database import get_db
from ..models.base import utcnow
from ..schemas.booking import BusySlot, RoomAvailabilityResponse
from ..services.booking_policy import Principal
from ..utils.errors import NotFoundError, error_response
from ..utils.redis_cache import cache_availability, get_cached_availability
from .dependencies import get_current_principal

router = APIRouter(tags=["rooms"], default_response_class=ORJSONResponse)
logger = logging.getLogger(__name__)


def _parse_day(raw: Optional[str]) -> date:
    if not raw:
        return utcnow().date()
    try:
        return date.fromisoformat(raw)
    except ValueError:
        raise error_response("Invalid day", {"day": "expected YYYY-MM-DD"})


def _day_window(day: date) -> tuple[datetime, datetime]:
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


@router.get("/{room_id}/availability", response_model=RoomAvailabilityResponse)
def read_room_availability(
    room_id: int,
    day: Optional[str] = Query(None, description="UTC day, YYYY-MM-DD; defaults to today"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> Any:
    """Busy intervals of active bookings on ``room_id`` for one UTC day."""
    if crud.directory.get_room(db, room_id) is None:
        raise NotFoundError("Room not found")
    target_day = _parse_day(day)

    cached = get_cached_availability(room_id, target_day)
    if cached is not None:
        logger.debug("Availability cache hit for room %s on %s", room_id, target_day)
        return cached

    window_start, window_end = _day_window(target_day)
    bookings = crud.booking.get_active_bookings_for_room(db, room_id, window_start, window_end)
    result = RoomAvailabilityResponse(
        room_id=room_id,
        day=target_day,
        busy=[BusySlot.model_validate(b) for b in bookings],
    )
    cache_availability(result.model_dump(mode="json"), room_id, target_day)
    return result
