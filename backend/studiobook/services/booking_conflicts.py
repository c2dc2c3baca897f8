"""Overlap detection between a requested interval and active bookings.

Intervals are compared with inclusive bounds by default, so a booking ending
at 10:00 conflicts with one starting at 10:00. ``BOOKING_ALLOW_BACK_TO_BACK``
switches to half-open ``[start, end)`` semantics.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from .. import crud, models
from ..core.config import settings

logger = logging.getLogger(__name__)


def _inclusive_default(inclusive: Optional[bool]) -> bool:
    if inclusive is None:
        return not settings.BOOKING_ALLOW_BACK_TO_BACK
    return inclusive


def intervals_overlap(
    start_a: datetime,
    end_a: datetime,
    start_b: datetime,
    end_b: datetime,
    *,
    inclusive: Optional[bool] = None,
) -> bool:
    if _inclusive_default(inclusive):
        return start_a <= end_b and start_b <= end_a
    return start_a < end_b and start_b < end_a


def find_conflict(
    db: Session,
    room_id: int,
    start_time: datetime,
    end_time: datetime,
    exclude_booking_id: Optional[int] = None,
    *,
    inclusive: Optional[bool] = None,
    store=None,
) -> Optional[models.Booking]:
    """First active booking on the room that overlaps, or None."""
    existing = (store or crud.booking).find_overlapping(
        db,
        room_id,
        start_time,
        end_time,
        exclude_booking_id=exclude_booking_id,
        inclusive=_inclusive_default(inclusive),
    )
    if existing is not None:
        logger.debug(
            "Interval %s-%s on room %s overlaps booking %s",
            start_time,
            end_time,
            room_id,
            existing.id,
        )
    return existing


def has_conflict(
    db: Session,
    room_id: int,
    start_time: datetime,
    end_time: datetime,
    exclude_booking_id: Optional[int] = None,
    *,
    inclusive: Optional[bool] = None,
    store=None,
) -> bool:
    return find_conflict(
        db, room_id, start_time, end_time, exclude_booking_id, inclusive=inclusive, store=store
    ) is not None
