"""Create, change, cancel, remove and read bookings.

``BookingManager`` strings together the access rules, the conflict check and
the price calculation around the storage singletons from ``crud``. One
manager is built per process (``booking_manager``) and injected into the
routes; each call receives the request's ``Session``.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import crud, models
from ..models.booking_status import ACTIVE_BOOKING_STATUSES, BookingStatus
from ..schemas.booking import BookingCreate, BookingUpdate
from ..utils.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from ..utils.redis_cache import invalidate_availability_cache
from .booking_conflicts import find_conflict
from .booking_policy import (
    AccessRule,
    BookingAction,
    Principal,
    can_act,
    ensure_can_act,
    list_scope,
    needs_studio_assignment,
    require_principal,
)
from .booking_pricing import compute_price

logger = logging.getLogger(__name__)

ALLOWED_STATUS_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELLED, BookingStatus.COMPLETED}),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.COMPLETED: frozenset(),
}

ROOM_BOOKED_MESSAGE = "Room is already booked for the selected time"

# PostgreSQL SQLSTATE for exclusion-constraint violations.
_EXCLUSION_VIOLATION = "23P01"


def validate_status_transition(current: BookingStatus, target: BookingStatus) -> None:
    """Raise ``ValidationError`` unless ``current -> target`` is allowed.

    Re-applying the current status is accepted as a no-op.
    """
    current = BookingStatus(current)
    target = BookingStatus(target)
    if current == target:
        return
    if target not in ALLOWED_STATUS_TRANSITIONS[current]:
        raise ValidationError(
            f"Cannot change booking status from {current.value} to {target.value}",
            {"status": "invalid transition"},
        )


def _validate_interval(start_time: datetime, end_time: datetime) -> None:
    if end_time <= start_time:
        raise ValidationError(
            "End time must be after start time",
            {"end_time": "must be after start_time"},
        )


def _is_exclusion_violation(exc: IntegrityError) -> bool:
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return code == _EXCLUSION_VIOLATION


class BookingManager:
    def __init__(self, store=None, directory=None) -> None:
        self.store = store or crud.booking
        self.directory = directory or crud.directory

    # ── helpers ──────────────────────────────────────────────────────────────

    def _assigned_studio(self, db: Session, principal: Principal) -> Optional[int]:
        if not needs_studio_assignment(principal):
            return None
        return self.directory.get_assigned_studio(db, principal.id)

    def _authorize(
        self,
        db: Session,
        principal: Principal,
        action: BookingAction,
        booking: models.Booking,
    ) -> None:
        assigned = self._assigned_studio(db, principal)
        studio_id = booking.room.studio_id if booking.room is not None else None
        if not can_act(principal, action, booking, studio_id, assigned_studio_id=assigned):
            logger.warning(
                "User %s (%s) denied %s on booking %s",
                principal.id,
                principal.role,
                action.value,
                booking.id,
            )
            raise ForbiddenError(f"Not authorized to {action.value} this booking")

    def _get_or_404(self, db: Session, booking_id: int) -> models.Booking:
        booking = self.store.get_booking(db, booking_id)
        if booking is None:
            raise NotFoundError("Booking not found")
        return booking

    def _lock_room(self, db: Session, room_id: int) -> models.Room:
        room = self.directory.get_room(db, room_id, for_update=True)
        if room is None:
            raise NotFoundError("Room not found")
        return room

    def _ensure_free(
        self,
        db: Session,
        room_id: int,
        start_time: datetime,
        end_time: datetime,
        exclude_booking_id: Optional[int] = None,
    ) -> None:
        existing = find_conflict(
            db, room_id, start_time, end_time, exclude_booking_id, store=self.store
        )
        if existing is not None:
            logger.warning(
                "Booking conflict on room %s for %s-%s (existing booking %s)",
                room_id,
                start_time,
                end_time,
                existing.id,
            )
            raise ConflictError(ROOM_BOOKED_MESSAGE)

    def _resolve_equipment(self, db: Session, equipment_ids: Iterable[int]) -> List[models.Equipment]:
        ids = list(equipment_ids)
        found = self.directory.get_equipment_by_ids(db, ids)
        if len(found) != len(ids):
            missing = sorted(set(ids) - {item.id for item in found})
            raise NotFoundError(
                "One or more equipment items not found",
                {"equipment_ids": ", ".join(str(i) for i in missing)},
            )
        return found

    # ── operations ───────────────────────────────────────────────────────────

    def create(
        self, db: Session, principal: Optional[Principal], booking_in: BookingCreate
    ) -> models.Booking:
        principal = require_principal(principal)
        ensure_can_act(principal, BookingAction.CREATE)
        start_time, end_time = booking_in.start_time, booking_in.end_time
        _validate_interval(start_time, end_time)

        try:
            room = self._lock_room(db, booking_in.room_id)
            self._ensure_free(db, room.id, start_time, end_time)
            quantities = Counter(booking_in.equipment_ids)
            equipment = self._resolve_equipment(db, quantities) if quantities else []
            total_price = compute_price(room.hourly_rate, start_time, end_time, equipment)
            created = self.store.create_booking(
                db,
                room_id=room.id,
                owner_id=principal.id,
                start_time=start_time,
                end_time=end_time,
                total_price=total_price,
                notes=booking_in.notes,
                equipment_quantities=list(quantities.items()),
            )
        except IntegrityError as exc:
            db.rollback()
            if _is_exclusion_violation(exc):
                raise ConflictError(ROOM_BOOKED_MESSAGE) from exc
            raise
        except Exception:
            db.rollback()
            raise

        invalidate_availability_cache(created.room_id)
        logger.info(
            "Booking %s created on room %s by user %s (total %s)",
            created.id,
            created.room_id,
            principal.id,
            created.total_price,
        )
        return self.store.get_booking(db, created.id)

    def update(
        self,
        db: Session,
        principal: Optional[Principal],
        booking_id: int,
        patch: BookingUpdate,
    ) -> models.Booking:
        principal = require_principal(principal)
        booking = self._get_or_404(db, booking_id)
        provided = patch.model_fields_set
        cancelling = "status" in provided and patch.status == BookingStatus.CANCELLED
        self._authorize(
            db,
            principal,
            BookingAction.CANCEL if cancelling else BookingAction.UPDATE,
            booking,
        )

        if "status" in provided and patch.status is None:
            raise ValidationError("status cannot be null", {"status": "required"})
        if "payment_status" in provided and patch.payment_status is None:
            raise ValidationError("payment_status cannot be null", {"payment_status": "required"})

        time_fields = {"start_time", "end_time"} & provided
        if time_fields and (time_fields != {"start_time", "end_time"} or patch.start_time is None or patch.end_time is None):
            raise ValidationError(
                "start_time and end_time must be provided together",
                {field: "required" for field in ("start_time", "end_time") if field not in time_fields},
            )
        if time_fields:
            _validate_interval(patch.start_time, patch.end_time)

        changes: dict = {}
        try:
            # Transitions are checked against the row as it stands under the lock.
            room = self._lock_room(db, booking.room_id)
            booking = self.store.get_booking(db, booking_id, for_update=True)
            if booking is None:
                raise NotFoundError("Booking not found")

            if "status" in provided:
                validate_status_transition(booking.status, patch.status)
                if patch.status != booking.status:
                    changes["status"] = patch.status
            if "payment_status" in provided:
                changes["payment_status"] = patch.payment_status
            if "notes" in provided:
                # An explicit empty value clears the notes.
                changes["notes"] = patch.notes or None

            if time_fields:
                if changes.get("status", booking.status) in ACTIVE_BOOKING_STATUSES:
                    self._ensure_free(
                        db, room.id, patch.start_time, patch.end_time, exclude_booking_id=booking.id
                    )
                equipment = [line.equipment for line in booking.equipment_items]
                changes["total_price"] = compute_price(
                    room.hourly_rate, patch.start_time, patch.end_time, equipment
                )
                changes["start_time"] = patch.start_time
                changes["end_time"] = patch.end_time
            updated = self.store.update_booking(db, booking, changes)
        except IntegrityError as exc:
            db.rollback()
            if _is_exclusion_violation(exc):
                raise ConflictError(ROOM_BOOKED_MESSAGE) from exc
            raise
        except Exception:
            db.rollback()
            raise

        invalidate_availability_cache(updated.room_id)
        logger.info(
            "Booking %s updated by user %s: %s",
            updated.id,
            principal.id,
            sorted(changes),
        )
        return self.store.get_booking(db, updated.id)

    def cancel(self, db: Session, principal: Optional[Principal], booking_id: int) -> models.Booking:
        return self.update(db, principal, booking_id, BookingUpdate(status=BookingStatus.CANCELLED))

    def delete(self, db: Session, principal: Optional[Principal], booking_id: int) -> int:
        principal = require_principal(principal)
        booking = self._get_or_404(db, booking_id)
        self._authorize(db, principal, BookingAction.DELETE, booking)
        room_id = booking.room_id
        try:
            deleted_id = self.store.delete_booking(db, booking)
        except Exception:
            db.rollback()
            raise
        invalidate_availability_cache(room_id)
        logger.info("Booking %s deleted by user %s", deleted_id, principal.id)
        return deleted_id

    def get(self, db: Session, principal: Optional[Principal], booking_id: int) -> models.Booking:
        principal = require_principal(principal)
        booking = self._get_or_404(db, booking_id)
        self._authorize(db, principal, BookingAction.READ, booking)
        return booking

    def list(
        self,
        db: Session,
        principal: Optional[Principal],
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[models.Booking]:
        principal = require_principal(principal)
        scope = list_scope(principal, self._assigned_studio(db, principal))
        if scope.rule is AccessRule.ANY:
            return self.store.get_bookings(db, skip=skip, limit=limit)
        if scope.rule is AccessRule.STUDIO:
            return self.store.get_bookings_by_studio(db, scope.studio_id, skip=skip, limit=limit)
        return self.store.get_bookings_by_owner(db, scope.owner_id, skip=skip, limit=limit)


booking_manager = BookingManager()
