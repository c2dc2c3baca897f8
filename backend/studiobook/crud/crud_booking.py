from sqlalchemy.orm import Query, Session, selectinload
from typing import Any, Iterable, List, Optional, Tuple
from decimal import Decimal
from datetime import datetime

from .. import models
from ..models.booking_status import ACTIVE_BOOKING_STATUSES, BookingStatus, PaymentStatus


class CRUDBooking:
    """Persistence for bookings and their equipment links.

    Every method takes the request's ``Session``; mutating methods commit,
    ending whatever transaction the caller opened (including row locks).
    """

    def _detailed(self, db: Session) -> Query:
        return db.query(models.Booking).options(
            selectinload(models.Booking.room).selectinload(models.Room.studio),
            selectinload(models.Booking.owner),
            selectinload(models.Booking.equipment_items).selectinload(
                models.BookingEquipment.equipment
            ),
        )

    def _page(self, query: Query, skip: int, limit: Optional[int]) -> List[models.Booking]:
        query = query.order_by(models.Booking.start_time.asc(), models.Booking.id.asc())
        if skip:
            query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def get_booking(
        self, db: Session, booking_id: int, *, for_update: bool = False
    ) -> Optional[models.Booking]:
        query = self._detailed(db).filter(models.Booking.id == booking_id)
        if for_update:
            # Overwrite whatever the identity map holds with the locked row.
            query = query.with_for_update().populate_existing()
        return query.first()

    def get_bookings(
        self, db: Session, skip: int = 0, limit: Optional[int] = None
    ) -> List[models.Booking]:
        return self._page(self._detailed(db), skip, limit)

    def get_bookings_by_owner(
        self, db: Session, owner_id: int, skip: int = 0, limit: Optional[int] = None
    ) -> List[models.Booking]:
        query = self._detailed(db).filter(models.Booking.owner_id == owner_id)
        return self._page(query, skip, limit)

    def get_bookings_by_studio(
        self, db: Session, studio_id: int, skip: int = 0, limit: Optional[int] = None
    ) -> List[models.Booking]:
        query = (
            self._detailed(db)
            .join(models.Room, models.Room.id == models.Booking.room_id)
            .filter(models.Room.studio_id == studio_id)
        )
        return self._page(query, skip, limit)

    def find_overlapping(
        self,
        db: Session,
        room_id: int,
        start_time: datetime,
        end_time: datetime,
        *,
        exclude_booking_id: Optional[int] = None,
        inclusive: bool = True,
    ) -> Optional[models.Booking]:
        """Return any active booking on ``room_id`` overlapping the interval."""
        query = db.query(models.Booking).filter(
            models.Booking.room_id == room_id,
            models.Booking.status.in_(ACTIVE_BOOKING_STATUSES),
        )
        if inclusive:
            query = query.filter(
                models.Booking.start_time <= end_time,
                models.Booking.end_time >= start_time,
            )
        else:
            query = query.filter(
                models.Booking.start_time < end_time,
                models.Booking.end_time > start_time,
            )
        if exclude_booking_id is not None:
            query = query.filter(models.Booking.id != exclude_booking_id)
        return query.first()

    def get_active_bookings_for_room(
        self, db: Session, room_id: int, window_start: datetime, window_end: datetime
    ) -> List[models.Booking]:
        """Active bookings touching ``[window_start, window_end)``, earliest first."""
        return (
            db.query(models.Booking)
            .filter(
                models.Booking.room_id == room_id,
                models.Booking.status.in_(ACTIVE_BOOKING_STATUSES),
                models.Booking.start_time < window_end,
                models.Booking.end_time > window_start,
            )
            .order_by(models.Booking.start_time.asc())
            .all()
        )

    def get_equipment_links(self, db: Session, booking_id: int) -> List[models.BookingEquipment]:
        return (
            db.query(models.BookingEquipment)
            .filter(models.BookingEquipment.booking_id == booking_id)
            .all()
        )

    def create_booking(
        self,
        db: Session,
        *,
        room_id: int,
        owner_id: int,
        start_time: datetime,
        end_time: datetime,
        total_price: Decimal,
        notes: Optional[str] = None,
        equipment_quantities: Iterable[Tuple[int, int]] = (),
    ) -> models.Booking:
        db_booking = models.Booking(
            room_id=room_id,
            owner_id=owner_id,
            start_time=start_time,
            end_time=end_time,
            status=BookingStatus.PENDING,
            payment_status=PaymentStatus.PENDING,
            total_price=total_price,
            notes=notes,
        )
        db.add(db_booking)
        db.flush()
        for equipment_id, quantity in equipment_quantities:
            db.add(
                models.BookingEquipment(
                    booking_id=db_booking.id,
                    equipment_id=equipment_id,
                    quantity=quantity,
                )
            )
        db.commit()
        db.refresh(db_booking)
        return db_booking

    def update_booking(
        self, db: Session, db_booking: models.Booking, changes: dict[str, Any]
    ) -> models.Booking:
        for key, value in changes.items():
            setattr(db_booking, key, value)
        db.commit()
        db.refresh(db_booking)
        return db_booking

    def delete_booking(self, db: Session, db_booking: models.Booking) -> int:
        booking_id = db_booking.id
        # Equipment links first: they only exist in relation to this booking.
        (
            db.query(models.BookingEquipment)
            .filter(models.BookingEquipment.booking_id == booking_id)
            .delete(synchronize_session="fetch")
        )
        db.delete(db_booking)
        db.commit()
        return booking_id


booking = CRUDBooking()
