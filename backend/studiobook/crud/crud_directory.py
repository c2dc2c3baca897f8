from sqlalchemy.orm import Session, selectinload
from typing import Iterable, List, Optional

from .. import models


class CRUDDirectory:
    """Read-only lookups over rooms, equipment, staff assignments and users.

    The booking engine never mutates these records.
    """

    def get_room(
        self, db: Session, room_id: int, *, for_update: bool = False
    ) -> Optional[models.Room]:
        query = db.query(models.Room).filter(models.Room.id == room_id)
        if for_update:
            # Per-room serialization point for check-then-write sequences.
            query = query.with_for_update()
        return query.first()

    def get_equipment_by_ids(self, db: Session, equipment_ids: Iterable[int]) -> List[models.Equipment]:
        """Return the resolvable subset; callers detect misses by count."""
        ids = list(equipment_ids)
        if not ids:
            return []
        return (
            db.query(models.Equipment)
            .filter(models.Equipment.id.in_(ids))
            .order_by(models.Equipment.id)
            .all()
        )

    def get_assigned_studio(self, db: Session, user_id: int) -> Optional[int]:
        assignment = (
            db.query(models.StaffAssignment)
            .filter(models.StaffAssignment.user_id == user_id)
            .first()
        )
        return assignment.studio_id if assignment else None

    def get_user(self, db: Session, user_id: int) -> Optional[models.User]:
        return (
            db.query(models.User)
            .options(selectinload(models.User.staff_assignment))
            .filter(models.User.id == user_id)
            .first()
        )


directory = CRUDDirectory()
