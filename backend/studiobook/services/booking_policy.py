"""Who may read, create, change or remove a booking.

Every lifecycle operation consults the single ``BOOKING_ACCESS_RULES`` table
below instead of checking roles inline.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional

from ..models import Booking, UserRole
from ..utils.errors import ForbiddenError, StaffAssignmentNotFound, UnauthenticatedError


class BookingAction(str, enum.Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    CANCEL = "cancel"
    DELETE = "delete"
    LIST = "list"


class AccessRule(str, enum.Enum):
    ANY = "any"          # every booking
    STUDIO = "studio"    # bookings on rooms of the assigned studio
    OWNER = "owner"      # bookings the principal created


# Scope of each role over bookings it does not own. The owner of a booking may
# always act on it, whatever the role or staff assignment.
BOOKING_ACCESS_RULES: dict[UserRole, AccessRule] = {
    UserRole.ADMIN: AccessRule.ANY,
    UserRole.MANAGER: AccessRule.ANY,
    UserRole.STAFF: AccessRule.STUDIO,
    UserRole.CLIENT: AccessRule.OWNER,
}

BOOKING_SCOPED_ACTIONS = frozenset(
    {BookingAction.READ, BookingAction.UPDATE, BookingAction.CANCEL, BookingAction.DELETE}
)


@dataclass(frozen=True)
class Principal:
    """The authenticated actor behind a request."""

    id: int
    role: UserRole


@dataclass(frozen=True)
class ListScope:
    rule: AccessRule
    owner_id: Optional[int] = None
    studio_id: Optional[int] = None


def require_principal(principal: Optional[Principal]) -> Principal:
    if principal is None:
        raise UnauthenticatedError("Not authenticated")
    return principal


def rule_for(principal: Principal) -> AccessRule:
    try:
        return BOOKING_ACCESS_RULES[UserRole(principal.role)]
    except (KeyError, ValueError):
        # Unknown roles get the narrowest scope.
        return AccessRule.OWNER


def needs_studio_assignment(principal: Principal) -> bool:
    return rule_for(principal) is AccessRule.STUDIO


def _booking_studio_id(booking: Optional[Booking]) -> Optional[int]:
    if booking is None or booking.room is None:
        return None
    return booking.room.studio_id


def can_act(
    principal: Optional[Principal],
    action: BookingAction,
    booking: Optional[Booking] = None,
    resource_studio_id: Optional[int] = None,
    *,
    assigned_studio_id: Optional[int] = None,
) -> bool:
    """Decide one action for one principal.

    ``resource_studio_id`` is the studio owning the booking's room; when
    omitted it is read from ``booking.room``. ``assigned_studio_id`` is the
    staff assignment of the principal and only matters for staff. The owner
    of ``booking`` is always allowed.
    """
    if principal is None:
        return False
    if action in (BookingAction.CREATE, BookingAction.LIST):
        # Any authenticated principal; list results are narrowed by list_scope.
        return True
    if action not in BOOKING_SCOPED_ACTIONS:
        return False

    if booking is not None and booking.owner_id == principal.id:
        return True

    rule = rule_for(principal)
    if rule is AccessRule.ANY:
        return True
    if rule is AccessRule.STUDIO:
        studio_id = resource_studio_id if resource_studio_id is not None else _booking_studio_id(booking)
        return assigned_studio_id is not None and studio_id == assigned_studio_id
    return booking is not None and booking.owner_id == principal.id


def ensure_can_act(
    principal: Optional[Principal],
    action: BookingAction,
    booking: Optional[Booking] = None,
    resource_studio_id: Optional[int] = None,
    *,
    assigned_studio_id: Optional[int] = None,
) -> None:
    require_principal(principal)
    if not can_act(
        principal,
        action,
        booking,
        resource_studio_id,
        assigned_studio_id=assigned_studio_id,
    ):
        raise ForbiddenError(f"Not authorized to {action.value} this booking")


def list_scope(principal: Optional[Principal], assigned_studio_id: Optional[int] = None) -> ListScope:
    principal = require_principal(principal)
    rule = rule_for(principal)
    if rule is AccessRule.ANY:
        return ListScope(rule)
    if rule is AccessRule.STUDIO:
        if assigned_studio_id is None:
            raise StaffAssignmentNotFound("Staff record not found")
        return ListScope(rule, studio_id=assigned_studio_id)
    return ListScope(rule, owner_id=principal.id)
