from types import SimpleNamespace

import pytest

from studiobook.models import UserRole
from studiobook.services.booking_policy import (
    AccessRule,
    BookingAction,
    Principal,
    can_act,
    ensure_can_act,
    list_scope,
)
from studiobook.utils.errors import (
    ForbiddenError,
    NotFoundError,
    StaffAssignmentNotFound,
    UnauthenticatedError,
)

STUDIO = 7
OTHER_STUDIO = 8


def _booking(owner_id=1, studio_id=STUDIO):
    return SimpleNamespace(id=99, owner_id=owner_id, room=SimpleNamespace(studio_id=studio_id))


SCOPED = [BookingAction.READ, BookingAction.UPDATE, BookingAction.CANCEL, BookingAction.DELETE]


@pytest.mark.parametrize("role", [UserRole.ADMIN, UserRole.MANAGER])
@pytest.mark.parametrize("action", SCOPED)
def test_admin_and_manager_act_on_any_booking(role, action):
    principal = Principal(50, role)
    assert can_act(principal, action, _booking(owner_id=1, studio_id=OTHER_STUDIO))


@pytest.mark.parametrize("action", SCOPED)
def test_staff_limited_to_assigned_studio(action):
    staff = Principal(20, UserRole.STAFF)
    assert can_act(staff, action, _booking(), assigned_studio_id=STUDIO)
    assert not can_act(staff, action, _booking(studio_id=OTHER_STUDIO), assigned_studio_id=STUDIO)


def test_staff_without_assignment_denied():
    staff = Principal(20, UserRole.STAFF)
    assert not can_act(staff, BookingAction.READ, _booking(), assigned_studio_id=None)


@pytest.mark.parametrize("action", SCOPED)
def test_staff_owner_acts_on_own_booking_anywhere(action):
    staff = Principal(20, UserRole.STAFF)
    own = _booking(owner_id=20, studio_id=OTHER_STUDIO)
    assert can_act(staff, action, own, assigned_studio_id=STUDIO)
    assert can_act(staff, action, own, assigned_studio_id=None)
    assert not can_act(staff, action, _booking(owner_id=21, studio_id=OTHER_STUDIO), assigned_studio_id=None)


def test_explicit_resource_studio_wins_over_booking_room():
    staff = Principal(20, UserRole.STAFF)
    assert can_act(
        staff,
        BookingAction.READ,
        _booking(studio_id=OTHER_STUDIO),
        STUDIO,
        assigned_studio_id=STUDIO,
    )


@pytest.mark.parametrize("action", SCOPED)
def test_client_limited_to_own_bookings(action):
    client = Principal(1, UserRole.CLIENT)
    assert can_act(client, action, _booking(owner_id=1))
    assert not can_act(client, action, _booking(owner_id=2))


@pytest.mark.parametrize("role", list(UserRole))
def test_create_and_list_open_to_every_role(role):
    principal = Principal(3, role)
    assert can_act(principal, BookingAction.CREATE)
    assert can_act(principal, BookingAction.LIST)


def test_missing_principal_is_denied():
    assert not can_act(None, BookingAction.READ, _booking())
    with pytest.raises(UnauthenticatedError):
        ensure_can_act(None, BookingAction.CREATE)


def test_ensure_can_act_message_names_action():
    with pytest.raises(ForbiddenError) as exc:
        ensure_can_act(Principal(2, UserRole.CLIENT), BookingAction.DELETE, _booking(owner_id=1))
    assert exc.value.message == "Not authorized to delete this booking"


def test_unknown_role_falls_back_to_owner_rule():
    stranger = Principal(1, "auditor")
    assert can_act(stranger, BookingAction.READ, _booking(owner_id=1))
    assert not can_act(stranger, BookingAction.READ, _booking(owner_id=2))


def test_list_scope_per_role():
    assert list_scope(Principal(1, UserRole.ADMIN)).rule is AccessRule.ANY
    assert list_scope(Principal(1, UserRole.MANAGER)).rule is AccessRule.ANY

    staff_scope = list_scope(Principal(2, UserRole.STAFF), assigned_studio_id=STUDIO)
    assert staff_scope.rule is AccessRule.STUDIO
    assert staff_scope.studio_id == STUDIO

    client_scope = list_scope(Principal(3, UserRole.CLIENT))
    assert client_scope.rule is AccessRule.OWNER
    assert client_scope.owner_id == 3


def test_list_scope_staff_without_assignment_is_not_found():
    with pytest.raises(StaffAssignmentNotFound) as exc:
        list_scope(Principal(2, UserRole.STAFF))
    assert isinstance(exc.value, NotFoundError)


def test_list_scope_requires_principal():
    with pytest.raises(UnauthenticatedError):
        list_scope(None)
