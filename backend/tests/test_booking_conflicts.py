from decimal import Decimal

import pytest

from studiobook.core.config import settings
from studiobook.models import Booking, BookingStatus
from studiobook.services.booking_conflicts import find_conflict, has_conflict, intervals_overlap

from conftest import at


def _add(db, room_id, owner_id, start, end, status=BookingStatus.CONFIRMED):
    booking = Booking(
        room_id=room_id,
        owner_id=owner_id,
        start_time=start,
        end_time=end,
        status=status,
        total_price=Decimal("0"),
    )
    db.add(booking)
    db.commit()
    return booking


@pytest.mark.parametrize(
    "a,b,expected",
    [
        ((10, 12), (11, 13), True),
        ((10, 12), (12, 13), True),   # touching endpoints
        ((12, 13), (10, 12), True),
        ((10, 12), (10, 12), True),
        ((10, 14), (11, 12), True),   # containment
        ((10, 11), (12, 13), False),
    ],
)
def test_intervals_overlap_inclusive(a, b, expected):
    assert intervals_overlap(at(a[0]), at(a[1]), at(b[0]), at(b[1]), inclusive=True) is expected


def test_half_open_allows_back_to_back():
    assert not intervals_overlap(at(10), at(12), at(12), at(13), inclusive=False)
    assert intervals_overlap(at(10), at(12), at(11, 59), at(13), inclusive=False)


def test_default_follows_settings(monkeypatch):
    monkeypatch.setattr(settings, "BOOKING_ALLOW_BACK_TO_BACK", False)
    assert intervals_overlap(at(10), at(12), at(12), at(13))
    monkeypatch.setattr(settings, "BOOKING_ALLOW_BACK_TO_BACK", True)
    assert not intervals_overlap(at(10), at(12), at(12), at(13))


def test_find_conflict_returns_overlapping_booking(db, seed):
    existing = _add(db, seed.room_a, seed.client.id, at(10), at(12))
    found = find_conflict(db, seed.room_a, at(11), at(13))
    assert found is not None and found.id == existing.id


def test_touching_boundary_conflicts_by_default(db, seed):
    _add(db, seed.room_a, seed.client.id, at(10), at(12))
    assert has_conflict(db, seed.room_a, at(12), at(13), inclusive=True)
    assert not has_conflict(db, seed.room_a, at(12), at(13), inclusive=False)


def test_other_rooms_do_not_conflict(db, seed):
    _add(db, seed.room_a, seed.client.id, at(10), at(12))
    assert not has_conflict(db, seed.room_a2, at(10), at(12))


@pytest.mark.parametrize("status", [BookingStatus.CANCELLED, BookingStatus.COMPLETED])
def test_inactive_bookings_never_conflict(db, seed, status):
    _add(db, seed.room_a, seed.client.id, at(10), at(12), status=status)
    assert not has_conflict(db, seed.room_a, at(10), at(12))


def test_pending_bookings_block(db, seed):
    _add(db, seed.room_a, seed.client.id, at(10), at(12), status=BookingStatus.PENDING)
    assert has_conflict(db, seed.room_a, at(11), at(11, 30))


def test_excluded_booking_is_ignored(db, seed):
    existing = _add(db, seed.room_a, seed.client.id, at(10), at(12))
    assert not has_conflict(db, seed.room_a, at(10), at(13), exclude_booking_id=existing.id)
