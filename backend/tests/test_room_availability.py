from datetime import date

import pytest
from fastapi.testclient import TestClient

from studiobook.api.security import create_access_token
from studiobook.database import get_db
from studiobook.main import app
from studiobook.utils import redis_cache


@pytest.fixture
def client(Session):
    def override_db():
        db = Session()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def _headers(principal):
    return {"Authorization": f"Bearer {create_access_token(principal.id)}"}


def _book(client, principal, room_id, start, end):
    res = client.post(
        "/api/v1/bookings/",
        json={"room_id": room_id, "start_time": start, "end_time": end},
        headers=_headers(principal),
    )
    assert res.status_code == 201, res.text
    return res.json()


def test_busy_slots_for_day(client, seed):
    _book(client, seed.client, seed.room_a, "2030-01-01T14:00:00", "2030-01-01T15:00:00")
    _book(client, seed.client, seed.room_a, "2030-01-01T09:00:00", "2030-01-01T10:00:00")
    _book(client, seed.client, seed.room_a, "2030-01-02T09:00:00", "2030-01-02T10:00:00")

    res = client.get(
        f"/api/v1/rooms/{seed.room_a}/availability",
        params={"day": "2030-01-01"},
        headers=_headers(seed.other_client),
    )
    assert res.status_code == 200, res.text
    body = res.json()
    assert body["room_id"] == seed.room_a
    assert body["day"] == "2030-01-01"
    assert [slot["start_time"][:16] for slot in body["busy"]] == ["2030-01-01T09:00", "2030-01-01T14:00"]
    # Busy slots never reveal who booked them.
    assert set(body["busy"][0]) == {"start_time", "end_time", "status"}


def test_booking_spanning_midnight_shows_on_both_days(client, seed):
    _book(client, seed.client, seed.room_a, "2030-01-01T23:00:00", "2030-01-02T01:00:00")
    for day in ("2030-01-01", "2030-01-02"):
        res = client.get(
            f"/api/v1/rooms/{seed.room_a}/availability",
            params={"day": day},
            headers=_headers(seed.client),
        )
        assert len(res.json()["busy"]) == 1


def test_cancelled_bookings_are_not_busy(client, seed):
    created = _book(client, seed.client, seed.room_a, "2030-01-01T09:00:00", "2030-01-01T10:00:00")
    client.post(f"/api/v1/bookings/{created['id']}/cancel", headers=_headers(seed.client))
    res = client.get(
        f"/api/v1/rooms/{seed.room_a}/availability",
        params={"day": "2030-01-01"},
        headers=_headers(seed.client),
    )
    assert res.json()["busy"] == []


def test_result_is_cached_and_invalidated(client, seed):
    day = date(2030, 1, 1)
    url = f"/api/v1/rooms/{seed.room_a}/availability"
    assert client.get(url, params={"day": day.isoformat()}, headers=_headers(seed.client)).json()["busy"] == []
    assert redis_cache.get_cached_availability(seed.room_a, day) == {
        "room_id": seed.room_a,
        "day": "2030-01-01",
        "busy": [],
    }

    _book(client, seed.client, seed.room_a, "2030-01-01T09:00:00", "2030-01-01T10:00:00")
    assert redis_cache.get_cached_availability(seed.room_a, day) is None
    assert len(client.get(url, params={"day": day.isoformat()}, headers=_headers(seed.client)).json()["busy"]) == 1


def test_unknown_room_is_404(client, seed):
    res = client.get("/api/v1/rooms/999/availability", params={"day": "2030-01-01"}, headers=_headers(seed.client))
    assert res.status_code == 404
    assert res.json()["detail"]["message"] == "Room not found"


def test_requires_authentication(client, seed):
    res = client.get(f"/api/v1/rooms/{seed.room_a}/availability")
    assert res.status_code == 401


def test_bad_day_is_422(client, seed):
    res = client.get(
        f"/api/v1/rooms/{seed.room_a}/availability",
        params={"day": "tomorrow"},
        headers=_headers(seed.client),
    )
    assert res.status_code == 422
    assert res.json()["detail"] == {"message": "Invalid day", "field_errors": {"day": "expected YYYY-MM-DD"}}


def test_redis_errors_degrade_to_cache_miss(monkeypatch):
    import redis

    class Broken:
        def get(self, key):
            raise redis.exceptions.ConnectionError("down")

        def setex(self, key, expire, value):
            raise redis.exceptions.ConnectionError("down")

        def scan_iter(self, pattern):
            raise redis.exceptions.ConnectionError("down")

    monkeypatch.setattr(redis_cache, "get_redis_client", lambda: Broken())
    assert redis_cache.get_cached_availability(1, date(2030, 1, 1)) is None
    redis_cache.cache_availability({"busy": []}, 1, date(2030, 1, 1))
    redis_cache.invalidate_availability_cache(1)


def test_corrupted_entry_is_a_miss(fake_redis):
    fake_redis.set("availability:1:2030-01-01", "{not json")
    assert redis_cache.get_cached_availability(1, date(2030, 1, 1)) is None
