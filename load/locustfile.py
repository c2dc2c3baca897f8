"""
Locust load script for the studio booking API.

Many simulated users race to book the same room for overlapping slots. A
correct deployment returns exactly one 201 per slot and 409 for the rest;
any second 201 for an overlapping slot is a double booking and is reported
as a failure.

Configure with env vars or Locust UI:
- HOST: pass via `--host https://api.example.com`
- BOOKING_BEARER: CSV of access tokens (one is picked per simulated user)
- BOOKING_ROOM_ID: room to hammer (default 1)
- BOOKING_SLOT_COUNT: number of distinct one-hour slots to contend for (default 4)
- BOOKING_BASE_DAY: ISO date of the first slot (default: 30 days from now)

Run:
  locust -f load/locustfile.py --host http://localhost:8000
"""

from __future__ import annotations

import logging
import os
import random
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Set

from locust import HttpUser, between, events, task


# --- Config -------------------------------------------------------------------

def _load_tokens() -> List[str]:
    raw = os.getenv("BOOKING_BEARER", "").strip()
    return [piece.strip() for piece in raw.split(",") if piece.strip()]


TOKENS = _load_tokens()
ROOM_ID = int(os.getenv("BOOKING_ROOM_ID", "1") or 1)
SLOT_COUNT = max(1, int(os.getenv("BOOKING_SLOT_COUNT", "4") or 4))


def _base_day() -> datetime:
    raw = os.getenv("BOOKING_BASE_DAY", "").strip()
    if raw:
        return datetime.fromisoformat(raw).replace(hour=9, minute=0, second=0, microsecond=0)
    today = datetime.now(timezone.utc).replace(tzinfo=None, hour=9, minute=0, second=0, microsecond=0)
    return today + timedelta(days=30)


BASE_DAY = _base_day()

# Slot index -> booking id that won it during this run.
_winners: Dict[int, int] = {}
_double_booked: Set[int] = set()


# --- Helpers ------------------------------------------------------------------

def _auth_header(token: Optional[str]) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"} if token else {}


def _slot_payload(slot: int) -> Dict[str, object]:
    # Slots are two hours apart so neighbours never touch under the inclusive rule.
    start = BASE_DAY + timedelta(hours=2 * slot)
    return {
        "room_id": ROOM_ID,
        "start_time": start.isoformat(),
        "end_time": (start + timedelta(hours=1)).isoformat(),
        "notes": "load test",
    }


# --- The User Model -----------------------------------------------------------

class BookingUser(HttpUser):
    wait_time = between(0.1, 0.5)

    token: Optional[str] = None

    def on_start(self):
        if not TOKENS:
            logging.warning("BOOKING_BEARER is empty; requests will be rejected with 401")
            return
        self.token = random.choice(TOKENS)

    @task(5)
    def contend_for_slot(self):
        slot = random.randrange(SLOT_COUNT)
        with self.client.post(
            "/api/v1/bookings/",
            json=_slot_payload(slot),
            headers=_auth_header(self.token),
            name="/api/v1/bookings/ [create]",
            catch_response=True,
        ) as resp:
            if resp.status_code == 201:
                booking_id = resp.json().get("id")
                if slot in _winners and _winners[slot] != booking_id:
                    _double_booked.add(slot)
                    resp.failure(f"slot {slot} double booked: {_winners[slot]} and {booking_id}")
                    return
                _winners[slot] = booking_id
                resp.success()
            elif resp.status_code == 409:
                # Losing the race is the expected outcome.
                resp.success()
            else:
                resp.failure(f"unexpected {resp.status_code}: {resp.text[:200]}")

    @task(1)
    def read_availability(self):
        self.client.get(
            f"/api/v1/rooms/{ROOM_ID}/availability",
            params={"day": BASE_DAY.date().isoformat()},
            headers=_auth_header(self.token),
            name="/api/v1/rooms/[id]/availability",
        )


@events.test_stop.add_listener
def _report(environment, **_kwargs):
    logging.info("Slots won: %s", dict(sorted(_winners.items())))
    if _double_booked:
        logging.error("Double-booked slots: %s", sorted(_double_booked))
        environment.process_exit_code = 1
