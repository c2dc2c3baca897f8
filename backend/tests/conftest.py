import os

# Must be set before studiobook.database builds its engine.
os.environ.setdefault("PYTEST_RUN", "1")
os.environ.setdefault("REDIS_URL", "disabled")

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

import fakeredis
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from studiobook.models import Equipment, Room, StaffAssignment, Studio, User, UserRole
from studiobook.models.base import BaseModel
from studiobook.services.booking_policy import Principal
from studiobook.utils import redis_cache


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch):
    """Back the availability cache with an in-process Redis for every test."""
    fake = fakeredis.FakeStrictRedis()
    monkeypatch.setattr(redis_cache, "get_redis_client", lambda: fake)
    return fake


@pytest.fixture
def Session():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    BaseModel.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def db(Session):
    session = Session()
    try:
        yield session
    finally:
        session.close()


@dataclass
class Seed:
    studio_a: int
    studio_b: int
    room_a: int
    room_a2: int
    room_b: int
    mic: int
    amp: int
    admin: Principal
    manager: Principal
    staff_a: Principal
    staff_b: Principal
    staff_unassigned: Principal
    client: Principal
    other_client: Principal
    inactive_id: int


def _user(email: str, role: UserRole, **kwargs) -> User:
    first, _, _ = email.partition("@")
    return User(email=email, first_name=first.title(), last_name="Test", role=role, **kwargs)


def create_data(Session) -> Seed:
    """Two studios, three rooms, two equipment items and one user per role."""
    db = Session()
    studio_a = Studio(name="North Studio", address="1 Main Rd")
    studio_b = Studio(name="South Studio", address="9 Side St")
    db.add_all([studio_a, studio_b])
    db.flush()

    room_a = Room(studio_id=studio_a.id, name="Live Room", hourly_rate=Decimal("50.00"), capacity=6)
    room_a2 = Room(studio_id=studio_a.id, name="Vocal Booth", hourly_rate=Decimal("30.00"), capacity=2)
    room_b = Room(studio_id=studio_b.id, name="Mix Suite", hourly_rate=Decimal("80.00"), capacity=3)
    mic = Equipment(name="Condenser Mic", daily_rate=Decimal("20.00"), studio_id=studio_a.id)
    amp = Equipment(name="Guitar Amp", daily_rate=Decimal("15.00"), studio_id=studio_a.id)
    db.add_all([room_a, room_a2, room_b, mic, amp])

    admin = _user("admin@test.com", UserRole.ADMIN)
    manager = _user("manager@test.com", UserRole.MANAGER)
    staff_a = _user("staffa@test.com", UserRole.STAFF)
    staff_b = _user("staffb@test.com", UserRole.STAFF)
    staff_unassigned = _user("floater@test.com", UserRole.STAFF)
    client = _user("client@test.com", UserRole.CLIENT, phone_number="555-0100")
    other_client = _user("other@test.com", UserRole.CLIENT)
    inactive = _user("gone@test.com", UserRole.CLIENT, is_active=False)
    db.add_all([admin, manager, staff_a, staff_b, staff_unassigned, client, other_client, inactive])
    db.flush()

    db.add_all([
        StaffAssignment(user_id=staff_a.id, studio_id=studio_a.id),
        StaffAssignment(user_id=staff_b.id, studio_id=studio_b.id),
    ])
    db.commit()

    seed = Seed(
        studio_a=studio_a.id,
        studio_b=studio_b.id,
        room_a=room_a.id,
        room_a2=room_a2.id,
        room_b=room_b.id,
        mic=mic.id,
        amp=amp.id,
        admin=Principal(admin.id, UserRole.ADMIN),
        manager=Principal(manager.id, UserRole.MANAGER),
        staff_a=Principal(staff_a.id, UserRole.STAFF),
        staff_b=Principal(staff_b.id, UserRole.STAFF),
        staff_unassigned=Principal(staff_unassigned.id, UserRole.STAFF),
        client=Principal(client.id, UserRole.CLIENT),
        other_client=Principal(other_client.id, UserRole.CLIENT),
        inactive_id=inactive.id,
    )
    db.close()
    return seed


@pytest.fixture
def seed(Session) -> Seed:
    return create_data(Session)


def at(hour: int, minute: int = 0, day: int = 1) -> datetime:
    """Naive UTC instant on 2030-01-<day>."""
    return datetime(2030, 1, day, hour, minute)
