# tests/conftest.py
import os

# Set up test environment variables BEFORE any salon_api import
os.environ.setdefault("ENVIRONMENT", "test")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REDIS_CACHE_URL"] = "memory://"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("VAPID_PUBLIC_KEY", "test-public-key")
os.environ.setdefault("VAPID_PRIVATE_KEY", "test-private-key")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

import salon_api.models  # noqa: F401
from salon_api.core import cache as cache_module
from salon_api.core.limiter import limiter
from salon_api.core.security import create_access_token, get_password_hash
from salon_api.db import engine, get_session
from salon_api.main import app
from salon_api.models import Booking, Location, Service, User

BUSINESS_HOURS = {
    "monday": {"open": "09:00", "close": "17:00", "closed": False},
    "tuesday": {"open": "09:00", "close": "17:00", "closed": False},
    "wednesday": {"open": "09:00", "close": "17:00", "closed": False},
    "thursday": {"open": "09:00", "close": "17:00", "closed": False},
    "friday": {"open": "09:00", "close": "17:00", "closed": False},
    "saturday": {"open": "10:00", "close": "14:00", "closed": False},
    "sunday": {"closed": True},
}

PASSWORD = "secret-password"
PASSWORD_HASH = get_password_hash(PASSWORD)


def next_weekday(weekday: int, start: datetime | None = None):
    """Next date (strictly after ``start``) falling on ``weekday`` (0 = Monday)."""
    day = (start or datetime.utcnow()).date() + timedelta(days=1)
    while day.weekday() != weekday:
        day += timedelta(days=1)
    return day


@pytest.fixture(autouse=True)
def reset_state():
    """Fresh tables, cache and rate-limit counters for every test."""
    SQLModel.metadata.create_all(engine)
    cache_module._cache = None
    limiter.reset()
    yield
    SQLModel.metadata.drop_all(engine)
    cache_module._cache = None


@pytest.fixture
def db():
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(db):
    """Test client whose requests share the test session."""
    app.dependency_overrides[get_session] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def push_mock(monkeypatch):
    """Replace the outbound web push call."""
    mock = MagicMock()
    monkeypatch.setattr("salon_api.services.web_push.webpush", mock)
    return mock


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(**fields) -> User:
        counter["n"] += 1
        n = counter["n"]
        values = {
            "name": f"User {n}",
            "email": f"user{n}@example.com",
            "hashed_password": PASSWORD_HASH,
            "referral_code": f"US{1000 + n}",
        }
        values.update(fields)
        user = User(**values)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def location(db):
    location = Location(
        location_id="LOC-1",
        subdomain="glow",
        name="Glow Spa",
        address="1 Main Street",
        theme_color="#112233",
        logo="https://cdn.example.com/glow.png",
        business_hours=dict(BUSINESS_HOURS),
        review_points=50,
    )
    db.add(location)
    db.commit()
    db.refresh(location)
    return location


@pytest.fixture
def service(db, location):
    service = Service(name="Facial", base_price=100.0, duration=60, location_id=location.location_id)
    db.add(service)
    db.commit()
    db.refresh(service)
    return service


@pytest.fixture
def client_user(make_user, location):
    return make_user(name="Cara Client", role="user", selected_location_id=location.location_id)


@pytest.fixture
def spa_user(make_user, location):
    return make_user(name="Sam Spa", role="spa", spa_location_id=location.location_id)


@pytest.fixture
def admin_user(make_user):
    return make_user(name="Ada Admin", role="admin")


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id, role=user.role)}"}


@pytest.fixture
def make_booking(db, service):
    def _make_booking(user: User, start: datetime, **fields) -> Booking:
        values = {
            "user_id": user.id,
            "service_id": service.id,
            "service_name": service.name,
            "service_price": service.base_price,
            "final_price": service.base_price,
            "date": start,
            "time": start.strftime("%I:%M %p").lstrip("0"),
            "duration": service.duration,
            "location_id": service.location_id,
        }
        values.update(fields)
        booking = Booking(**values)
        db.add(booking)
        db.commit()
        db.refresh(booking)
        return booking

    return _make_booking
