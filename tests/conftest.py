"""
Shared fixtures: a throwaway SQLite database per test, a frozen clock,
JWT headers for seeded users and a recorder for outgoing status emails.
"""
import os

# Settings are read once at import time, so the environment comes first
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CELERY_TASK_ALWAYS_EAGER", "true")
os.environ.setdefault("EMAIL_ENABLED", "false")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("PAYMENT_WEBHOOK_SECRET", "whsec_test")

from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.orm import sessionmaker

from beautybook.config.database import build_engine, get_db
from beautybook.config.settings import get_settings
from beautybook.core.clock import get_clock
from beautybook.main import app
from beautybook.models import (
    Availability,
    Base,
    Booking,
    BookingStatus,
    Business,
    PaymentStatus,
    Service,
    User,
    UserRole,
)
from beautybook.services.email.email_service import EmailService

# 2026-11-02 is a Monday, 2026-11-01 the Sunday before it
MONDAY = date(2026, 11, 2)
SUNDAY = date(2026, 11, 1)


class FrozenClock:
    """Stands in for system_clock; tests move it explicitly"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, value: datetime) -> None:
        self.now = value

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


def at(day: date, hour: int, minute: int = 0) -> datetime:
    """Naive business-local datetime, the way bookings store it"""
    return datetime.combine(day, time(hour, minute))


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'beautybook_test.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FrozenClock(datetime(2026, 10, 26, 8, 0, tzinfo=timezone.utc))


@pytest.fixture
def client(session_factory, clock):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def sent_emails(monkeypatch):
    """Captures status emails the eager Celery task would have sent"""
    sent = []

    def fake_send(**kwargs):
        sent.append(kwargs)
        return True

    monkeypatch.setattr(EmailService, "send_booking_status_email", staticmethod(fake_send))
    return sent


def _make_user(db, email, role, full_name=None):
    user = User(email=email, full_name=full_name, role=role, is_active=True)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def owner(db):
    return _make_user(db, "owner@salon.test", UserRole.BUSINESS_OWNER, "Sam Owner")


@pytest.fixture
def customer(db):
    return _make_user(db, "jane@example.test", UserRole.CUSTOMER, "Jane Doe")


@pytest.fixture
def other_customer(db):
    return _make_user(db, "alex@example.test", UserRole.CUSTOMER, "Alex Roe")


@pytest.fixture
def make_business(db):
    """Business open Monday-Saturday 09:00-19:00 unless hours are given"""
    counter = {"n": 0}

    def factory(owner, timezone_name="UTC", hours=None):
        counter["n"] += 1
        business = Business(
            owner_id=owner.id,
            name=f"Glow Studio {counter['n']}",
            slug=f"glow-studio-{counter['n']}",
            timezone=timezone_name,
            is_active=True,
        )
        db.add(business)
        db.flush()

        if hours is None:
            hours = {day: (time(9, 0), time(19, 0)) for day in range(1, 7)}
        for day, (start, end) in hours.items():
            db.add(Availability(
                business_id=business.id,
                day_of_week=day,
                start_time=start,
                end_time=end,
                is_active=True,
            ))

        db.commit()
        db.refresh(business)
        return business

    return factory


@pytest.fixture
def business(make_business, owner):
    return make_business(owner)


@pytest.fixture
def make_service(db):
    def factory(business, duration_minutes=90, price="80.00", is_active=True, name="Balayage"):
        service = Service(
            business_id=business.id,
            name=name,
            price=Decimal(price),
            duration_minutes=duration_minutes,
            is_active=is_active,
        )
        db.add(service)
        db.commit()
        db.refresh(service)
        return service

    return factory


@pytest.fixture
def service(make_service, business):
    return make_service(business)


@pytest.fixture
def make_booking(db):
    """Insert a booking row directly, bypassing slot checks"""

    def factory(business, service, user, start, status=BookingStatus.CONFIRMED):
        booking = Booking(
            user_id=user.id,
            business_id=business.id,
            service_id=service.id,
            date=start.date(),
            start_time=start,
            end_time=start + timedelta(minutes=service.duration_minutes),
            total_price=Decimal(service.price),
            discount_amount=Decimal("0.00"),
            status=status,
            payment_status=PaymentStatus.PENDING,
        )
        db.add(booking)
        db.commit()
        db.refresh(booking)
        return booking

    return factory


@pytest.fixture
def auth_headers():
    def factory(user):
        settings = get_settings()
        token = jwt.encode(
            {
                "sub": str(user.id),
                "type": "access",
                "exp": datetime.now(timezone.utc) + timedelta(hours=1),
            },
            settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
        )
        return {"Authorization": f"Bearer {token}"}

    return factory
