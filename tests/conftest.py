import pytest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from fastapi.testclient import TestClient
from jose import jwt

from booking_api.config.settings import get_settings
from booking_api.config.database import Database
from booking_api.main import create_app
from booking_api.models import Appointment, Business, BusinessHours, Resource, Service
from booking_api.services.notification.notification_dispatcher import NotificationDispatcher

# 2030-01-07 is a Monday (day_of_week 1)
MONDAY = date(2030, 1, 7)
MONDAY_STR = "2030-01-07"
TUESDAY_STR = "2030-01-08"
# A moment well before MONDAY so nothing counts as past
EARLIER = datetime(2030, 1, 1, 8, 0, tzinfo=timezone.utc)

OWNER_ID = 100
CUSTOMER_ID = 200
OTHER_CUSTOMER_ID = 201
STRANGER_ID = 999


class RecordingDispatcher(NotificationDispatcher):
    def __init__(self):
        self.sent = []

    def notify(self, user_id, message):
        self.sent.append((user_id, message))


class FailingDispatcher(NotificationDispatcher):
    def __init__(self):
        self.calls = 0

    def notify(self, user_id, message):
        self.calls += 1
        raise ConnectionError("broker unreachable")


@pytest.fixture
def database(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'booking.db'}", lock_timeout_seconds=5)
    db.create_tables()
    yield db
    db.dispose()


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def app(database, dispatcher):
    return create_app(database=database, dispatcher=dispatcher)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def create_access_token(user_id, expires_delta=timedelta(minutes=30), token_type="access"):
    """Sign a token the way the auth service does, with the shared secret"""
    settings = get_settings()
    now = datetime.now(timezone.utc)
    claims = {"sub": str(user_id), "exp": now + expires_delta, "iat": now, "type": token_type}
    return jwt.encode(claims, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def auth_header(user_id):
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


def seed_business(
        database,
        owner_id=OWNER_ID,
        tz="UTC",
        hours=None,
        resources=("Chair 1",),
        services=(("Haircut", 30),),
):
    """
    Insert a business with weekly hours, resources and services.

    ``hours`` maps day_of_week -> (start, end) or None for a closed day;
    default is Monday 09:00-11:00 only.
    """
    if hours is None:
        hours = {1: ("09:00", "11:00")}

    db = database.session()
    try:
        business = Business(owner_id=owner_id, name="Fade Street Barbers", timezone=tz, is_active=True)
        db.add(business)
        db.flush()

        for day_of_week, window in hours.items():
            if window is None:
                db.add(BusinessHours(business_id=business.id, day_of_week=day_of_week, is_closed=True))
            else:
                db.add(BusinessHours(
                    business_id=business.id,
                    day_of_week=day_of_week,
                    is_closed=False,
                    start_time=window[0],
                    end_time=window[1],
                ))

        resource_ids = []
        for name in resources:
            resource = Resource(business_id=business.id, name=name, is_active=True)
            db.add(resource)
            db.flush()
            resource_ids.append(resource.id)

        service_ids = []
        for name, duration in services:
            service = Service(
                business_id=business.id,
                name=name,
                duration_minutes=duration,
                price=Decimal("25.00"),
                is_active=True,
            )
            db.add(service)
            db.flush()
            service_ids.append(service.id)

        db.commit()
        return {
            "business_id": business.id,
            "resource_ids": resource_ids,
            "service_ids": service_ids,
        }
    finally:
        db.close()


def add_appointment(database, business_id, service_id, resource_id, start, end,
                    customer_id=CUSTOMER_ID, status="confirmed"):
    db = database.session()
    try:
        appointment = Appointment(
            business_id=business_id,
            service_id=service_id,
            resource_id=resource_id,
            customer_id=customer_id,
            start_time=start,
            end_time=end,
            status=status,
        )
        db.add(appointment)
        db.commit()
        return appointment.id
    finally:
        db.close()


def utc(year, month, day, hour, minute=0):
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


@pytest.fixture
def barber(database):
    return seed_business(database)
