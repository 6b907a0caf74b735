import pytest

from booking_api.core.errors import (
    AppointmentNotFound,
    InvalidStatusTransition,
    PermissionDenied,
    ValidationError,
)
from booking_api.models import Appointment, AppointmentStatus
from booking_api.services.appointment.appointment_lifecycle import (
    ROLE_BUSINESS,
    ROLE_CUSTOMER,
    AppointmentLifecycle,
    check_transition,
)
from booking_api.services.appointment.booking_allocator import BookingAllocator
from conftest import (
    CUSTOMER_ID,
    EARLIER,
    MONDAY_STR,
    OTHER_CUSTOMER_ID,
    OWNER_ID,
    STRANGER_ID,
    FailingDispatcher,
    RecordingDispatcher,
    add_appointment,
    utc,
)


@pytest.fixture
def booked(database, barber):
    appointment_id = add_appointment(
        database, barber["business_id"], barber["service_ids"][0], barber["resource_ids"][0],
        utc(2030, 1, 7, 9, 0), utc(2030, 1, 7, 9, 30)
    )
    return appointment_id


def reload(database, appointment_id):
    db = database.session()
    try:
        return db.get(Appointment, appointment_id)
    finally:
        db.close()


class TestCheckTransition:

    def test_business_may_complete(self):
        check_transition(AppointmentStatus.CONFIRMED, AppointmentStatus.COMPLETED, {ROLE_BUSINESS})

    @pytest.mark.parametrize("roles", [{ROLE_BUSINESS}, {ROLE_CUSTOMER}, {ROLE_BUSINESS, ROLE_CUSTOMER}])
    def test_either_party_may_cancel(self, roles):
        check_transition(AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED, roles)

    def test_customer_may_not_complete(self):
        with pytest.raises(PermissionDenied):
            check_transition(AppointmentStatus.CONFIRMED, AppointmentStatus.COMPLETED, {ROLE_CUSTOMER})

    @pytest.mark.parametrize("current", [AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED])
    @pytest.mark.parametrize("target", list(AppointmentStatus))
    def test_terminal_states_never_change(self, current, target):
        with pytest.raises(InvalidStatusTransition):
            check_transition(current, target, {ROLE_BUSINESS, ROLE_CUSTOMER})

    def test_confirmed_to_confirmed_is_not_a_transition(self):
        with pytest.raises(InvalidStatusTransition):
            check_transition(AppointmentStatus.CONFIRMED, AppointmentStatus.CONFIRMED, {ROLE_BUSINESS})


def test_customer_cancels_and_owner_is_told(database, booked):
    dispatcher = RecordingDispatcher()
    lifecycle = AppointmentLifecycle(database, dispatcher)

    appointment = lifecycle.transition(booked, "cancelled", CUSTOMER_ID, now=utc(2030, 1, 5, 12))

    assert appointment.status == "cancelled"
    assert appointment.cancelled_at is not None
    assert reload(database, booked).status == "cancelled"
    assert [user_id for user_id, _ in dispatcher.sent] == [OWNER_ID]


def test_business_completes_and_customer_is_told(database, booked):
    dispatcher = RecordingDispatcher()
    lifecycle = AppointmentLifecycle(database, dispatcher)

    appointment = lifecycle.transition(booked, AppointmentStatus.COMPLETED, OWNER_ID)

    assert appointment.status == "completed"
    assert appointment.completed_at is not None
    assert [user_id for user_id, _ in dispatcher.sent] == [CUSTOMER_ID]


def test_business_cancel_notifies_customer(database, booked):
    dispatcher = RecordingDispatcher()

    AppointmentLifecycle(database, dispatcher).transition(booked, "cancelled", OWNER_ID)

    assert [user_id for user_id, _ in dispatcher.sent] == [CUSTOMER_ID]


def test_customer_cannot_complete(database, booked):
    lifecycle = AppointmentLifecycle(database, RecordingDispatcher())

    with pytest.raises(PermissionDenied):
        lifecycle.transition(booked, "completed", CUSTOMER_ID)

    assert reload(database, booked).status == "confirmed"


def test_stranger_cannot_touch_appointment(database, booked):
    lifecycle = AppointmentLifecycle(database, RecordingDispatcher())

    with pytest.raises(PermissionDenied):
        lifecycle.transition(booked, "cancelled", STRANGER_ID)


def test_rejected_transition_writes_nothing(database, booked):
    lifecycle = AppointmentLifecycle(database, RecordingDispatcher())
    lifecycle.transition(booked, "cancelled", CUSTOMER_ID)

    with pytest.raises(InvalidStatusTransition):
        lifecycle.transition(booked, "completed", OWNER_ID)

    stored = reload(database, booked)
    assert stored.status == "cancelled"
    assert stored.completed_at is None


def test_unknown_appointment(database, barber):
    with pytest.raises(AppointmentNotFound):
        AppointmentLifecycle(database, RecordingDispatcher()).transition(4242, "cancelled", CUSTOMER_ID)


def test_unknown_status_value(database, booked):
    with pytest.raises(ValidationError):
        AppointmentLifecycle(database, RecordingDispatcher()).transition(booked, "no-show", OWNER_ID)


def test_notification_failure_keeps_transition(database, booked):
    dispatcher = FailingDispatcher()

    appointment = AppointmentLifecycle(database, dispatcher).transition(booked, "cancelled", CUSTOMER_ID)

    assert appointment.status == "cancelled"
    assert dispatcher.calls == 1
    assert reload(database, booked).status == "cancelled"


def test_cancelling_frees_the_slot(database, barber, booked):
    allocator = BookingAllocator(database, RecordingDispatcher())
    AppointmentLifecycle(database, RecordingDispatcher()).transition(booked, "cancelled", CUSTOMER_ID)

    rebooked = allocator.create_appointment(
        barber["business_id"], barber["service_ids"][0], OTHER_CUSTOMER_ID, MONDAY_STR, "09:00", now=EARLIER
    )

    assert rebooked.resource_id == barber["resource_ids"][0]
