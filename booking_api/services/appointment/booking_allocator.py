# ============================================================================
# booking_api/services/appointment/booking_allocator.py
# ============================================================================
"""
Transactional booking.

The slot list a customer saw may be stale by the time they submit, so the
allocator never trusts it: inside one SERIALIZABLE transaction it locks the
business row, recomputes the slot list, recomputes which resources are busy
for the exact interval and inserts the appointment on the lowest-id free
resource. Concurrent allocators for the same business either wait for the
lock or fail serialization and retry; a loser ends with SlotUnavailable.
"""
import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.exc import OperationalError

from booking_api.config.database import Database
from booking_api.core.errors import SlotUnavailable, ValidationError
from booking_api.models.appointment import Appointment, AppointmentStatus
from booking_api.services.availability.availability_store import AvailabilityStore
from booking_api.services.availability.overlap import BusyInterval, occupied_resources
from booking_api.services.availability.slot_calculator import (
    DEFAULT_STEP_MINUTES,
    SlotCalculator,
    place_virtual_bookings,
)
from booking_api.services.notification.notification_dispatcher import (
    NotificationDispatcher,
    notify_safely,
)
from booking_api.services.timezone.timezone_normalizer import TimezoneNormalizer

logger = logging.getLogger(__name__)

# serialization_failure, deadlock_detected, lock_not_available
RETRYABLE_PGCODES = {"40001", "40P01", "55P03"}
RETRYABLE_MESSAGES = (
    "database is locked",
    "could not serialize",
    "deadlock detected",
    "lock timeout",
    "canceling statement due to lock timeout",
)


def is_retryable_error(exc: OperationalError) -> bool:
    orig = getattr(exc, "orig", None)
    pgcode = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if pgcode in RETRYABLE_PGCODES:
        return True
    message = str(exc).lower()
    return any(fragment in message for fragment in RETRYABLE_MESSAGES)


class BookingAllocator:
    """Re-validates and commits a single appointment"""

    def __init__(
            self,
            database: Database,
            dispatcher: NotificationDispatcher,
            max_retries: int = 3,
            step_minutes: int = DEFAULT_STEP_MINUTES,
            allow_virtual_resource: bool = True
    ):
        self.database = database
        self.dispatcher = dispatcher
        self.max_retries = max_retries
        self.step_minutes = step_minutes
        self.allow_virtual_resource = allow_virtual_resource

    def create_appointment(
            self,
            business_id: int,
            service_id: int,
            customer_id: int,
            date: str,
            time: str,
            now: Optional[datetime] = None
    ) -> Appointment:
        """
        Book ``service_id`` at local ``date``/``time`` for ``customer_id``.

        Raises:
            ValidationError: malformed input, unknown business or service
            InvalidTimezone: the business timezone is not a valid IANA zone
            SlotUnavailable: no free resource, including lost races and
                exhausted serialization retries
        """
        if not business_id or not service_id or not customer_id:
            raise ValidationError("business_id, service_id and customer are required")

        day = TimezoneNormalizer.parse_date(date)
        wall_time = TimezoneNormalizer.parse_time(time)

        for attempt in range(1, self.max_retries + 1):
            try:
                appointment, owner_id, service_name = self._allocate_once(
                    business_id, service_id, customer_id, day, wall_time, now
                )
                break
            except OperationalError as exc:
                if not is_retryable_error(exc):
                    raise
                logger.warning(
                    f"Booking attempt {attempt}/{self.max_retries} for business {business_id} "
                    f"at {date} {time} hit a transaction conflict: {exc.orig}"
                )
        else:
            logger.info(f"Giving up booking business {business_id} at {date} {time} after retries")
            raise SlotUnavailable()

        logger.info(
            f"Booked appointment {appointment.id}: business {business_id}, "
            f"resource {appointment.resource_id}, customer {customer_id}, {date} {time}"
        )

        when = f"{date} at {wall_time.strftime('%H:%M')}"
        notify_safely(self.dispatcher, customer_id, f"Your booking for {service_name} on {when} is confirmed.")
        notify_safely(self.dispatcher, owner_id, f"New booking: {service_name} on {when}.")

        return appointment

    def _allocate_once(self, business_id, service_id, customer_id, day, wall_time, now):
        db = self.database.transaction(serializable=True)
        try:
            store = AvailabilityStore(db)
            business = store.get_business(business_id, for_update=True)
            service = store.get_service(business_id, service_id)

            start_utc = TimezoneNormalizer.local_to_utc(day, wall_time, business.timezone)
            end_utc = start_utc + timedelta(minutes=service.duration_minutes)

            calculator = SlotCalculator(
                store,
                step_minutes=self.step_minutes,
                allow_virtual_resource=self.allow_virtual_resource,
            )
            offered = calculator.compute_slots(business_id, service_id, day, now=now)
            if wall_time.strftime("%H:%M") not in offered:
                raise SlotUnavailable()

            roster = calculator.resource_roster(business_id)
            busy = place_virtual_bookings([
                BusyInterval(
                    start=TimezoneNormalizer.ensure_utc(existing.start_time),
                    end=TimezoneNormalizer.ensure_utc(existing.end_time),
                    resource_id=existing.resource_id,
                )
                for existing in store.list_confirmed_appointments(business_id, start_utc, end_utc)
            ], roster)
            occupied = occupied_resources(start_utc, end_utc, busy)
            free = [resource_id for resource_id in roster if resource_id not in occupied]
            if not free:
                raise SlotUnavailable()

            appointment = Appointment(
                business_id=business_id,
                service_id=service_id,
                resource_id=free[0],
                customer_id=customer_id,
                start_time=start_utc,
                end_time=end_utc,
                status=AppointmentStatus.CONFIRMED.value,
            )
            db.add(appointment)
            db.commit()
            db.refresh(appointment)

            return appointment, business.owner_id, service.name
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()
