# ============================================================================
# booking_api/services/availability/slot_calculator.py
# ============================================================================
"""
Slot calculation.

``calculate_slots`` is a pure function of the day's hours, the service
duration, the resource roster and the busy intervals (all in business-local
wall clock). ``SlotCalculator`` gathers those inputs from an
AvailabilityStore and is used both by the slots endpoint and, inside the
booking transaction, by the BookingAllocator.
"""
import logging
from datetime import date, datetime, timedelta
from typing import List, NamedTuple, Optional, Sequence

from booking_api.services.availability.availability_store import AvailabilityStore
from booking_api.services.availability.overlap import BusyInterval, occupied_resources
from booking_api.services.timezone.timezone_normalizer import TimezoneNormalizer

logger = logging.getLogger(__name__)

DEFAULT_STEP_MINUTES = 15

# Stands in for the single implicit resource of a business without a roster;
# appointments booked on it are stored with resource_id NULL.
VIRTUAL_RESOURCE_ID = None


class DayHours(NamedTuple):
    is_closed: bool
    start_time: Optional[str]
    end_time: Optional[str]


def is_open(hours) -> bool:
    return bool(hours) and not hours.is_closed and bool(hours.start_time) and bool(hours.end_time)


def place_virtual_bookings(
        busy: Sequence[BusyInterval],
        resource_ids: Sequence[Optional[int]]
) -> List[BusyInterval]:
    """
    Bookings taken while the business had no resources (resource_id NULL)
    hold the lowest-id active resource once a roster exists.
    """
    real_ids = [resource_id for resource_id in resource_ids if resource_id is not VIRTUAL_RESOURCE_ID]
    if not real_ids:
        return list(busy)
    return [
        interval._replace(resource_id=real_ids[0]) if interval.resource_id is VIRTUAL_RESOURCE_ID else interval
        for interval in busy
    ]


def calculate_slots(
        day: date,
        hours,
        duration_minutes: int,
        resource_ids: Sequence[Optional[int]],
        busy: Sequence[BusyInterval],
        now_local: datetime,
        step_minutes: int = DEFAULT_STEP_MINUTES
) -> List[str]:
    """
    Bookable local start times ("HH:MM", ascending) for one day.

    A candidate is offered when the whole service fits before closing, it
    is not already in the past (today only), and at least one resource has
    no busy interval overlapping it.
    """
    if not is_open(hours) or not resource_ids or duration_minutes <= 0:
        return []

    today = now_local.date()
    if day < today:
        return []

    open_at = datetime.combine(day, TimezoneNormalizer.parse_time(hours.start_time))
    close_at = datetime.combine(day, TimezoneNormalizer.parse_time(hours.end_time))
    duration = timedelta(minutes=duration_minutes)
    step = timedelta(minutes=step_minutes)

    slots = []
    candidate = open_at
    while candidate < close_at:
        slot_end = candidate + duration
        if slot_end > close_at:
            break

        if day == today and candidate < now_local:
            candidate += step
            continue

        occupied = occupied_resources(candidate, slot_end, busy)
        if any(resource_id not in occupied for resource_id in resource_ids):
            slots.append(TimezoneNormalizer.format_time(candidate))

        candidate += step

    return slots


class SlotCalculator:
    """Computes the slot list of (business, service, date) from the store"""

    def __init__(
            self,
            store: AvailabilityStore,
            step_minutes: int = DEFAULT_STEP_MINUTES,
            allow_virtual_resource: bool = True
    ):
        self.store = store
        self.step_minutes = step_minutes
        self.allow_virtual_resource = allow_virtual_resource

    def resource_roster(self, business_id: int) -> List[Optional[int]]:
        """Active resource ids by ascending id, or the virtual resource"""
        resource_ids = [resource.id for resource in self.store.list_resources(business_id)]
        if not resource_ids and self.allow_virtual_resource:
            return [VIRTUAL_RESOURCE_ID]
        return resource_ids

    def busy_intervals(self, business_id: int, day: date, tz_name: str) -> List[BusyInterval]:
        """Confirmed appointments touching the local day, in local wall clock"""
        window_start, window_end = TimezoneNormalizer.day_bounds_utc(day, tz_name)
        appointments = self.store.list_confirmed_appointments(business_id, window_start, window_end)
        return [
            BusyInterval(
                start=TimezoneNormalizer.utc_to_local(appointment.start_time, tz_name),
                end=TimezoneNormalizer.utc_to_local(appointment.end_time, tz_name),
                resource_id=appointment.resource_id,
            )
            for appointment in appointments
        ]

    def compute_slots(
            self,
            business_id: int,
            service_id: int,
            day: date,
            now: Optional[datetime] = None
    ) -> List[str]:
        business = self.store.get_business(business_id)
        tz_name = business.timezone
        TimezoneNormalizer.get_zone(tz_name)

        hours = self.store.get_hours_for_day(business_id, TimezoneNormalizer.day_of_week(day))
        if not is_open(hours):
            return []

        service = self.store.get_service(business_id, service_id)

        resource_ids = self.resource_roster(business_id)
        if not resource_ids:
            logger.warning(f"Business {business_id} has no resources; no slots offered")
            return []

        busy = place_virtual_bookings(self.busy_intervals(business_id, day, tz_name), resource_ids)

        return calculate_slots(
            day=day,
            hours=hours,
            duration_minutes=service.duration_minutes,
            resource_ids=resource_ids,
            busy=busy,
            now_local=TimezoneNormalizer.local_now(tz_name, now),
            step_minutes=self.step_minutes,
        )
