# ============================================================================
# booking_api/services/timezone/timezone_normalizer.py
# ============================================================================
"""Conversion between a business's local calendar day and UTC instants"""
from datetime import date, datetime, time, timedelta, timezone
from functools import lru_cache
from typing import Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from booking_api.core.errors import InvalidTimezone, ValidationError


@lru_cache(maxsize=256)
def _load_zone(name: str) -> ZoneInfo:
    return ZoneInfo(name)


class TimezoneNormalizer:
    """
    Maps local wall-clock values of one business to UTC and back.

    Slot arithmetic is done in naive local wall clock for a single day;
    only the day bounds and committed instants go through UTC. Times that
    do not exist or repeat on DST-transition days resolve with fold=0.
    """

    @staticmethod
    def get_zone(tz_name: str) -> ZoneInfo:
        if not tz_name or not isinstance(tz_name, str):
            raise InvalidTimezone("timezone is not set")
        try:
            return _load_zone(tz_name)
        except (ZoneInfoNotFoundError, ValueError, OSError):
            # OSError covers names that are directories in the zone database, e.g. "Europe"
            raise InvalidTimezone(f"unknown timezone: {tz_name}")

    @staticmethod
    def parse_date(value: str) -> date:
        """Parse a yyyy-mm-dd calendar date"""
        try:
            return datetime.strptime(value, "%Y-%m-%d").date()
        except (TypeError, ValueError):
            raise ValidationError(f"invalid date '{value}', expected yyyy-mm-dd")

    @staticmethod
    def parse_time(value: str) -> time:
        """Parse an HH:MM wall-clock time"""
        try:
            return datetime.strptime(value, "%H:%M").time()
        except (TypeError, ValueError):
            raise ValidationError(f"invalid time '{value}', expected HH:MM")

    @staticmethod
    def format_time(value: datetime) -> str:
        return value.strftime("%H:%M")

    @staticmethod
    def day_of_week(day: date) -> int:
        """0=Sunday ... 6=Saturday"""
        return (day.weekday() + 1) % 7

    @staticmethod
    def ensure_utc(instant: datetime) -> datetime:
        """Naive values read back from the database are UTC"""
        if instant.tzinfo is None:
            return instant.replace(tzinfo=timezone.utc)
        return instant.astimezone(timezone.utc)

    @staticmethod
    def local_to_utc(day: date, wall_time: time, tz_name: str) -> datetime:
        zone = TimezoneNormalizer.get_zone(tz_name)
        local = datetime.combine(day, wall_time).replace(tzinfo=zone)
        return local.astimezone(timezone.utc)

    @staticmethod
    def utc_to_local(instant: datetime, tz_name: str) -> datetime:
        """UTC instant -> naive wall clock of the business"""
        zone = TimezoneNormalizer.get_zone(tz_name)
        return TimezoneNormalizer.ensure_utc(instant).astimezone(zone).replace(tzinfo=None)

    @staticmethod
    def day_bounds_utc(day: date, tz_name: str) -> Tuple[datetime, datetime]:
        """
        UTC instants of local midnight of ``day`` and of the following day.

        The end bound is exclusive, so querying ``start < end_bound AND
        end > start_bound`` picks every appointment touching the local day.
        """
        start = TimezoneNormalizer.local_to_utc(day, time.min, tz_name)
        end = TimezoneNormalizer.local_to_utc(day + timedelta(days=1), time.min, tz_name)
        return start, end

    @staticmethod
    def local_today(tz_name: str, now: datetime = None) -> date:
        return TimezoneNormalizer.local_now(tz_name, now).date()

    @staticmethod
    def local_now(tz_name: str, now: datetime = None) -> datetime:
        """Current wall clock of the business (naive)"""
        instant = now or datetime.now(timezone.utc)
        return TimezoneNormalizer.utc_to_local(instant, tz_name)
