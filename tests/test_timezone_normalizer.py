import pytest
from datetime import date, datetime, time, timedelta, timezone

from booking_api.core.errors import InvalidTimezone, ValidationError
from booking_api.services.timezone.timezone_normalizer import TimezoneNormalizer


def test_day_bounds_utc_for_zone_ahead_of_utc():
    start, end = TimezoneNormalizer.day_bounds_utc(date(2030, 1, 7), "Asia/Kolkata")

    assert start == datetime(2030, 1, 6, 18, 30, tzinfo=timezone.utc)
    assert end == datetime(2030, 1, 7, 18, 30, tzinfo=timezone.utc)


def test_day_bounds_cover_23_hours_on_spring_forward_day():
    # US DST starts on 2030-03-10
    start, end = TimezoneNormalizer.day_bounds_utc(date(2030, 3, 10), "America/New_York")

    assert start == datetime(2030, 3, 10, 5, 0, tzinfo=timezone.utc)
    assert end - start == timedelta(hours=23)


def test_local_to_utc_and_back():
    instant = TimezoneNormalizer.local_to_utc(date(2030, 7, 1), time(9, 30), "Europe/Berlin")

    assert instant == datetime(2030, 7, 1, 7, 30, tzinfo=timezone.utc)
    assert TimezoneNormalizer.utc_to_local(instant, "Europe/Berlin") == datetime(2030, 7, 1, 9, 30)


def test_naive_database_values_are_treated_as_utc():
    naive = datetime(2030, 1, 7, 9, 0)

    assert TimezoneNormalizer.ensure_utc(naive) == datetime(2030, 1, 7, 9, 0, tzinfo=timezone.utc)
    assert TimezoneNormalizer.utc_to_local(naive, "Asia/Kolkata") == datetime(2030, 1, 7, 14, 30)


@pytest.mark.parametrize("name", ["Mars/Olympus_Mons", "", "../etc/passwd", None, "America", "Europe", "Etc"])
def test_unknown_zone_raises_invalid_timezone(name):
    with pytest.raises(InvalidTimezone):
        TimezoneNormalizer.get_zone(name)


def test_day_of_week_starts_on_sunday():
    assert TimezoneNormalizer.day_of_week(date(2030, 1, 6)) == 0  # Sunday
    assert TimezoneNormalizer.day_of_week(date(2030, 1, 7)) == 1  # Monday
    assert TimezoneNormalizer.day_of_week(date(2030, 1, 12)) == 6  # Saturday


@pytest.mark.parametrize("value", ["2030/01/07", "07-01-2030", "2030-02-30", "", None])
def test_parse_date_rejects_malformed_input(value):
    with pytest.raises(ValidationError):
        TimezoneNormalizer.parse_date(value)


@pytest.mark.parametrize("value", ["9", "25:00", "09:60", "nine"])
def test_parse_time_rejects_malformed_input(value):
    with pytest.raises(ValidationError):
        TimezoneNormalizer.parse_time(value)


def test_local_now_uses_business_wall_clock():
    now = datetime(2030, 1, 7, 23, 0, tzinfo=timezone.utc)

    assert TimezoneNormalizer.local_today("Asia/Tokyo", now) == date(2030, 1, 8)
    assert TimezoneNormalizer.local_now("UTC", now) == datetime(2030, 1, 7, 23, 0)
