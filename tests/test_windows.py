from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from teamap.stats.service import favorite_tea_type
from teamap.stats.windows import (
    as_utc,
    end_of_day,
    end_of_month,
    end_of_week,
    rolling_week,
    start_of_day,
    start_of_month,
    start_of_week,
)

UTC = ZoneInfo("UTC")


def test_week_starts_on_monday():
    # miércoles 14/10/2026
    wed = datetime(2026, 10, 14, 12, 30, tzinfo=UTC)
    assert start_of_week(wed) == datetime(2026, 10, 12, tzinfo=UTC)


def test_sunday_belongs_to_the_week_that_started_on_monday():
    sunday_night = datetime(2026, 10, 18, 23, 59, 59, tzinfo=UTC)
    monday = datetime(2026, 10, 19, 0, 0, tzinfo=UTC)

    assert start_of_week(sunday_night) == datetime(2026, 10, 12, tzinfo=UTC)
    assert start_of_week(monday) == monday


def test_week_crosses_month_boundary():
    thu = datetime(2026, 10, 1, 8, 0, tzinfo=UTC)
    assert start_of_week(thu) == datetime(2026, 9, 28, tzinfo=UTC)


def test_month_and_day():
    now = datetime(2026, 10, 14, 12, 30, 5, 123, tzinfo=UTC)
    assert start_of_month(now) == datetime(2026, 10, 1, tzinfo=UTC)
    assert start_of_day(now) == datetime(2026, 10, 14, tzinfo=UTC)


def test_rolling_week_is_not_aligned():
    now = datetime(2026, 10, 14, 12, 30, tzinfo=UTC)
    assert rolling_week(now) == now - timedelta(days=7)


def test_windows_follow_local_zone():
    tokyo = ZoneInfo("Asia/Tokyo")
    # lunes 01:00 en Tokio = domingo 16:00 UTC
    now = datetime(2026, 10, 19, 1, 0, tzinfo=tokyo)
    start = start_of_week(now)

    assert start == datetime(2026, 10, 19, tzinfo=tokyo)
    assert as_utc(start) == datetime(2026, 10, 18, 15, 0, tzinfo=timezone.utc)


def test_favorite_tea_type():
    assert favorite_tea_type([]) == ""
    assert favorite_tea_type([("green", 2), ("oolong", 3)]) == "oolong"
    # empate: orden alfabético
    assert favorite_tea_type([("oolong", 2), ("green", 2)]) == "green"


def test_window_ends_are_exclusive_next_boundaries():
    sunday_night = datetime(2026, 10, 18, 23, 59, 59, tzinfo=UTC)
    assert end_of_week(sunday_night) == datetime(2026, 10, 19, tzinfo=UTC)
    assert end_of_day(sunday_night) == datetime(2026, 10, 19, tzinfo=UTC)
    assert end_of_month(sunday_night) == datetime(2026, 11, 1, tzinfo=UTC)
    # diciembre pasa al año siguiente
    assert end_of_month(datetime(2026, 12, 31, 12, tzinfo=UTC)) == datetime(2027, 1, 1, tzinfo=UTC)
