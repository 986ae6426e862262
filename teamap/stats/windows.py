# teamap/stats/windows.py
"""
Ventanas de calendario de /api/stats, en la zona de settings.TIMEZONE.

- semana: [lunes 00:00, lunes siguiente 00:00) (el domingo es el ÚLTIMO día)
- mes:    [día 1 00:00, día 1 del mes siguiente 00:00)
- hoy:    [00:00, mañana 00:00)
- últimos 7 días: [now - 7 días, now), sin alinear a nada. No es "esta semana".
"""
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from teamap.core.config import settings


def local_now(tz: str | None = None) -> datetime:
    return datetime.now(ZoneInfo(tz or settings.TIMEZONE))


def _midnight(dt: datetime) -> datetime:
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_week(now: datetime) -> datetime:
    day_of_week = now.isoweekday() % 7  # domingo = 0, lunes = 1, ...
    days_from_monday = 6 if day_of_week == 0 else day_of_week - 1
    return _midnight(now - timedelta(days=days_from_monday))


def start_of_month(now: datetime) -> datetime:
    return _midnight(now.replace(day=1))


def end_of_week(now: datetime) -> datetime:
    """Lunes siguiente 00:00 (exclusivo)."""
    return start_of_week(now) + timedelta(days=7)


def end_of_month(now: datetime) -> datetime:
    """Día 1 del mes siguiente 00:00 (exclusivo)."""
    first = start_of_month(now)
    if first.month == 12:
        return first.replace(year=first.year + 1, month=1)
    return first.replace(month=first.month + 1)


def start_of_day(now: datetime) -> datetime:
    return _midnight(now)


def end_of_day(now: datetime) -> datetime:
    return start_of_day(now) + timedelta(days=1)


def rolling_week(now: datetime) -> datetime:
    return now - timedelta(days=7)


def as_utc(dt: datetime) -> datetime:
    """Los timestamps se guardan en UTC: comparamos siempre en UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=ZoneInfo(settings.TIMEZONE))
    return dt.astimezone(timezone.utc)
