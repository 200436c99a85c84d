"""
Wall-clock <-> instant arithmetic for one IANA zone.

Days are ``datetime.date`` values, instants are timezone-aware ``datetime``
values in UTC. Unknown zones never raise: they resolve to UTC with
``degraded=True`` so billing-sensitive callers can warn.
"""
from __future__ import annotations
import logging
import re
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from enum import Enum
from functools import lru_cache
from typing import NamedTuple, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

# upper bound on offset corrections; DST gaps never converge
MAX_OFFSET_ATTEMPTS = 8

_HHMM = re.compile(r"^(\d{1,2}):(\d{2})$")


class WeekStart(str, Enum):
    monday = "mon"
    sunday = "sun"

    @classmethod
    def parse(cls, value) -> "WeekStart":
        if isinstance(value, cls):
            return value
        if isinstance(value, str) and value.strip().lower() in ("sun", "sunday"):
            return cls.sunday
        return cls.monday


class ZoneResolution(NamedTuple):
    zone: tzinfo
    name: str
    degraded: bool


class WallClock(NamedTuple):
    day: date
    hour: int
    minute: int


class ZonedInstant(NamedTuple):
    instant: datetime
    zone_degraded: bool
    converged: bool


ZoneLike = Union[str, ZoneResolution, None]

_UTC_FALLBACK = ZoneResolution(timezone.utc, "UTC", True)


@lru_cache(maxsize=256)
def _lookup_zone(name: str) -> ZoneResolution:
    try:
        return ZoneResolution(ZoneInfo(name), name, False)
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        logger.warning(f"Unknown timezone {name!r}, falling back to UTC arithmetic ({exc})")
        return _UTC_FALLBACK


def resolve_zone(zone: ZoneLike) -> ZoneResolution:
    if isinstance(zone, ZoneResolution):
        return zone
    if not zone or not isinstance(zone, str):
        logger.warning("No timezone given, falling back to UTC arithmetic")
        return _UTC_FALLBACK
    return _lookup_zone(zone.strip())


def as_utc(instant: datetime) -> datetime:
    # naive instants are taken to be UTC
    if instant.tzinfo is None or instant.tzinfo.utcoffset(instant) is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def _wall(instant: datetime, zone: tzinfo) -> datetime:
    return instant.astimezone(zone).replace(tzinfo=None)


def resolve_wall_clock(day: date, hour: int, minute: int, zone: ZoneLike) -> ZonedInstant:
    """
    Find the instant whose reading in ``zone`` is ``day hour:minute``.

    Starts from the wall clock read as UTC and repeatedly corrects by the
    difference between the wanted and the observed reading. Inside a DST gap
    the reading does not exist, the loop oscillates and the last candidate is
    returned with ``converged=False``.
    """
    resolution = resolve_zone(zone)
    target = datetime.combine(day, time(hour, minute))
    candidate = target.replace(tzinfo=timezone.utc)

    for _ in range(MAX_OFFSET_ATTEMPTS):
        drift = target - _wall(candidate, resolution.zone)
        if not drift:
            return ZonedInstant(candidate, resolution.degraded, True)
        candidate = candidate + drift

    return ZonedInstant(candidate, resolution.degraded, False)


def wall_clock_to_instant(day: date, hour: int, minute: int, zone: ZoneLike) -> datetime:
    return resolve_wall_clock(day, hour, minute, zone).instant


def instant_to_wall_clock(instant: datetime, zone: ZoneLike) -> WallClock:
    local = as_utc(instant).astimezone(resolve_zone(zone).zone)
    return WallClock(local.date(), local.hour, local.minute)


def date_only(instant: datetime, zone: ZoneLike) -> date:
    return instant_to_wall_clock(instant, zone).day


def add_days(day: date, n: int) -> date:
    return day + timedelta(days=n)


def start_of_week(day: date, week_starts_on: Union[WeekStart, str] = WeekStart.monday) -> date:
    iso = day.isoweekday()  # Mon=1 .. Sun=7
    if WeekStart.parse(week_starts_on) is WeekStart.sunday:
        back = 0 if iso == 7 else iso
    else:
        back = iso - 1
    return day - timedelta(days=back)


def week_days(week_start: date) -> list[date]:
    return [add_days(week_start, i) for i in range(7)]


def week_window(week_start: date, zone: ZoneLike) -> tuple[datetime, datetime]:
    """Half-open instant range ``[week_start 00:00, week_start + 7d 00:00)`` in ``zone``."""
    return (
        wall_clock_to_instant(week_start, 0, 0, zone),
        wall_clock_to_instant(add_days(week_start, 7), 0, 0, zone),
    )


def set_date_keeping_time(instant: datetime, day: date, zone: ZoneLike) -> datetime:
    wall = instant_to_wall_clock(instant, zone)
    return wall_clock_to_instant(day, wall.hour, wall.minute, zone)


def parse_time_of_day(value: Optional[str], fallback: tuple[int, int]) -> tuple[int, int]:
    if not value:
        return fallback
    m = _HHMM.match(value.strip())
    if not m:
        return fallback
    hour, minute = int(m.group(1)), int(m.group(2))
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return fallback
    return hour, minute


def parse_day(value: Union[str, date]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)
