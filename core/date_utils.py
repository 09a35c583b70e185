"""
Calendar-day helpers shared by the planner services.

All helpers work on both naive and timezone-aware datetimes:
- resolve_timezone: Turn a zone name into a pytz timezone (or None)
- to_local: Convert an aware datetime into the configured local zone
- as_local: Like to_local, but naive values are read as local wall-clock time
- local_day: Calendar day of a date/datetime in the local zone
- at_time: Build a datetime for a calendar day and wall-clock time
- week_start: First day of the week containing a date
"""

from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional, Union

import pytz

DateLike = Union[date, datetime]


def resolve_timezone(timezone: Union[str, tzinfo, None]) -> Optional[tzinfo]:
    """
    Resolve a timezone setting.

    Args:
        timezone: pytz zone name, tzinfo instance, or None/empty

    Returns:
        tzinfo, or None when datetimes should keep their own tzinfo
    """
    if timezone is None or timezone == "":
        return None
    if isinstance(timezone, tzinfo):
        return timezone
    try:
        return pytz.timezone(timezone)
    except pytz.UnknownTimeZoneError as e:
        raise ValueError(f"Unknown timezone: {timezone}") from e


def to_local(value: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Convert an aware datetime into tz; naive datetimes are returned as-is."""
    if tz is None or value.tzinfo is None:
        return value
    return value.astimezone(tz)


def as_local(value: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Naive values are read as wall-clock time in tz; aware ones are converted."""
    if tz is None:
        return value
    if value.tzinfo is None:
        return _localize(value, tz)
    return value.astimezone(tz)


def local_day(value: DateLike, tz: Optional[tzinfo] = None) -> date:
    """Return the calendar day of value, discarding the time of day."""
    if isinstance(value, datetime):
        return to_local(value, tz).date()
    return value


def _localize(naive: datetime, zone: tzinfo) -> datetime:
    # pytz zones need localize() to pick the right DST offset
    if hasattr(zone, "localize"):
        return zone.localize(naive)
    return naive.replace(tzinfo=zone)


def at_time(
    day: DateLike,
    hour: int,
    minute: int = 0,
    tz: Optional[tzinfo] = None,
    like: Optional[datetime] = None
) -> datetime:
    """
    Build the datetime for hour:minute on a calendar day.

    Args:
        day: Calendar day (a datetime is reduced to its local day)
        hour: Hour of day (0-23)
        minute: Minute of hour (0-59)
        tz: Local timezone; takes precedence over `like`
        like: Reference datetime whose tzinfo the result should carry

    Returns:
        Naive datetime when neither tz nor an aware reference is available
    """
    if like is None and isinstance(day, datetime):
        like = day
    naive = datetime.combine(local_day(day, tz), time(hour, minute))

    if tz is not None and (like is None or like.tzinfo is not None):
        return _localize(naive, tz)
    if like is not None and like.tzinfo is not None:
        zone = getattr(like.tzinfo, "zone", None)
        return _localize(naive, pytz.timezone(zone) if zone else like.tzinfo)
    return naive


def now(tz: Optional[tzinfo] = None) -> datetime:
    """Current time, aware when a timezone is configured."""
    return datetime.now(tz) if tz is not None else datetime.now()


def week_start(day: date, first_weekday: int = 6) -> date:
    """First day of the week containing day (first_weekday uses date.weekday())."""
    offset = (day.weekday() - first_weekday) % 7
    return day - timedelta(days=offset)


def same_week(a: date, b: date, first_weekday: int = 6) -> bool:
    return week_start(a, first_weekday) == week_start(b, first_weekday)


def same_month(a: date, b: date) -> bool:
    return (a.year, a.month) == (b.year, b.month)
