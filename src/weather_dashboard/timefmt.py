"""Display formatting for forecast timestamps."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta, timezone

IST = timezone(timedelta(hours=5, minutes=30), name="IST")


def _parse(value: str | datetime) -> datetime:
    if isinstance(value, datetime):
        return value
    candidate = value.strip()
    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"
    return datetime.fromisoformat(candidate)


def _clock(moment: datetime) -> str:
    hours = moment.hour % 12 or 12
    suffix = "PM" if moment.hour >= 12 else "AM"
    return f"{hours}:{moment.minute:02d} {suffix}"


def to_ist(value: str | datetime) -> datetime:
    """Convert to IST; naive inputs are taken to be UTC."""
    moment = _parse(value)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(IST)


def format_ist_time(value: str | datetime) -> str:
    """12-hour IST clock time, e.g. ``"3:05 PM"``."""
    return _clock(to_ist(value))


def format_ist(value: str | datetime) -> tuple[str, str]:
    """IST short weekday and clock time, e.g. ``("Mon", "3:05 PM")``."""
    moment = to_ist(value)
    return moment.strftime("%a"), _clock(moment)


def format_local_datetime(value: str | datetime) -> str:
    """Wall-clock formatting for a location's local time.

    WeatherAPI reports ``localtime`` as ``"2026-01-06 15:05"`` without an
    offset, so the value is formatted as-is: ``"Tue, Jan 6 • 3:05 PM"``.
    """
    moment = _parse(value)
    return f"{moment:%a}, {moment:%b} {moment.day} • {_clock(moment)}"


def format_relative_date(value: str | date | datetime, today: date | None = None) -> str:
    """``Today``/``Tomorrow`` relative to ``today``, else ``"Wed, 1/8"``."""
    if isinstance(value, datetime):
        day = value.date()
    elif isinstance(value, date):
        day = value
    else:
        day = _parse(value).date()

    reference = today or date.today()
    if day == reference:
        return "Today"
    if day == reference + timedelta(days=1):
        return "Tomorrow"
    return f"{day:%a}, {day.month}/{day.day}"
