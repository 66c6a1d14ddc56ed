"""Meeting date helpers.

Meetings happen on the third Tuesday of the month at a fixed local time in
the group's reference timezone. All computed timestamps are UTC. Offsets are
taken from the timezone database for the calendar date in question, so months
that straddle a daylight-saving change still land on the same wall-clock time.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import NamedTuple, Optional
from zoneinfo import ZoneInfo

from bookgroup.domain.errors import ValidationError
from bookgroup.settings import settings

TUESDAY = 1  # date.weekday(): Monday == 0
CUSTOM_DATE_FORMAT = "%Y-%m-%dT%H:%M"


class MeetingFields(NamedTuple):
    meeting_date: datetime
    month: int
    year: int


def _reference_zone() -> ZoneInfo:
    return ZoneInfo(settings.reference_timezone)


def _utc_offset_on(day: date) -> timedelta:
    # Midday avoids the early-morning hours in which DST transitions happen.
    noon = datetime.combine(day, time(12, 0), tzinfo=_reference_zone())
    offset = noon.utcoffset()
    return offset if offset is not None else timedelta(0)


def local_to_utc(day: date, hour: int, minute: int) -> datetime:
    """Interpret ``hour:minute`` on ``day`` as reference-zone civil time."""
    naive = datetime.combine(day, time(hour, minute))
    return (naive - _utc_offset_on(day)).replace(tzinfo=timezone.utc)


def third_tuesday(year: int, month: int) -> datetime:
    """Return the UTC instant of the meeting on the third Tuesday of the month."""
    first = date(year, month, 1)
    days_to_tuesday = (TUESDAY - first.weekday()) % 7
    meeting_day = first + timedelta(days=days_to_tuesday + 14)
    return local_to_utc(meeting_day, settings.meeting_hour, settings.meeting_minute)


def custom_date_to_utc(value: str) -> datetime:
    """Convert a ``YYYY-MM-DDTHH:MM`` reference-zone value to UTC."""
    try:
        local = datetime.strptime(value.strip(), CUSTOM_DATE_FORMAT)
    except (AttributeError, ValueError) as exc:
        raise ValidationError("invalid_custom_date") from exc
    return local_to_utc(local.date(), local.hour, local.minute)


def meeting_fields(
    month: Optional[int],
    year: Optional[int],
    custom_date: Optional[str] = None,
) -> Optional[MeetingFields]:
    """Return the scheduling triple, or None when the book stays undated.

    Month and year are only meaningful together; either one alone leaves the
    book undated and ``custom_date`` is then ignored as well.
    """
    if not month or not year:
        return None
    if custom_date and custom_date.strip():
        when = custom_date_to_utc(custom_date)
    else:
        when = third_tuesday(year, month)
    return MeetingFields(meeting_date=when, month=month, year=year)

