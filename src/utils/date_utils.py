"""
Event date parsing and classification.

Event dates are free text entered by organizers, expected as "DD MON" or
"DD MON YYYY" (e.g. "25 OCT 2024"). Anything we cannot parse is treated
as not past so a typo never hides an event from listings.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Iterable, List, Optional, Tuple, TypeVar
from urllib.parse import quote

from utils.clock import system_clock

T = TypeVar("T")

MONTHS = {
    "JAN": 1,
    "FEB": 2,
    "MAR": 3,
    "APR": 4,
    "MAY": 5,
    "JUN": 6,
    "JUL": 7,
    "AUG": 8,
    "SEP": 9,
    "OCT": 10,
    "NOV": 11,
    "DEC": 12,
}

CALENDAR_BASE_URL = "https://www.google.com/calendar/render"


def parse_event_date(date_string: Optional[str], now: datetime) -> Optional[Tuple[int, int, int]]:
    """Return (year, month, day) or None when the string does not parse."""
    if not date_string:
        return None

    parts = date_string.split()
    if len(parts) < 2:
        return None

    month = MONTHS.get(parts[1].upper())
    if month is None:
        return None

    try:
        day = int(parts[0])
        year = int(parts[2]) if len(parts) > 2 else now.year
    except ValueError:
        return None
    return year, month, day


def is_event_past(date_string: Optional[str], now: Optional[datetime] = None) -> bool:
    """True iff 23:59:59 on the event's date is strictly earlier than now."""
    now = now or system_clock()
    parsed = parse_event_date(date_string, now)
    if parsed is None:
        return False

    year, month, day = parsed
    try:
        end_of_day = datetime(year, month, day, 23, 59, 59)
    except ValueError:
        # "31 FEB", day 0, year out of range
        return False
    return end_of_day < now


def partition_by_date(
    items: Iterable[T],
    date_of: Callable[[T], Optional[str]],
    now: Optional[datetime] = None,
) -> Tuple[List[T], List[T]]:
    """Split items into (active, past), preserving input order."""
    now = now or system_clock()
    active: List[T] = []
    past: List[T] = []
    for item in items:
        (past if is_event_past(date_of(item), now) else active).append(item)
    return active, past


def google_calendar_url(event: Any, now: Optional[datetime] = None) -> Optional[str]:
    """Build an "add to Google Calendar" link for an event (10:00-14:00 UTC)."""
    if event is None or not getattr(event, "date", None):
        return None

    now = now or system_clock()
    parsed = parse_event_date(event.date, now)
    if parsed is None:
        return None

    year, month, day = parsed
    stamp = f"{year:04d}{month:02d}{day:02d}"
    title = quote(event.title or "EventSphere Event", safe="")
    details = quote(
        getattr(event, "description", None) or "Join us for this exciting event!", safe=""
    )
    location = quote(getattr(event, "venue", None) or "", safe="")
    return (
        f"{CALENDAR_BASE_URL}?action=TEMPLATE&text={title}"
        f"&dates={stamp}T100000Z/{stamp}T140000Z&details={details}&location={location}"
    )
