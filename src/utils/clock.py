"""Clock capability so "now" can be fixed in tests."""

from datetime import datetime
from typing import Callable

Clock = Callable[[], datetime]


def system_clock() -> datetime:
    """Local wall-clock time, naive (event dates carry no timezone)."""
    return datetime.now()
