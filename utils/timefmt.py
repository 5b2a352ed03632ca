"""Time formatting helpers used by the presenter and the UI."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

CLOCK_FORMAT = "%H:%M:%S"


def now_local() -> datetime:
    """Return the current local time as an aware ``datetime``."""
    return datetime.now(timezone.utc).astimezone()


def fmt_clock(dt: Optional[datetime] = None) -> str:
    """Return ``dt`` (default: now) as a 24-hour ``HH:MM:SS`` string."""

    if dt is None:
        dt = now_local()
    elif dt.tzinfo is not None:
        dt = dt.astimezone()
    return dt.strftime(CLOCK_FORMAT)


__all__ = ["CLOCK_FORMAT", "now_local", "fmt_clock"]
