"""
Time helpers shared by the booking flows.

All booking timestamps are naive UTC datetimes. Keeping one convention avoids
comparing aware and naive datetimes, which Python refuses to do, and behaves
the same on PostgreSQL and on the SQLite database used in tests.

    utcnow()              → current naive UTC time
    will_expire_at()      → when a pending booking should time out
    format_interval()     → timedelta → "H:MM:SS"
    parse_session_time()  → "H:M" admin input → timedelta (or None)
    session_time_text()   → "H:MM:SS" → "<H> tim <MM> min" for mails
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

_SESSION_TIME_RE = re.compile(r"^\s*(\d{1,3}):(\d{1,2})(?::(\d{1,2}))?\s*$")


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC. Naive input is assumed to be UTC already."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def will_expire_at(due: datetime, created_at: datetime) -> datetime:
    """
    Decide when a pending booking expires if no translator accepts it.

    The closer the booking, the less time translators get to react:
        due within 90 minutes  → expires at due
        due within 24 hours    → 90 minutes after creation
        due within 72 hours    → 16 hours after creation
        further away           → 48 hours before due
    """
    difference = abs(due - created_at)

    if difference <= timedelta(minutes=90):
        return due
    if difference <= timedelta(hours=24):
        return created_at + timedelta(minutes=90)
    if difference <= timedelta(hours=72):
        return created_at + timedelta(hours=16)
    return due - timedelta(hours=48)


def format_interval(delta: timedelta) -> str:
    """Render an elapsed interval as "H:MM:SS". Negative intervals are taken as absolute."""
    total = int(abs(delta).total_seconds())
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours}:{minutes:02d}:{seconds:02d}"


def parse_session_time(raw: Optional[str]) -> Optional[timedelta]:
    """Parse "H:M" (seconds optional). Returns None for empty or malformed input."""
    if not raw:
        return None
    match = _SESSION_TIME_RE.match(raw)
    if match is None:
        return None
    hours, minutes, seconds = (int(part or 0) for part in match.groups())
    if minutes >= 60 or seconds >= 60:
        return None
    return timedelta(hours=hours, minutes=minutes, seconds=seconds)


def session_time_text(session_time: str) -> str:
    """ "1:05:00" → "1 tim 05 min" """
    hours, minutes = session_time.split(":")[:2]
    return f"{hours} tim {int(minutes):02d} min"
