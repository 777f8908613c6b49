"""
A user's own bookings, split into what is still coming and what is done.

    current → pending, assigned and started bookings, soonest first
    past    → every other status, most recent first, paged

Customers see the bookings they placed. Translators see the bookings they
hold or held, i.e. the ones with an assignment row that was not cancelled.
"""

from dataclasses import dataclass

from sqlalchemy.orm import Session

from models.enums import JobStatus, UserRole
from models.job import Job
from models.user import User
from booking.stores import JobStore

CURRENT_STATUSES = frozenset({
    JobStatus.PENDING.value,
    JobStatus.ASSIGNED.value,
    JobStatus.STARTED.value,
})
PAST_STATUSES = frozenset(s.value for s in JobStatus) - CURRENT_STATUSES


@dataclass
class BookingHistory:
    current: list[Job]
    past: list[Job]
    total_past: int


def booking_history(session: Session, user: User, offset: int = 0, limit: int = 15) -> BookingHistory:
    held = UserRole(user.role) == UserRole.TRANSLATOR
    jobs = JobStore(session)
    current, _ = jobs.for_user(user.id, CURRENT_STATUSES, held=held)
    past, total_past = jobs.for_user(
        user.id, PAST_STATUSES, held=held, newest_first=True, offset=offset, limit=limit
    )
    return BookingHistory(current=current, past=past, total_past=total_past)
