"""
Ending sessions.

end_job() is called from the apps by either party when a session is over.
It is idempotent: anything but a started booking is answered with success
and left alone, so a customer and a translator both pressing "end" does no
harm.

customer_not_call() records that the customer never showed up.
"""

import logging
from datetime import datetime
from typing import Callable

from sqlalchemy.orm import Session

from models.enums import JobStatus
from notifications.gateway import NotificationGateway
from booking.base import FlowResult
from booking.notifier import BookingNotifier
from booking.stores import AssignmentStore, JobStore
from booking.timing import format_interval, utcnow

logger = logging.getLogger(__name__)


class CompletionHandler:

    def __init__(
        self,
        session: Session,
        gateway: NotificationGateway,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._jobs = JobStore(session)
        self._assignments = AssignmentStore(session)
        self._notifier = BookingNotifier(gateway, session)
        self._clock = clock

    def end_job(self, job_id: int, user_id: int) -> FlowResult:
        job = self._jobs.find(job_id)
        if job.status != JobStatus.STARTED.value:
            return FlowResult.success()

        now = self._clock()
        job.end_at = now
        job.status = JobStatus.COMPLETED.value
        job.session_time = format_interval(now - job.due)

        assignment = self._assignments.active_for(job.id)
        if assignment is not None:
            self._assignments.complete(assignment, now, user_id)
        self._jobs.update(job)
        logger.info(f"Booking #{job.id} completed, session time {job.session_time}")

        self._notifier.session_ended(job)
        return FlowResult.success()

    def customer_not_call(self, job_id: int) -> FlowResult:
        job = self._jobs.find(job_id)
        if job.status not in (JobStatus.ASSIGNED.value, JobStatus.STARTED.value):
            return FlowResult.success()

        now = self._clock()
        job.end_at = now
        job.status = JobStatus.NOT_CARRIED_OUT_CUSTOMER.value

        assignment = self._assignments.active_for(job.id)
        if assignment is not None:
            self._assignments.complete(assignment, now, assignment.user_id)
        self._jobs.update(job)
        logger.info(f"Booking #{job.id} marked as not carried out by the customer")
        return FlowResult.success()
