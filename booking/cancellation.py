"""
Cancellation and reopening of bookings.

cancel_job() behaves differently depending on who cancels:

    customer    → withdrawbefore24 if the booking is at least
                  CANCELLATION_NOTICE_HOURS away, withdrawafter24 otherwise.
                  The translator holding the booking gets a push.

    translator  → only allowed while the booking is more than
                  CANCELLATION_NOTICE_HOURS away. The booking goes back to
                  pending with a fresh expiry, the translator's assignment is
                  closed (cancel_at), the customer gets a push and every other
                  eligible translator is offered the booking again.
                  Inside the window the translator has to phone support.

reopen() is the admin tool for putting a booking back on the market.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable

from sqlalchemy.orm import Session

from config.settings import settings
from models.enums import JobStatus, UserRole
from models.job import Job
from models.user import User
from notifications import messages
from notifications.gateway import NotificationGateway
from booking.base import FlowResult
from booking.notifier import BookingNotifier
from booking.stores import AssignmentStore, JobStore
from booking.timing import utcnow, will_expire_at

logger = logging.getLogger(__name__)

_CUSTOMER_CANCELLABLE = {JobStatus.PENDING.value, JobStatus.ASSIGNED.value}

# Reopened in place; every other status is copied into a new booking
_REOPEN_IN_PLACE = {JobStatus.PENDING.value, JobStatus.ASSIGNED.value, JobStatus.STARTED.value}

# Columns copied when a finished booking is reopened as a new booking
_REOPEN_COPY_FIELDS = (
    "user_id", "due", "job_type", "from_language_id", "to_language_id", "duration",
    "immediate", "certified", "gender", "customer_phone_type", "customer_physical_type",
    "town", "user_email", "reference",
)


class CancellationHandler:

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
        self._notice = timedelta(hours=settings.CANCELLATION_NOTICE_HOURS)

    def cancel_job(self, job_id: int, user: User) -> FlowResult:
        job = self._jobs.find(job_id)
        if user.is_role(UserRole.CUSTOMER):
            return self._customer_cancel(job)
        return self._translator_cancel(job, user)

    def _customer_cancel(self, job: Job) -> FlowResult:
        if job.status not in _CUSTOMER_CANCELLABLE:
            return FlowResult.fail(f"Booking #{job.id} can no longer be cancelled ({job.status})")

        now = self._clock()
        job.withdraw_at = now
        if job.due - now >= self._notice:
            job.status = JobStatus.WITHDRAWBEFORE24.value
        else:
            job.status = JobStatus.WITHDRAWAFTER24.value

        assignment = self._assignments.active_for(job.id)
        self._jobs.update(job)
        logger.info(f"Booking #{job.id} withdrawn by customer → {job.status}")

        if assignment is not None:
            self._notifier.customer_cancelled(job, assignment.user)
        return FlowResult.success(jobstatus="success")

    def _translator_cancel(self, job: Job, translator: User) -> FlowResult:
        now = self._clock()
        assignment = self._assignments.active_for(job.id)
        if assignment is None or assignment.user_id != translator.id:
            return FlowResult.fail(f"Booking #{job.id} is not assigned to you")

        if job.due - now <= self._notice:
            return FlowResult.fail(
                messages.late_cancellation_text(settings.SUPPORT_PHONE, settings.CANCELLATION_NOTICE_HOURS)
            )

        job.status = JobStatus.PENDING.value
        job.created_at = now
        job.will_expire_at = will_expire_at(job.due, now)
        self._assignments.cancel(assignment, now)
        self._jobs.update(job)
        logger.info(f"Booking #{job.id} cancelled by translator {translator.id}, reopened")

        self._notifier.translator_cancelled(job)
        self._notifier.broadcast(job, exclude_user_id=translator.id)
        return FlowResult.success()

    def reopen(self, job_id: int, user_id: int) -> FlowResult:
        """
        Put a booking back to pending.

        Only a booking still in play (pending, assigned, started) is reopened in
        place. A finished one (timed out, completed, withdrawn, not carried out)
        keeps its status and session time: a new pending booking is created from
        it and points back at the old booking in its admin comment. Either way
        any live assignment is closed, and a closed history row for `user_id`
        records who was taken off.
        """
        now = self._clock()
        job = self._jobs.find(job_id)

        if job.status in _REOPEN_IN_PLACE:
            job.status = JobStatus.PENDING.value
            job.created_at = now
            job.will_expire_at = will_expire_at(job.due, now)
            reopened = job
        else:
            reopened = self._jobs.create(
                **{name: getattr(job, name) for name in _REOPEN_COPY_FIELDS},
                status=JobStatus.PENDING.value,
                created_at=now,
                will_expire_at=will_expire_at(job.due, now),
                admin_comments=f"This booking is a reopening of booking #{job.id}",
            )

        self._assignments.cancel_all_active(job.id, now)
        self._assignments.create(user_id=user_id, job_id=job.id, created_at=now, cancel_at=now)
        self._jobs.update(reopened)
        logger.info(f"Booking #{job.id} reopened as #{reopened.id}")

        self._notifier.broadcast(reopened)
        return FlowResult.success("Tolk cancelled!", job_id=reopened.id)
