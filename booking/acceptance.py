"""
Translator acceptance of pending bookings.

Two entry points share the same rules:
- accept_job(): the web flow; answers with the translator's refreshed list
  of potential bookings
- accept_job_with_id(): the app flow; additionally pushes the customer and
  answers with a confirmation message

Rules, in order:
1. A translator who already holds a live booking starting at the same due
   time gets "fail". Nothing is written.
2. The booking must still be pending at the moment of the claim. The claim is
   a conditional UPDATE in the database (AssignmentStore.claim_pending), so
   when two translators accept concurrently exactly one wins; the other gets
   "fail". There is no in-process locking.
3. On success the customer is mailed (and pushed, for the app flow).

Both answer with a FlowResult rather than raising: losing a race is a normal
outcome for the translator, not an error.
"""

import logging
from datetime import datetime
from typing import Callable

from sqlalchemy.orm import Session

from models.enums import JobStatus
from models.job import Job
from models.user import User
from notifications import messages
from notifications.gateway import NotificationGateway
from booking.base import FlowResult
from booking.matching import potential_jobs
from booking.notifier import BookingNotifier
from booking.stores import AssignmentStore, JobStore, LanguageDirectory
from booking.timing import utcnow

logger = logging.getLogger(__name__)


class AcceptanceHandler:

    def __init__(
        self,
        session: Session,
        gateway: NotificationGateway,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._session = session
        self._jobs = JobStore(session)
        self._assignments = AssignmentStore(session)
        self._languages = LanguageDirectory(session)
        self._notifier = BookingNotifier(gateway, session)
        self._clock = clock

    def accept_job(self, job_id: int, translator: User) -> FlowResult:
        job = self._jobs.find(job_id)
        if self._already_booked(job, translator):
            return FlowResult.fail(messages.already_booked_text(job.due))

        if not self._claim(job, translator):
            language = self._languages.name_of(job.from_language_id)
            return FlowResult.fail(messages.already_taken_text(language, job.duration, job.due))

        self._notifier.job_accepted(job)
        jobs = potential_jobs(self._session, translator, self._clock())
        return FlowResult.success(job=job, jobs=jobs)

    def accept_job_with_id(self, job_id: int, translator: User) -> FlowResult:
        job = self._jobs.find(job_id)
        if self._already_booked(job, translator):
            return FlowResult.fail(messages.already_booked_text(job.due))

        language = self._languages.name_of(job.from_language_id)
        if not self._claim(job, translator):
            return FlowResult.fail(messages.already_taken_text(language, job.duration, job.due))

        self._notifier.job_accepted(job)
        self._notifier.job_accepted_push(job)
        return FlowResult.success(
            messages.accept_success_text(language, job.duration, job.due),
            job=job,
        )

    def _already_booked(self, job: Job, translator: User) -> bool:
        if job.due is None:
            return False
        booked = self._assignments.has_booking_at(translator.id, job.due, exclude_job_id=job.id)
        if booked:
            logger.info(f"Translator {translator.id} already booked at {job.due}, booking #{job.id} refused")
        return booked

    def _claim(self, job: Job, translator: User) -> bool:
        if job.status != JobStatus.PENDING.value:
            return False
        assignment = self._assignments.claim_pending(job, translator.id, self._clock())
        if assignment is None:
            return False
        self._jobs.update(job)
        logger.info(f"Booking #{job.id} accepted by translator {translator.id}")
        return True
