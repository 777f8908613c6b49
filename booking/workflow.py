"""
BookingWorkflow: orchestrates admin updates of a booking.

update_job() runs in four phases:

    1. Resolve   load the job, plan the translator change, compare due and
                 language, ask the transition engine about the status.
                 Any NotFound here aborts before a single field is touched.
    2. Apply     write the field changes, append the audit entries, write the
                 admin log line.
    3. Persist   one commit for everything (JobStore.update). Effects the
                 engine flagged BEFORE_PERSIST are dispatched right before it.
    4. Notify    engine effects, then date / translator / language change
                 notifications, only after the commit succeeded.

Bookings whose due time has already passed are still saved, but the date,
translator and language change notifications are skipped: nobody needs to
hear about changes to a session that is already over.

create_job() is the customer-side entry point for new bookings.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.orm import Session

from models.enums import JobStatus
from models.job import Job
from models.user import User
from notifications.gateway import NotificationGateway
from booking.assignments import TranslatorAssignmentTracker
from booking.base import EffectPhase, StatusChangeRequest, UpdateOutcome
from booking.notifier import BookingNotifier
from booking.stores import AssignmentStore, JobStore, LanguageDirectory, UserDirectory
from booking.timing import utcnow, will_expire_at
from booking.transitions import StatusTransitionEngine, TransitionContext

logger = logging.getLogger(__name__)
admin_logger = logging.getLogger("booking.admin")


class BookingWorkflow:

    def __init__(
        self,
        session: Session,
        gateway: NotificationGateway,
        engine: Optional[StatusTransitionEngine] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._jobs = JobStore(session)
        self._assignments = AssignmentStore(session)
        self._languages = LanguageDirectory(session)
        self._tracker = TranslatorAssignmentTracker(self._assignments, UserDirectory(session))
        self._engine = engine or StatusTransitionEngine()
        self._notifier = BookingNotifier(gateway, session)
        self._clock = clock

    def update_job(self, job_id: int, request: StatusChangeRequest, actor: User) -> UpdateOutcome:
        now = self._clock()

        # ── Phase 1: resolve (no writes) ────────────────────────
        job = self._jobs.find(job_id)
        current = self._assignments.active_for(job.id)
        translator_change = self._tracker.detect(
            current, request.translator_id, request.translator_email
        )

        old_due = job.due
        date_changed = request.due is not None and request.due != job.due

        old_language_id = job.from_language_id
        lang_changed = (
            request.from_language_id is not None
            and request.from_language_id != job.from_language_id
        )
        old_language = new_language = None
        if lang_changed:
            old_language = self._languages.name_of(old_language_id)
            new_language = self._languages.name_of(request.from_language_id)

        # ── Phase 2: apply ──────────────────────────────────────
        changes: list[dict] = []

        self._tracker.apply(job, translator_change, now)
        if translator_change.changed:
            changes.append(translator_change.log_entry)

        if date_changed:
            job.due = request.due
            changes.append({"old_due": _fmt(old_due), "new_due": _fmt(request.due)})

        if lang_changed:
            job.from_language_id = request.from_language_id
            changes.append({"old_lang": old_language, "new_lang": new_language})

        transition = self._engine.apply(
            job,
            request,
            TransitionContext(now=now, translator_changed=translator_change.changed),
        )
        if transition.status_changed:
            changes.append(transition.log_entry)

        if request.admin_comments is not None:
            job.admin_comments = request.admin_comments
        if request.reference is not None:
            job.reference = request.reference

        admin_logger.info(
            f"USER #{actor.id}({actor.name}) has updated booking #{job.id} with data: {changes}"
        )

        # ── Phase 3: persist ────────────────────────────────────
        self._notifier.dispatch(transition.effects_for(EffectPhase.BEFORE_PERSIST), job)
        self._jobs.update(job)

        # ── Phase 4: notify ─────────────────────────────────────
        self._notifier.dispatch(transition.effects_for(EffectPhase.AFTER_PERSIST), job)

        if job.due is not None and job.due <= now:
            logger.info(f"Booking #{job.id} is already due, change notifications skipped")
            return UpdateOutcome(updated=True, changes=changes)

        if date_changed:
            self._notifier.changed_date(job, old_due)
        if translator_change.changed:
            self._notifier.changed_translator(job, translator_change.old, translator_change.new)
        if lang_changed:
            self._notifier.changed_language(job, old_language)

        return UpdateOutcome(updated=True, changes=changes)

    def create_job(self, customer: User, **fields) -> Job:
        """Store a new pending booking. Immediate bookings alert the admin right away."""
        now = self._clock()
        due = fields.get("due")
        job = self._jobs.create(
            user_id=customer.id,
            status=JobStatus.PENDING.value,
            created_at=now,
            will_expire_at=will_expire_at(due, now) if due is not None else None,
            **fields,
        )
        self._jobs.update(job)
        logger.info(f"Booking #{job.id} created by customer {customer.id}")

        if job.immediate:
            self._notifier.new_immediate_job(job)
        return job


def _fmt(value: Optional[datetime]) -> Optional[str]:
    return value.strftime("%Y-%m-%d %H:%M:%S") if value is not None else None
