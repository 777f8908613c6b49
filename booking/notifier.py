"""
BookingNotifier: turns booking changes into gateway calls.

Two kinds of input:
1. Effects returned by the transition engine (dispatch())
2. Changes detected by the workflow and flows themselves
   (changed_date(), changed_translator(), job_accepted(), ...)

Every single send goes through _deliver(), which catches
NotificationDeliveryFailed and logs it. Notifications are fire-and-forget:
by the time anything here runs, the booking change is already committed (or,
for BEFORE_PERSIST effects, about to be), and a failed hand-off must not
change that outcome.
"""

import logging
from typing import Callable, Iterable, Optional

from sqlalchemy.orm import Session

from config.settings import settings
from models.job import Job
from models.translator import TranslatorAssignment
from models.user import User
from notifications import messages
from notifications.gateway import NotificationGateway
from booking.base import Effect, EffectKind
from booking.errors import NotFound, NotificationDeliveryFailed
from booking.matching import eligible_translators, job_to_data
from booking.stores import AssignmentStore, LanguageDirectory
from booking.timing import session_time_text

logger = logging.getLogger(__name__)


def _recipient(user: User) -> dict:
    return {"id": user.id, "name": user.name, "email": user.email}


class BookingNotifier:

    def __init__(self, gateway: NotificationGateway, session: Session):
        self._gateway = gateway
        self._session = session
        self._assignments = AssignmentStore(session)
        self._languages = LanguageDirectory(session)
        self._handlers: dict[EffectKind, Callable[[Job], None]] = {
            EffectKind.CUSTOMER_REOPENED: self.customer_reopened,
            EffectKind.BROADCAST_TO_TRANSLATORS: self.broadcast,
            EffectKind.CUSTOMER_ACCEPTED: self.job_accepted,
            EffectKind.TRANSLATOR_ASSIGNED: self.translator_assigned,
            EffectKind.SESSION_START_REMINDERS: self.session_start_reminders,
            EffectKind.SESSION_ENDED: self.session_ended,
            EffectKind.CUSTOMER_ADMIN_CANCELLED: self.customer_admin_cancelled,
            EffectKind.CANCELLATION_NOTICES: self.cancellation_notices,
        }

    # ── Engine effects ──────────────────────────────────────────

    def dispatch(self, effects: Iterable[Effect], job: Job) -> None:
        for effect in effects:
            self._handlers[effect.kind](job)

    def customer_reopened(self, job: Job) -> None:
        customer = job.customer
        self._email(
            customer,
            messages.reopened_subject(self._language(job), job.id),
            messages.TEMPLATE_STATUS_TO_CUSTOMER,
            {"user": _recipient(customer), "job": job_to_data(job)},
            address=self._customer_address(job),
        )

    def job_accepted(self, job: Job) -> None:
        customer = job.customer
        self._email(
            customer,
            messages.accepted_subject(job.id),
            messages.TEMPLATE_JOB_ACCEPTED,
            {"user": _recipient(customer), "job": job_to_data(job)},
            address=self._customer_address(job),
        )

    def translator_assigned(self, job: Job) -> None:
        translator = self._active_translator(job)
        if translator is None:
            return
        self._email(
            translator,
            messages.accepted_subject(job.id),
            messages.TEMPLATE_TRANSLATOR_NEW,
            {"user": _recipient(translator), "job": job_to_data(job)},
        )

    def session_start_reminders(self, job: Job) -> None:
        self.session_start_remind(job.customer, job)
        translator = self._active_translator(job)
        if translator is not None:
            self.session_start_remind(translator, job)

    def session_ended(self, job: Job) -> None:
        """Invoice info to the customer, payroll info to the translator."""
        session_time = session_time_text(job.session_time or "0:00:00")
        subject = messages.session_ended_subject(job.id)
        customer = job.customer
        self._email(
            customer,
            subject,
            messages.TEMPLATE_SESSION_ENDED,
            {"user": _recipient(customer), "job": job_to_data(job),
             "session_time": session_time, "for_text": "faktura"},
            address=self._customer_address(job),
        )

        translator = self._active_translator(job, include_completed=True)
        if translator is not None:
            self._email(
                translator,
                subject,
                messages.TEMPLATE_SESSION_ENDED,
                {"user": _recipient(translator), "job": job_to_data(job),
                 "session_time": session_time, "for_text": "lön"},
            )

    def customer_admin_cancelled(self, job: Job) -> None:
        customer = job.customer
        self._email(
            customer,
            messages.cancelled_subject(job.id),
            messages.TEMPLATE_ADMIN_CANCELLED,
            {"user": _recipient(customer), "job": job_to_data(job)},
            address=self._customer_address(job),
        )

    def cancellation_notices(self, job: Job) -> None:
        customer = job.customer
        subject = messages.cancelled_subject(job.id)
        self._email(
            customer,
            subject,
            messages.TEMPLATE_CANCELLED_CUSTOMER,
            {"user": _recipient(customer), "job": job_to_data(job)},
            address=self._customer_address(job),
        )
        translator = self._active_translator(job)
        if translator is not None:
            self._email(
                translator,
                subject,
                messages.TEMPLATE_CANCELLED_TRANSLATOR,
                {"user": _recipient(translator), "job": job_to_data(job)},
            )

    # ── Change notifications (BookingWorkflow) ──────────────────

    def changed_date(self, job: Job, old_due) -> None:
        subject = messages.changed_booking_subject(job.id)
        context = {"job": job_to_data(job), "old_time": old_due}
        customer = job.customer
        self._email(
            customer, subject, messages.TEMPLATE_DATE_CHANGED,
            {**context, "user": _recipient(customer)},
            address=self._customer_address(job),
        )
        translator = self._active_translator(job)
        if translator is not None:
            self._email(
                translator, subject, messages.TEMPLATE_DATE_CHANGED,
                {**context, "user": _recipient(translator)},
            )

    def changed_translator(
        self,
        job: Job,
        old: Optional[TranslatorAssignment],
        new: TranslatorAssignment,
    ) -> None:
        subject = messages.changed_translator_subject(job.id)
        customer = job.customer
        self._email(
            customer, subject, messages.TEMPLATE_TRANSLATOR_CUSTOMER,
            {"user": _recipient(customer), "job": job_to_data(job)},
            address=self._customer_address(job),
        )
        if old is not None:
            self._email(
                old.user, subject, messages.TEMPLATE_TRANSLATOR_OLD,
                {"user": _recipient(old.user), "job": job_to_data(job)},
            )
        self._email(
            new.user, subject, messages.TEMPLATE_TRANSLATOR_NEW,
            {"user": _recipient(new.user), "job": job_to_data(job)},
        )

    def changed_language(self, job: Job, old_language: str) -> None:
        subject = messages.changed_booking_subject(job.id)
        context = {"job": job_to_data(job), "old_lang": old_language}
        customer = job.customer
        self._email(
            customer, subject, messages.TEMPLATE_LANG_CHANGED,
            {**context, "user": _recipient(customer)},
            address=self._customer_address(job),
        )
        translator = self._active_translator(job)
        if translator is not None:
            self._email(
                translator, subject, messages.TEMPLATE_LANG_CHANGED,
                {**context, "user": _recipient(translator)},
            )

    # ── Flow notifications ──────────────────────────────────────

    def job_accepted_push(self, job: Job) -> None:
        text = messages.job_accepted_text(self._language(job), job.duration, job.due)
        self._push(job.customer, job, messages.PUSH_JOB_ACCEPTED, text)

    def customer_cancelled(self, job: Job, translator: User) -> None:
        text = messages.customer_cancelled_text(self._language(job), job.duration, job.due)
        self._push(translator, job, messages.PUSH_JOB_CANCELLED, text)

    def translator_cancelled(self, job: Job) -> None:
        text = messages.translator_cancelled_text(self._language(job), job.duration, job.due)
        self._push(job.customer, job, messages.PUSH_JOB_CANCELLED, text)

    def session_start_remind(self, user: User, job: Job) -> None:
        town = job.town if job.customer_physical_type else None
        text = messages.session_start_remind_text(self._language(job), job.due, job.duration, town)
        self._push(user, job, messages.PUSH_SESSION_START_REMIND, text)

    def broadcast(self, job: Job, exclude_user_id: Optional[int] = None) -> int:
        """Push a booking to every eligible translator. Returns the number of recipients."""
        translators = eligible_translators(self._session, job, exclude_user_id)
        text = messages.suggested_job_text(
            self._language(job), job.duration, job.due, job.customer_physical_type
        )
        metadata = {"notification_type": messages.PUSH_SUGGESTED_JOB, **job_to_data(job)}

        reachable = [t for t in translators if self._gateway.needs_push(t)]
        immediate = [t for t in reachable if not self._gateway.needs_delayed_push(t)]
        delayed = [t for t in reachable if t not in immediate]

        if immediate:
            self._deliver(self._gateway.send_push, immediate, job.id, metadata, {"en": text}, False)
        if delayed:
            self._deliver(self._gateway.send_push, delayed, job.id, metadata, {"en": text}, True)
        logger.info(f"Broadcast booking #{job.id} to {len(reachable)} translator(s)")
        return len(reachable)

    def sms_to_translators(self, job: Job) -> int:
        translators = [t for t in eligible_translators(self._session, job) if t.phone]
        text = messages.suggested_job_sms(self._language(job), job.duration, job.due, job.id)
        for translator in translators:
            self._deliver(self._gateway.send_sms, translator.phone, text)
        return len(translators)

    def new_immediate_job(self, job: Job) -> None:
        self._deliver(
            self._gateway.send_email,
            settings.ADMIN_EMAIL,
            settings.ADMIN_NAME,
            messages.new_immediate_job_subject(job.id),
            messages.TEMPLATE_NEW_IMMEDIATE_JOB,
            {"job": job_to_data(job)},
        )

    # ── Internals ───────────────────────────────────────────────

    def _language(self, job: Job) -> str:
        try:
            return self._languages.name_of(job.from_language_id)
        except NotFound:
            logger.warning(f"Booking #{job.id} refers to unknown language {job.from_language_id}")
            return ""

    def _customer_address(self, job: Job) -> str:
        return job.user_email or job.customer.email

    def _active_translator(self, job: Job, include_completed: bool = False) -> Optional[User]:
        assignment = self._assignments.active_for(job.id)
        if assignment is None and include_completed:
            history = self._assignments.history(job.id)
            completed = [a for a in history if a.cancel_at is None and a.completed_at is not None]
            assignment = completed[-1] if completed else None
        return assignment.user if assignment is not None else None

    def _email(self, user: User, subject: str, template: str, context: dict,
               address: Optional[str] = None) -> None:
        self._deliver(self._gateway.send_email, address or user.email, user.name,
                      subject, template, context)

    def _push(self, user: Optional[User], job: Job, notification_type: str, text: str) -> None:
        if user is None or not self._gateway.needs_push(user):
            return
        self._deliver(
            self._gateway.send_push,
            [user],
            job.id,
            {"notification_type": notification_type},
            {"en": text},
            self._gateway.needs_delayed_push(user),
        )

    def _deliver(self, send: Callable, *args) -> None:
        try:
            send(*args)
        except NotificationDeliveryFailed as e:
            logger.error(f"Notification dropped: {e}")
