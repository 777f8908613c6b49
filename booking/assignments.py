"""
Translator assignment tracker: works out whether an admin update moves a
booking to another translator, and applies the move.

Two steps, so lookups can fail before anything is written:

    change = tracker.detect(current, translator_id, translator_email)   # may raise NotFound
    tracker.apply(job, change, now)                                     # writes rows

History is append-only. A reassignment never edits the translator on the
existing row; it stamps cancel_at on it and inserts a fresh row for the new
translator, so the assignment table doubles as the audit trail of who held
the booking when.
"""

import logging
from datetime import datetime
from typing import Optional

from models.job import Job
from models.translator import TranslatorAssignment
from booking.base import AssignmentChange
from booking.stores import AssignmentStore, UserDirectory

logger = logging.getLogger(__name__)


class TranslatorAssignmentTracker:

    def __init__(self, assignments: AssignmentStore, users: UserDirectory):
        self._assignments = assignments
        self._users = users

    def detect(
        self,
        current: Optional[TranslatorAssignment],
        translator_id: Optional[int] = None,
        translator_email: Optional[str] = None,
    ) -> AssignmentChange:
        """
        Decide whether the request implies a new translator.

        - No current assignment and a translator named (id != 0 or email != ""):
          change to that translator.
        - Current assignment and a different resolved id, or an email given:
          change to the resolved translator.
        - Anything else: no change.

        Raises NotFound if the email (or id) does not belong to a user.
        """
        email = (translator_email or "").strip()
        if not translator_id and not email:
            return AssignmentChange(changed=False, old=current)

        new_user = self._users.by_email(email) if email else self._users.get(translator_id)

        if current is None:
            return AssignmentChange(changed=True, old=None, new_user=new_user)

        if email or new_user.id != current.user_id:
            return AssignmentChange(changed=True, old=current, new_user=new_user)

        return AssignmentChange(changed=False, old=current)

    def apply(self, job: Job, change: AssignmentChange, now: datetime) -> AssignmentChange:
        if not change.changed:
            return change

        # Close the old row first so at most one active row exists at any point
        if change.old is not None:
            self._assignments.cancel(change.old, now)

        change.new = self._assignments.create(
            user_id=change.new_user.id,
            job_id=job.id,
            created_at=now,
        )
        logger.info(
            f"Booking #{job.id}: translator "
            f"{change.old.user_id if change.old is not None else None} → {change.new_user.id}"
        )
        return change

    def history(self, job_id: int) -> list[TranslatorAssignment]:
        return self._assignments.history(job_id)
