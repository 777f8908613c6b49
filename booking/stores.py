"""
SQLAlchemy-backed collaborators used by the booking flows.

    JobStore           → find / create / update / list bookings, per-user history
    AssignmentStore    → translator assignment rows (active, history, claim)
    UserDirectory      → user lookups by id / email
    LanguageDirectory  → language names

All four wrap the same request-scoped Session. None of them commits on its
own except JobStore.update(), which is the single commit point of every
booking flow: everything staged before it lands atomically, or not at all.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import select, update, func
from sqlalchemy.orm import Session

from models.enums import JobStatus
from models.job import Job
from models.language import Language
from models.translator import TranslatorAssignment
from models.user import User
from booking.errors import NotFound

logger = logging.getLogger(__name__)


class JobStore:

    def __init__(self, session: Session):
        self._session = session

    def find(self, job_id: int) -> Job:
        job = self._session.get(Job, job_id)
        if job is None:
            raise NotFound("Job", job_id)
        return job

    def create(self, **fields) -> Job:
        job = Job(**fields)
        self._session.add(job)
        self._session.flush()  # assigns job.id
        return job

    def update(self, job: Job) -> None:
        """Commit everything staged in this session. Rolls back and re-raises on failure."""
        self._session.add(job)
        try:
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

    def list(
        self,
        status: Optional[str] = None,
        job_type: Optional[str] = None,
        user_id: Optional[int] = None,
        offset: int = 0,
        limit: int = 15,
    ) -> tuple[list[Job], int]:
        conditions = []
        if status:
            conditions.append(Job.status == status)
        if job_type:
            conditions.append(Job.job_type == job_type)
        if user_id is not None:
            conditions.append(Job.user_id == user_id)

        total = self._session.execute(
            select(func.count(Job.id)).where(*conditions)
        ).scalar() or 0
        jobs = self._session.execute(
            select(Job)
            .where(*conditions)
            .order_by(Job.created_at.desc(), Job.id.desc())
            .offset(offset)
            .limit(limit)
        ).scalars().all()
        return list(jobs), total

    def for_user(
        self,
        user_id: int,
        statuses: Iterable[str],
        held: bool = False,
        newest_first: bool = False,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> tuple[list[Job], int]:
        """
        One user's bookings in the given statuses, ordered by due time.

        held=False → bookings the user placed
        held=True  → bookings the user holds or held through an assignment
                     that was not cancelled
        """
        conditions = [Job.status.in_(list(statuses))]
        if held:
            conditions.append(Job.id.in_(
                select(TranslatorAssignment.job_id).where(
                    TranslatorAssignment.user_id == user_id,
                    TranslatorAssignment.cancel_at.is_(None),
                )
            ))
        else:
            conditions.append(Job.user_id == user_id)

        total = self._session.execute(
            select(func.count(Job.id)).where(*conditions)
        ).scalar() or 0
        query = (
            select(Job)
            .where(*conditions)
            .order_by(Job.due.desc() if newest_first else Job.due.asc(), Job.id)
            .offset(offset)
        )
        if limit is not None:
            query = query.limit(limit)
        return list(self._session.execute(query).scalars().all()), total


class AssignmentStore:

    def __init__(self, session: Session):
        self._session = session

    def active_for(self, job_id: int) -> Optional[TranslatorAssignment]:
        return self._session.execute(
            select(TranslatorAssignment)
            .where(
                TranslatorAssignment.job_id == job_id,
                TranslatorAssignment.cancel_at.is_(None),
                TranslatorAssignment.completed_at.is_(None),
            )
            .order_by(TranslatorAssignment.id.desc())
        ).scalars().first()

    def history(self, job_id: int) -> list[TranslatorAssignment]:
        return list(self._session.execute(
            select(TranslatorAssignment)
            .where(TranslatorAssignment.job_id == job_id)
            .order_by(TranslatorAssignment.id)
        ).scalars().all())

    def create(self, **fields) -> TranslatorAssignment:
        assignment = TranslatorAssignment(**fields)
        self._session.add(assignment)
        self._session.flush()
        return assignment

    def cancel(self, assignment: TranslatorAssignment, at: datetime) -> None:
        assignment.cancel_at = at
        self._session.flush()

    def complete(self, assignment: TranslatorAssignment, at: datetime, by: int) -> None:
        assignment.completed_at = at
        assignment.completed_by = by
        self._session.flush()

    def cancel_all_active(self, job_id: int, at: datetime) -> int:
        result = self._session.execute(
            update(TranslatorAssignment)
            .where(
                TranslatorAssignment.job_id == job_id,
                TranslatorAssignment.cancel_at.is_(None),
                TranslatorAssignment.completed_at.is_(None),
            )
            .values(cancel_at=at)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def claim_pending(self, job: Job, user_id: int, at: datetime) -> Optional[TranslatorAssignment]:
        """
        Atomically move a pending booking to assigned and record the assignment.

        The conditional UPDATE is the serialization point between translators
        accepting the same booking at the same time: the database lets exactly
        one UPDATE ... WHERE status = 'pending' match the row. The loser sees
        rowcount 0 and gets None back.
        """
        result = self._session.execute(
            update(Job)
            .where(Job.id == job.id, Job.status == JobStatus.PENDING.value)
            .values(status=JobStatus.ASSIGNED.value)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            logger.info(f"Booking #{job.id} was no longer pending, claim by user {user_id} lost")
            self._session.rollback()
            return None

        job.status = JobStatus.ASSIGNED.value
        return self.create(user_id=user_id, job_id=job.id, created_at=at)

    def has_booking_at(self, user_id: int, due: datetime, exclude_job_id: Optional[int] = None) -> bool:
        """True if the translator already holds another live booking starting at `due`."""
        query = (
            select(func.count(TranslatorAssignment.id))
            .join(Job, Job.id == TranslatorAssignment.job_id)
            .where(
                TranslatorAssignment.user_id == user_id,
                TranslatorAssignment.cancel_at.is_(None),
                TranslatorAssignment.completed_at.is_(None),
                Job.due == due,
                Job.status.in_([JobStatus.ASSIGNED.value, JobStatus.STARTED.value]),
            )
        )
        if exclude_job_id is not None:
            query = query.where(Job.id != exclude_job_id)
        return (self._session.execute(query).scalar() or 0) > 0


class UserDirectory:

    def __init__(self, session: Session):
        self._session = session

    def get(self, user_id: int) -> User:
        user = self._session.get(User, user_id)
        if user is None:
            raise NotFound("User", user_id)
        return user

    def by_email(self, email: str) -> User:
        user = self._session.execute(
            select(User).where(func.lower(User.email) == email.strip().lower())
        ).scalars().first()
        if user is None:
            raise NotFound("User", email)
        return user


class LanguageDirectory:

    def __init__(self, session: Session):
        self._session = session

    def name_of(self, language_id: int) -> str:
        language = self._session.get(Language, language_id)
        if language is None:
            raise NotFound("Language", language_id)
        return language.name
