"""
Translator matching: who may be offered a booking, and which bookings a
translator may see.

A booking's job_type decides the translator type that can take it, and its
certified flag decides the accepted translator levels. On top of that the
translator must speak the booking's language, match the requested gender
(if any), and not be on the customer's blacklist.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from models.enums import (
    Certification,
    Gender,
    JobStatus,
    JobType,
    TranslatorLevel,
    TranslatorType,
    UserRole,
)
from models.job import Job
from models.user import User, UserLanguage, TranslatorBlacklist

_TRANSLATOR_TYPES: dict[str, TranslatorType] = {
    JobType.PAID.value: TranslatorType.PROFESSIONAL,
    JobType.RWS.value: TranslatorType.RWS,
    JobType.UNPAID.value: TranslatorType.VOLUNTEER,
}

# reverse lookup: translator type → the job type they take
_JOB_TYPES: dict[str, JobType] = {t.value: JobType(j) for j, t in _TRANSLATOR_TYPES.items()}

_CERTIFIED_LEVELS = [
    TranslatorLevel.CERTIFIED,
    TranslatorLevel.CERTIFIED_LAW,
    TranslatorLevel.CERTIFIED_HEALTH,
]
_LAYMAN_LEVELS = [TranslatorLevel.LAYMAN, TranslatorLevel.TRANSLATION_COURSES]

_LEVELS: dict[str, list[TranslatorLevel]] = {
    Certification.YES.value: _CERTIFIED_LEVELS,
    Certification.BOTH.value: _CERTIFIED_LEVELS,
    Certification.LAW.value: [TranslatorLevel.CERTIFIED_LAW],
    Certification.N_LAW.value: [TranslatorLevel.CERTIFIED_LAW],
    Certification.HEALTH.value: [TranslatorLevel.CERTIFIED_HEALTH],
    Certification.N_HEALTH.value: [TranslatorLevel.CERTIFIED_HEALTH],
    Certification.NORMAL.value: _LAYMAN_LEVELS,
}


def translator_type_for(job_type: str) -> Optional[TranslatorType]:
    return _TRANSLATOR_TYPES.get(job_type)


def translator_levels_for(certified: Optional[str]) -> list[TranslatorLevel]:
    """Accepted translator levels for a booking. No certification wish → any level."""
    if not certified:
        return _CERTIFIED_LEVELS + _LAYMAN_LEVELS
    return _LEVELS.get(certified, [])


def eligible_translators(session: Session, job: Job, exclude_user_id: Optional[int] = None) -> list[User]:
    translator_type = translator_type_for(job.job_type)
    levels = [level.value for level in translator_levels_for(job.certified)]
    if translator_type is None or not levels:
        return []

    blacklisted = select(TranslatorBlacklist.translator_id).where(
        TranslatorBlacklist.user_id == job.user_id
    )
    speaks_language = select(UserLanguage.user_id).where(
        UserLanguage.language_id == job.from_language_id
    )

    query = select(User).where(
        User.role == UserRole.TRANSLATOR.value,
        User.translator_type == translator_type.value,
        User.translator_level.in_(levels),
        User.id.in_(speaks_language),
        User.id.not_in(blacklisted),
    )
    if job.gender:
        query = query.where(User.gender == job.gender)
    if exclude_user_id is not None:
        query = query.where(User.id != exclude_user_id)

    return list(session.execute(query.order_by(User.id)).scalars().all())


def potential_jobs(session: Session, translator: User, now: datetime) -> list[Job]:
    """Pending future bookings this translator could accept."""
    job_type = _JOB_TYPES.get(translator.translator_type or "")
    if job_type is None:
        return []

    languages = select(UserLanguage.language_id).where(UserLanguage.user_id == translator.id)
    query = (
        select(Job)
        .where(
            Job.status == JobStatus.PENDING.value,
            Job.job_type == job_type.value,
            Job.from_language_id.in_(languages),
            Job.due > now,
        )
        .order_by(Job.due)
    )
    jobs = session.execute(query).scalars().all()
    return [
        job for job in jobs
        if translator.translator_level in {l.value for l in translator_levels_for(job.certified)}
        and (not job.gender or job.gender == translator.gender)
    ]


def job_to_data(job: Job) -> dict:
    """Flatten a booking into the payload sent along with translator pushes."""
    customer = job.customer
    data = {
        "job_id": job.id,
        "from_language_id": job.from_language_id,
        "immediate": "yes" if job.immediate else "no",
        "duration": job.duration,
        "status": job.status,
        "gender": job.gender,
        "certified": job.certified,
        "due": job.due.strftime("%Y-%m-%d %H:%M:%S") if job.due else None,
        "job_type": job.job_type,
        "customer_phone_type": "yes" if job.customer_phone_type else "no",
        "customer_physical_type": "yes" if job.customer_physical_type else "no",
        "customer_town": customer.city if customer is not None else None,
        "customer_type": customer.customer_type if customer is not None else None,
        "due_date": job.due.strftime("%Y-%m-%d") if job.due else None,
        "due_time": job.due.strftime("%H:%M:%S") if job.due else None,
        "job_for": [],
    }

    if job.gender == Gender.MALE.value:
        data["job_for"].append("Man")
    elif job.gender == Gender.FEMALE.value:
        data["job_for"].append("Kvinna")

    if job.certified == Certification.BOTH.value:
        data["job_for"].extend(["normal", "certified"])
    elif job.certified == Certification.YES.value:
        data["job_for"].append("certified")
    elif job.certified:
        data["job_for"].append(job.certified)

    return data
