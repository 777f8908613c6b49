"""Tests for translator matching."""

from datetime import timedelta

from models.enums import Certification, JobStatus, JobType, TranslatorLevel, TranslatorType
from models.user import TranslatorBlacklist
from booking.matching import (
    eligible_translators,
    job_to_data,
    potential_jobs,
    translator_levels_for,
    translator_type_for,
)
from conftest import NOW


def _names(translators) -> list[str]:
    return [t.name for t in translators]


def test_translator_type_follows_job_type():
    assert translator_type_for(JobType.PAID.value) == TranslatorType.PROFESSIONAL
    assert translator_type_for(JobType.RWS.value) == TranslatorType.RWS
    assert translator_type_for(JobType.UNPAID.value) == TranslatorType.VOLUNTEER
    assert translator_type_for("other") is None


def test_levels_follow_certification():
    assert translator_levels_for(Certification.LAW.value) == [TranslatorLevel.CERTIFIED_LAW]
    assert TranslatorLevel.LAYMAN in translator_levels_for(Certification.NORMAL.value)
    assert TranslatorLevel.LAYMAN not in translator_levels_for(Certification.YES.value)
    assert len(translator_levels_for(None)) == len(TranslatorLevel)


def test_all_speakers_are_eligible(session, seed, make_job):
    job = make_job()
    assert _names(eligible_translators(session, job)) == ["Anna", "Bashir"]


def test_gender_wish_filters(session, seed, make_job):
    job = make_job(gender="male")
    assert _names(eligible_translators(session, job)) == ["Bashir"]


def test_language_filters(session, seed, make_job):
    job = make_job()
    job.from_language_id = seed.somali.id
    session.commit()
    assert eligible_translators(session, job) == []


def test_blacklist_and_exclusion(session, seed, make_job):
    session.add(TranslatorBlacklist(user_id=seed.customer.id, translator_id=seed.anna.id))
    session.commit()
    job = make_job()

    assert _names(eligible_translators(session, job)) == ["Bashir"]
    assert eligible_translators(session, job, exclude_user_id=seed.bashir.id) == []


def test_certification_excludes_layman(session, seed, make_job):
    seed.bashir.translator_level = TranslatorLevel.LAYMAN.value
    session.commit()
    job = make_job(certified=Certification.YES.value)

    assert _names(eligible_translators(session, job)) == ["Anna"]


def test_potential_jobs_for_translator(session, seed, make_job):
    visible = make_job()
    make_job(gender="male")
    make_job(JobStatus.ASSIGNED)
    make_job(job_type=JobType.UNPAID.value)

    assert [j.id for j in potential_jobs(session, seed.anna, NOW)] == [visible.id]


def test_job_to_data(session, seed, make_job):
    job = make_job(due=NOW + timedelta(hours=5), gender="female", certified=Certification.BOTH.value)

    data = job_to_data(job)

    assert data["job_id"] == job.id
    assert data["due_date"] == "2026-03-10"
    assert data["due_time"] == "17:00:00"
    assert data["customer_town"] == "Umeå"
    assert data["job_for"] == ["Kvinna", "normal", "certified"]
