"""
Tests for the TranslatorAssignmentTracker.

The tracker never edits the translator on an existing row: every change
closes the current row (cancel_at) and inserts a new one. These tests walk
through first assignment, reassignment and lookup failures and check the
resulting history.
"""

import pytest

from booking.assignments import TranslatorAssignmentTracker
from booking.errors import NotFound
from booking.stores import AssignmentStore, UserDirectory
from conftest import NOW


def _tracker(session) -> TranslatorAssignmentTracker:
    return TranslatorAssignmentTracker(AssignmentStore(session), UserDirectory(session))


def test_nothing_named_is_no_change(session, seed, make_job):
    job = make_job()
    change = _tracker(session).detect(None, translator_id=0, translator_email="")

    assert not change.changed
    assert change.log_entry == {}


def test_first_assignment_by_id(session, seed, make_job):
    job = make_job()
    tracker = _tracker(session)

    change = tracker.detect(None, translator_id=seed.anna.id)
    tracker.apply(job, change, NOW)
    session.commit()

    history = tracker.history(job.id)
    assert change.changed
    assert len(history) == 1
    assert history[0].user_id == seed.anna.id
    assert history[0].is_active
    assert change.log_entry == {"old_translator": None, "new_translator": "anna@example.com"}


def test_same_translator_id_is_no_change(session, seed, make_job, assign):
    job = make_job()
    current = assign(job, seed.anna)

    change = _tracker(session).detect(current, translator_id=seed.anna.id)

    assert not change.changed
    assert len(_tracker(session).history(job.id)) == 1


def test_email_always_counts_as_change(session, seed, make_job, assign):
    """An email in the request is a change even when it names the current translator."""
    job = make_job()
    current = assign(job, seed.anna)
    tracker = _tracker(session)

    change = tracker.detect(current, translator_email="ANNA@example.com")
    tracker.apply(job, change, NOW)

    assert change.changed
    history = tracker.history(job.id)
    assert len(history) == 2
    assert history[0].cancel_at == NOW
    assert history[1].user_id == seed.anna.id


def test_email_wins_over_id(session, seed, make_job):
    job = make_job()
    change = _tracker(session).detect(None, translator_id=seed.anna.id, translator_email="bashir@example.com")

    assert change.new_user.id == seed.bashir.id


def test_reassignment_cancels_old_row(session, seed, make_job, assign):
    job = make_job()
    current = assign(job, seed.anna)
    tracker = _tracker(session)

    change = tracker.detect(current, translator_id=seed.bashir.id)
    tracker.apply(job, change, NOW)
    session.commit()

    assert current.cancel_at == NOW
    assert change.new.user_id == seed.bashir.id
    assert AssignmentStore(session).active_for(job.id).id == change.new.id
    assert change.log_entry == {
        "old_translator": "anna@example.com",
        "new_translator": "bashir@example.com",
    }


def test_round_trip_keeps_full_history(session, seed, make_job):
    """A → B → A leaves three rows, two of them closed in order, A active."""
    job = make_job()
    tracker = _tracker(session)
    store = AssignmentStore(session)

    for translator in (seed.anna, seed.bashir, seed.anna):
        change = tracker.detect(store.active_for(job.id), translator_id=translator.id)
        tracker.apply(job, change, NOW)
    session.commit()

    history = tracker.history(job.id)
    assert [a.user_id for a in history] == [seed.anna.id, seed.bashir.id, seed.anna.id]
    assert [a.cancel_at is not None for a in history] == [True, True, False]
    assert store.active_for(job.id).id == history[2].id


def test_unknown_email_raises_and_writes_nothing(session, seed, make_job, assign):
    job = make_job()
    current = assign(job, seed.anna)

    with pytest.raises(NotFound):
        _tracker(session).detect(current, translator_email="nobody@example.com")

    assert current.cancel_at is None
    assert len(_tracker(session).history(job.id)) == 1


def test_unknown_id_raises(session, seed, make_job):
    make_job()
    with pytest.raises(NotFound):
        _tracker(session).detect(None, translator_id=9999)
