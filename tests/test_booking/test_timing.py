"""Tests for the booking time helpers."""

from datetime import datetime, timedelta, timezone

import pytest

from booking.timing import (
    as_naive_utc,
    format_interval,
    parse_session_time,
    session_time_text,
    will_expire_at,
)

CREATED = datetime(2026, 3, 10, 12, 0, 0)


def test_expires_at_due_when_due_within_90_minutes():
    due = CREATED + timedelta(minutes=90)
    assert will_expire_at(due, CREATED) == due


def test_expires_90_minutes_after_creation_within_a_day():
    due = CREATED + timedelta(hours=10)
    assert will_expire_at(due, CREATED) == CREATED + timedelta(minutes=90)


def test_expires_16_hours_after_creation_within_three_days():
    due = CREATED + timedelta(hours=30)
    assert will_expire_at(due, CREATED) == CREATED + timedelta(hours=16)


def test_expires_48_hours_before_due_further_away():
    due = CREATED + timedelta(days=5)
    assert will_expire_at(due, CREATED) == due - timedelta(hours=48)


def test_expiry_boundaries():
    assert will_expire_at(CREATED + timedelta(hours=24), CREATED) == CREATED + timedelta(minutes=90)
    assert will_expire_at(CREATED + timedelta(hours=72), CREATED) == CREATED + timedelta(hours=16)


@pytest.mark.parametrize("delta,expected", [
    (timedelta(hours=2), "2:00:00"),
    (timedelta(hours=1, minutes=5, seconds=9), "1:05:09"),
    (timedelta(seconds=0), "0:00:00"),
    (timedelta(hours=-1, minutes=-30), "1:30:00"),
    (timedelta(hours=26), "26:00:00"),
])
def test_format_interval(delta, expected):
    assert format_interval(delta) == expected


@pytest.mark.parametrize("raw,expected", [
    ("1:30", timedelta(hours=1, minutes=30)),
    ("0:45", timedelta(minutes=45)),
    ("2:05:30", timedelta(hours=2, minutes=5, seconds=30)),
    (" 1:00 ", timedelta(hours=1)),
])
def test_parse_session_time(raw, expected):
    assert parse_session_time(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "90", "1h30", "1:60", "1:30:60", "a:b"])
def test_parse_session_time_rejects_malformed(raw):
    assert parse_session_time(raw) is None


def test_session_time_text():
    assert session_time_text("1:05:00") == "1 tim 05 min"
    assert session_time_text("12:30:15") == "12 tim 30 min"


def test_as_naive_utc_converts_aware_datetimes():
    stockholm_noon = datetime(2026, 3, 10, 13, 0, tzinfo=timezone(timedelta(hours=1)))
    assert as_naive_utc(stockholm_noon) == datetime(2026, 3, 10, 12, 0)
    assert as_naive_utc(CREATED) is CREATED
