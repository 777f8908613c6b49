"""
API integration tests for /bookings endpoints.

These use the test HTTP client from conftest.py, which talks to the FastAPI
app with an in-memory SQLite DB and fake Redis. The routes run on the real
clock, so due times here are relative to utcnow().
"""

from datetime import timedelta

import pytest

from models.enums import JobStatus
from booking.timing import utcnow


def _as(user) -> dict:
    return {"X-User-Id": str(user.id)}


def _future(hours: float) -> str:
    return (utcnow() + timedelta(hours=hours)).isoformat()


@pytest.mark.asyncio
async def test_create_booking(client, seed):
    """POST /bookings/ stores a pending booking with an expiry time."""
    response = await client.post("/bookings/", headers=_as(seed.customer), json={
        "due": _future(30),
        "from_language_id": seed.arabic.id,
        "duration": 45,
        "gender": "female",
    })

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == JobStatus.PENDING.value
    assert data["user_id"] == seed.customer.id
    assert data["duration"] == 45
    assert data["gender"] == "female"
    assert data["job_type"] == "paid"
    assert data["will_expire_at"] is not None


@pytest.mark.asyncio
async def test_create_booking_requires_customer(client, seed):
    response = await client.post("/bookings/", headers=_as(seed.anna), json={
        "due": _future(30), "from_language_id": seed.arabic.id,
    })
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_missing_user_header(client, seed):
    response = await client.get("/bookings/")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_unknown_user(client, seed):
    response = await client.get("/bookings/", headers={"X-User-Id": "9999"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_booking_invalid_certification(client, seed):
    response = await client.post("/bookings/", headers=_as(seed.customer), json={
        "due": _future(30), "from_language_id": seed.arabic.id, "certified": "sometimes",
    })
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_get_unknown_booking(client, seed):
    response = await client.get("/bookings/9999", headers=_as(seed.admin))
    assert response.status_code == 404
    assert response.json()["detail"] == "Job 9999 not found"


@pytest.mark.asyncio
async def test_list_bookings_scoped_to_caller(client, seed, make_job):
    make_job(JobStatus.PENDING)
    make_job(JobStatus.TIMEDOUT)

    as_admin = (await client.get("/bookings/", headers=_as(seed.admin))).json()
    as_translator = (await client.get("/bookings/", headers=_as(seed.anna))).json()
    filtered = (await client.get(
        "/bookings/", headers=_as(seed.admin), params={"status": "timedout"}
    )).json()

    assert as_admin["total"] == 2
    assert as_translator["total"] == 0
    assert [b["status"] for b in filtered["bookings"]] == ["timedout"]


@pytest.mark.asyncio
async def test_admin_update_changes_status(client, seed, make_job):
    job = make_job(JobStatus.PENDING, due=utcnow() + timedelta(hours=30))

    response = await client.put(f"/bookings/{job.id}", headers=_as(seed.admin), json={
        "status": "assigned",
        "admin_comments": "booked by phone",
        "translator_email": "anna@example.com",
    })

    assert response.status_code == 200
    body = response.json()
    assert body["updated"] is True
    assert {"old_status": "pending", "new_status": "assigned"} in body["changes"]

    history = (await client.get(f"/bookings/{job.id}/assignments", headers=_as(seed.admin))).json()
    assert [a["user_id"] for a in history] == [seed.anna.id]


@pytest.mark.asyncio
async def test_update_requires_admin(client, seed, make_job):
    job = make_job(JobStatus.PENDING)
    response = await client.put(f"/bookings/{job.id}", headers=_as(seed.customer), json={
        "status": "timedout", "admin_comments": "x",
    })
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_update_with_unknown_translator_is_404(client, seed, make_job):
    job = make_job(JobStatus.PENDING)
    response = await client.put(f"/bookings/{job.id}", headers=_as(seed.admin), json={
        "translator_email": "ghost@example.com",
    })
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_translator_accepts_booking(client, seed, make_job):
    job = make_job(JobStatus.PENDING, due=utcnow() + timedelta(hours=30))

    first = await client.post(f"/bookings/{job.id}/accept", headers=_as(seed.anna))
    second = await client.post(f"/bookings/{job.id}/accept", headers=_as(seed.bashir))

    assert first.json()["status"] == "success"
    assert first.json()["job"]["status"] == JobStatus.ASSIGNED.value
    assert second.json()["status"] == "fail"


@pytest.mark.asyncio
async def test_web_accept_returns_potential_jobs(client, seed, make_job):
    job = make_job(JobStatus.PENDING, due=utcnow() + timedelta(hours=30))
    other = make_job(JobStatus.PENDING, due=utcnow() + timedelta(hours=50))

    response = await client.post("/bookings/accept", headers=_as(seed.anna), json={"job_id": job.id})

    body = response.json()
    assert body["status"] == "success"
    assert [j["id"] for j in body["jobs"]] == [other.id]


@pytest.mark.asyncio
async def test_customer_cancels_booking(client, seed, make_job):
    job = make_job(JobStatus.PENDING, due=utcnow() + timedelta(hours=30))

    response = await client.post(f"/bookings/{job.id}/cancel", headers=_as(seed.customer))

    assert response.json()["jobstatus"] == "success"
    booking = (await client.get(f"/bookings/{job.id}", headers=_as(seed.customer))).json()
    assert booking["status"] == JobStatus.WITHDRAWBEFORE24.value


@pytest.mark.asyncio
async def test_end_started_booking(client, seed, make_job, assign):
    job = make_job(JobStatus.STARTED, due=utcnow() - timedelta(hours=1))
    assign(job, seed.anna)

    response = await client.post(f"/bookings/{job.id}/end", headers=_as(seed.anna))

    assert response.json()["status"] == "success"
    booking = (await client.get(f"/bookings/{job.id}", headers=_as(seed.admin))).json()
    assert booking["status"] == JobStatus.COMPLETED.value
    assert booking["session_time"].startswith("1:00:")


@pytest.mark.asyncio
async def test_reopen_booking(client, seed, make_job, assign):
    job = make_job(JobStatus.ASSIGNED, due=utcnow() + timedelta(hours=30))
    assign(job, seed.anna)

    response = await client.post(
        f"/bookings/{job.id}/reopen", headers=_as(seed.admin), params={"user_id": seed.anna.id}
    )

    assert response.json() == {
        "status": "success",
        "message": "Tolk cancelled!",
        "job": None,
        "jobs": None,
        "jobstatus": None,
        "job_id": job.id,
    }


@pytest.mark.asyncio
async def test_resend_notifications_and_sms(client, seed, make_job):
    job = make_job(JobStatus.PENDING, due=utcnow() + timedelta(hours=30))

    push = await client.post(f"/bookings/{job.id}/resend-notifications", headers=_as(seed.admin))
    sms = await client.post(f"/bookings/{job.id}/resend-sms", headers=_as(seed.admin))

    assert push.json() == {"success": "Push sent", "recipients": 2}
    assert sms.json() == {"success": "SMS sent", "recipients": 2}


@pytest.mark.asyncio
async def test_translator_lists_potential_bookings(client, seed, make_job):
    soon = make_job(JobStatus.PENDING, due=utcnow() + timedelta(hours=5))
    later = make_job(JobStatus.PENDING, due=utcnow() + timedelta(hours=50))
    make_job(JobStatus.PENDING, due=utcnow() + timedelta(hours=20), gender="male")
    make_job(JobStatus.PENDING, due=utcnow() - timedelta(hours=1))
    make_job(JobStatus.ASSIGNED, due=utcnow() + timedelta(hours=30))

    response = await client.get("/bookings/potential", headers=_as(seed.anna))

    assert response.status_code == 200
    assert [b["id"] for b in response.json()] == [soon.id, later.id]


@pytest.mark.asyncio
async def test_potential_bookings_require_translator(client, seed):
    response = await client.get("/bookings/potential", headers=_as(seed.customer))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_customer_booking_history(client, seed, make_job):
    upcoming = make_job(JobStatus.ASSIGNED, due=utcnow() + timedelta(hours=30))
    waiting = make_job(JobStatus.PENDING, due=utcnow() + timedelta(hours=10))
    older = make_job(JobStatus.COMPLETED, due=utcnow() - timedelta(days=3))
    newer = make_job(JobStatus.WITHDRAWAFTER24, due=utcnow() - timedelta(days=1))

    response = await client.get("/bookings/history", headers=_as(seed.customer))

    assert response.status_code == 200
    body = response.json()
    assert [b["id"] for b in body["current"]] == [waiting.id, upcoming.id]
    assert [b["id"] for b in body["past"]] == [newer.id, older.id]
    assert body["total_past"] == 2


@pytest.mark.asyncio
async def test_translator_booking_history_follows_assignments(client, seed, make_job, assign):
    held = make_job(JobStatus.ASSIGNED, due=utcnow() + timedelta(hours=30))
    assign(held, seed.anna)
    done = make_job(JobStatus.COMPLETED, due=utcnow() - timedelta(days=2))
    assign(done, seed.anna)
    someone_elses = make_job(JobStatus.ASSIGNED, due=utcnow() + timedelta(hours=40))
    assign(someone_elses, seed.bashir)
    make_job(JobStatus.PENDING, due=utcnow() + timedelta(hours=20))

    body = (await client.get("/bookings/history", headers=_as(seed.anna))).json()

    assert [b["id"] for b in body["current"]] == [held.id]
    assert [b["id"] for b in body["past"]] == [done.id]


@pytest.mark.asyncio
async def test_booking_history_pages_past_bookings(client, seed, make_job):
    for days in (1, 2, 3):
        make_job(JobStatus.TIMEDOUT, due=utcnow() - timedelta(days=days))

    body = (await client.get(
        "/bookings/history", headers=_as(seed.customer), params={"page": 2, "page_size": 2}
    )).json()

    assert body["total_past"] == 3
    assert len(body["past"]) == 1
    assert body["page"] == 2
