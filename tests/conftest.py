"""
Shared test fixtures.

These replace real infrastructure with lightweight in-memory alternatives:
- PostgreSQL → SQLite in memory (one shared connection via StaticPool)
- Redis → fakeredis (pure Python Redis mock)
- HTTP server → httpx.AsyncClient with ASGI transport (no network)

Time is frozen: every flow under test gets the `clock` below, so due
times in the tests are written relative to NOW.
"""

import json
from datetime import datetime, timedelta
from types import SimpleNamespace

import fakeredis
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from models.base import Base
from models.enums import JobStatus, TranslatorLevel, TranslatorType, UserRole
from models.job import Job
from models.language import Language
from models.translator import TranslatorAssignment
from models.user import User, UserLanguage
from notifications.gateway import RedisNotificationGateway
from api.main import create_app
from api.dependencies import get_db, get_gateway, get_redis

TEST_DB_URL = "sqlite://"

# A Tuesday, 13:00 in Stockholm: outside the night window
NOW = datetime(2026, 3, 10, 12, 0, 0)


def clock() -> datetime:
    return NOW


@pytest.fixture
def db_engine():
    """Create a fresh in-memory database for each test."""
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(db_engine, expire_on_commit=False)


@pytest.fixture
def session(session_factory):
    with session_factory() as s:
        yield s


@pytest.fixture
def fake_redis():
    """Create a fake Redis instance (in-memory, no real Redis needed)."""
    r = fakeredis.FakeRedis()
    r.flushall()
    yield r
    r.flushall()


@pytest.fixture
def gateway(fake_redis):
    return RedisNotificationGateway(fake_redis, clock=clock)


@pytest.fixture
def outbox(fake_redis, gateway):
    """outbox("email") → list of queued email envelopes, oldest first."""
    def read(channel: str) -> list[dict]:
        return [json.loads(raw) for raw in fake_redis.lrange(gateway.outbox_key(channel), 0, -1)]
    return read


def _translator(name: str, email: str, phone: str, **overrides) -> User:
    fields = dict(
        name=name,
        email=email,
        phone=phone,
        role=UserRole.TRANSLATOR.value,
        translator_type=TranslatorType.PROFESSIONAL.value,
        translator_level=TranslatorLevel.CERTIFIED.value,
    )
    fields.update(overrides)
    return User(**fields)


@pytest.fixture
def seed(session):
    """Two languages, one admin, one customer and two Arabic-speaking translators."""
    arabic = Language(name="Arabiska")
    somali = Language(name="Somaliska")
    admin = User(name="Admin", email="admin@example.com", role=UserRole.ADMIN.value)
    customer = User(
        name="Region Norr", email="customer@example.com",
        role=UserRole.CUSTOMER.value, city="Umeå", customer_type="paid",
    )
    anna = _translator("Anna", "anna@example.com", "+46700000001", gender="female")
    bashir = _translator("Bashir", "bashir@example.com", "+46700000002", gender="male")
    session.add_all([arabic, somali, admin, customer, anna, bashir])
    session.flush()
    session.add_all([
        UserLanguage(user_id=anna.id, language_id=arabic.id),
        UserLanguage(user_id=bashir.id, language_id=arabic.id),
    ])
    session.commit()
    return SimpleNamespace(
        arabic=arabic, somali=somali, admin=admin, customer=customer,
        anna=anna, bashir=bashir,
    )


@pytest.fixture
def make_job(session, seed):
    """Insert a booking for the seeded customer. Due defaults to 30 hours from NOW."""
    def make(status: JobStatus = JobStatus.PENDING, due: datetime | None = None, **fields) -> Job:
        job = Job(
            user_id=seed.customer.id,
            status=status.value,
            due=due if due is not None else NOW + timedelta(hours=30),
            from_language_id=seed.arabic.id,
            duration=60,
            created_at=NOW - timedelta(days=1),
            **fields,
        )
        session.add(job)
        session.commit()
        return job
    return make


@pytest.fixture
def assign(session):
    """Give a booking an active assignment for a translator."""
    def make(job: Job, translator: User) -> TranslatorAssignment:
        assignment = TranslatorAssignment(
            user_id=translator.id, job_id=job.id, created_at=NOW - timedelta(hours=1)
        )
        session.add(assignment)
        session.commit()
        return assignment
    return make


@pytest_asyncio.fixture
async def client(session_factory, fake_redis, gateway):
    """
    Create a test HTTP client that talks directly to the FastAPI app.

    dependency_overrides swaps the real database session, Redis and gateway
    for the in-memory test versions. ASGITransport means requests go
    directly to the app in-process, no HTTP server or network involved.
    """
    app = create_app()

    def override_get_db():
        with session_factory() as s:
            yield s

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = lambda: fake_redis
    app.dependency_overrides[get_gateway] = lambda: gateway

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
