"""
SQLAlchemy engine and session factory.

Booking updates are synchronous request/response work: every flow loads a
job, decides, writes, commits and only then notifies. FastAPI runs the plain
`def` booking endpoints in its threadpool, so one sync engine with a
sessionmaker covers both the API and the seed/maintenance scripts.

Each request gets its own session (see api/dependencies.py). Sessions are
never shared between threads.
"""

from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy import create_engine

from config.settings import settings


class Base(DeclarativeBase):
    """Base class for all ORM models. SQLAlchemy uses this to track table metadata."""
    pass


engine = create_engine(settings.database_url, echo=False, pool_pre_ping=True)
SessionLocal = sessionmaker(engine, expire_on_commit=False)
