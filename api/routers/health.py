"""
Health check endpoint.

Checks the database and Redis, and reports how many notifications are
waiting in each outbox list. A growing outbox means the delivery service
has stopped draining it; bookings keep working, but nobody is told.
"""

from fastapi import APIRouter, Depends
from redis import Redis
from sqlalchemy import text
from sqlalchemy.orm import Session

from api.dependencies import get_db, get_redis
from config.settings import settings

router = APIRouter(tags=["health"])

OUTBOX_CHANNELS = ("email", "sms", "push")


@router.get("/health")
def health_check(
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis),
) -> dict:
    db.execute(text("SELECT 1"))
    redis.ping()
    outbox = {
        channel: redis.llen(f"{settings.OUTBOX_KEY_PREFIX}:{channel}")
        for channel in OUTBOX_CHANNELS
    }
    return {"status": "healthy", "database": "ok", "redis": "ok", "outbox": outbox}
