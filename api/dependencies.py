"""
FastAPI dependency injection.

How this works:
- An endpoint declares `db: Session = Depends(get_db)`
- FastAPI calls get_db() before your endpoint runs, creating a DB session
- Your endpoint receives the session and uses it
- After the endpoint returns (or raises), the session is automatically closed

The booking endpoints are plain `def` functions, so FastAPI runs them in its
threadpool and a regular (sync) session is the right tool.

Caller identity comes from the X-User-Id header. Verifying that header is
the job of the gateway in front of this service; here it is only used to
load the User and check its role.
"""

from typing import Generator, Optional

from fastapi import Depends, Header, HTTPException, Request
from redis import Redis
from sqlalchemy.orm import Session

from models.base import SessionLocal
from models.enums import ADMIN_ROLES, UserRole
from models.user import User
from notifications.gateway import NotificationGateway, RedisNotificationGateway


def get_db() -> Generator[Session, None, None]:
    """Yields a database session, auto-closes when the request ends."""
    with SessionLocal() as session:
        yield session


def get_redis(request: Request) -> Redis:
    """Returns the Redis client stored on the app during startup."""
    return request.app.state.redis


def get_gateway(redis: Redis = Depends(get_redis)) -> NotificationGateway:
    return RedisNotificationGateway(redis)


def get_current_user(
    x_user_id: Optional[int] = Header(None),
    db: Session = Depends(get_db),
) -> User:
    if x_user_id is None:
        raise HTTPException(status_code=401, detail="X-User-Id header missing")
    user = db.get(User, x_user_id)
    if user is None:
        raise HTTPException(status_code=401, detail=f"Unknown user {x_user_id}")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if UserRole(user.role) not in ADMIN_ROLES:
        raise HTTPException(status_code=403, detail="Admin role required")
    return user


def require_customer(user: User = Depends(get_current_user)) -> User:
    if not user.is_role(UserRole.CUSTOMER):
        raise HTTPException(status_code=403, detail="Customer role required")
    return user


def require_translator(user: User = Depends(get_current_user)) -> User:
    if not user.is_role(UserRole.TRANSLATOR):
        raise HTTPException(status_code=403, detail="Translator role required")
    return user
