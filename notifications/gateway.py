"""
Notification gateway: hands outbound email, SMS and push messages over to
the delivery side.

The booking code only knows NotificationGateway (the interface). The
production implementation, RedisNotificationGateway, does not talk to SMTP,
an SMS provider or a push service itself. It serializes each message into a
JSON envelope and RPUSHes it onto a Redis list; a separate delivery service
BLPOPs from those lists and owns the actual transports:

    bookings:outbox:email
    bookings:outbox:sms
    bookings:outbox:push

Failures to hand a message over raise NotificationDeliveryFailed. Callers
(BookingNotifier) catch it: a lost notification must never undo a booking
change that has already been committed.

Push policy hooks:
- needs_push(user): False if the user muted push notifications
- needs_delayed_push(user): True if the user muted night-time pushes and it
  is currently night in LOCAL_TIMEZONE; the envelope then carries a
  send_after timestamp for the next morning
"""

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, Optional
from zoneinfo import ZoneInfo

from redis import Redis
from redis.exceptions import RedisError

from config.settings import settings
from models.user import User
from booking.errors import NotificationDeliveryFailed
from booking.timing import utcnow

logger = logging.getLogger(__name__)


class NotificationGateway(ABC):

    @abstractmethod
    def send_email(self, to: str, name: str, subject: str, template: str, context: dict) -> None:
        ...

    @abstractmethod
    def send_sms(self, to: str, message: str) -> None:
        ...

    @abstractmethod
    def send_push(
        self,
        users: Iterable[User],
        job_id: int,
        metadata: dict,
        text: dict[str, str],
        delayed: bool = False,
    ) -> None:
        """
        Args:
            users: recipients
            job_id: booking the push is about (deep link in the apps)
            metadata: extra payload, always includes notification_type
            text: localized message bodies keyed by language code
            delayed: hold the push until the night window ends
        """
        ...

    @abstractmethod
    def needs_push(self, user: User) -> bool:
        ...

    @abstractmethod
    def needs_delayed_push(self, user: User) -> bool:
        ...


class RedisNotificationGateway(NotificationGateway):

    def __init__(
        self,
        redis_client: Redis,
        key_prefix: str = settings.OUTBOX_KEY_PREFIX,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._redis = redis_client
        self._prefix = key_prefix
        self._clock = clock
        self._tz = ZoneInfo(settings.LOCAL_TIMEZONE)

    def outbox_key(self, channel: str) -> str:
        return f"{self._prefix}:{channel}"

    # ── Channels ────────────────────────────────────────────────

    def send_email(self, to: str, name: str, subject: str, template: str, context: dict) -> None:
        self._enqueue("email", {
            "to": to,
            "name": name,
            "subject": subject,
            "template": template,
            "context": context,
        })
        logger.info(f"Queued email '{template}' to {to}")

    def send_sms(self, to: str, message: str) -> None:
        self._enqueue("sms", {"to": to, "message": message})
        logger.info(f"Queued SMS to {to}")

    def send_push(
        self,
        users: Iterable[User],
        job_id: int,
        metadata: dict,
        text: dict[str, str],
        delayed: bool = False,
    ) -> None:
        recipients = [{"id": u.id, "email": u.email.lower()} for u in users]
        if not recipients:
            return
        self._enqueue("push", {
            "recipients": recipients,
            "job_id": job_id,
            "data": metadata,
            "contents": text,
            "send_after": self._next_morning().isoformat() if delayed else None,
        })
        logger.info(
            f"Queued push '{metadata.get('notification_type')}' for booking #{job_id} "
            f"to {len(recipients)} user(s){' (delayed)' if delayed else ''}"
        )

    # ── Policy hooks ────────────────────────────────────────────

    def needs_push(self, user: User) -> bool:
        return not user.push_muted

    def needs_delayed_push(self, user: User) -> bool:
        return bool(user.night_push_muted) and self.is_night_time()

    def is_night_time(self, now: Optional[datetime] = None) -> bool:
        hour = self._local(now or self._clock()).hour
        if settings.NIGHT_START_HOUR > settings.NIGHT_END_HOUR:
            return hour >= settings.NIGHT_START_HOUR or hour < settings.NIGHT_END_HOUR
        return settings.NIGHT_START_HOUR <= hour < settings.NIGHT_END_HOUR

    # ── Internals ───────────────────────────────────────────────

    def _local(self, naive_utc: datetime) -> datetime:
        return naive_utc.replace(tzinfo=timezone.utc).astimezone(self._tz)

    def _next_morning(self) -> datetime:
        """UTC time at which a delayed push may go out (NIGHT_END_HOUR local time)."""
        local = self._local(self._clock())
        release = local.replace(hour=settings.NIGHT_END_HOUR, minute=0, second=0, microsecond=0)
        if release <= local:
            release += timedelta(days=1)
        return release.astimezone(timezone.utc).replace(tzinfo=None)

    def _enqueue(self, channel: str, message: dict) -> None:
        envelope = json.dumps(
            {**message, "channel": channel, "queued_at": self._clock().isoformat()},
            default=str,
        )
        try:
            self._redis.rpush(self.outbox_key(channel), envelope)
        except RedisError as e:
            raise NotificationDeliveryFailed(channel, str(e)) from e
