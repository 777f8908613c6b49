"""
Exceptions raised by the booking layer.

Only two situations are exceptional:
- NotFound: a required identifier (job, translator email, language) does not
  resolve. The whole request aborts and the session rolls back.
- NotificationDeliveryFailed: the gateway could not hand a message over.
  BookingNotifier catches it and logs; it never reaches the caller.

Rejected transitions and lost accept races are normal outcomes and are
reported through return values (TransitionResult, FlowResult), not raised.
"""


class BookingError(Exception):
    """Base class for booking-layer errors."""


class NotFound(BookingError):
    def __init__(self, entity: str, key):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} {key} not found")


class NotificationDeliveryFailed(BookingError):
    def __init__(self, channel: str, reason: str):
        self.channel = channel
        self.reason = reason
        super().__init__(f"{channel} delivery failed: {reason}")
