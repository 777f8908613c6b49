"""
Data transfer objects passed between the booking components.

None of these are ORM models. They describe a request coming in, a decision
made by the transition engine, or an outcome going back to the API:

- StatusChangeRequest: an admin update. Every field is optional; None means
  "not part of this request", "" means "explicitly empty".
- Effect: a side effect the engine wants, executed later by BookingNotifier.
- TransitionResult: what the engine decided for one status change request.
- AssignmentChange: what the assignment tracker plans/did for one request.
- UpdateOutcome / FlowResult: what the workflow and flows hand back.

Keeping the engine's output as plain data is what lets it be tested without
a database, a Redis instance or a mailer.
"""

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from models.enums import JobStatus
from models.translator import TranslatorAssignment
from models.user import User


@dataclass
class StatusChangeRequest:
    status: Optional[JobStatus] = None
    admin_comments: Optional[str] = None
    session_time: Optional[str] = None        # "H:M", only read for → completed
    translator_id: Optional[int] = None       # 0 means "no translator"
    translator_email: Optional[str] = None
    due: Optional[datetime] = None
    from_language_id: Optional[int] = None
    reference: Optional[str] = None

    @property
    def comment(self) -> str:
        return self.admin_comments if self.admin_comments is not None else ""


class EffectKind(str, enum.Enum):
    CUSTOMER_REOPENED = "customer_reopened"            # mail: booking reopened after timeout
    BROADCAST_TO_TRANSLATORS = "broadcast_to_translators"  # push: new booking available
    CUSTOMER_ACCEPTED = "customer_accepted"            # mail: a translator accepted
    TRANSLATOR_ASSIGNED = "translator_assigned"        # mail: you got this booking
    SESSION_START_REMINDERS = "session_start_reminders"  # push: customer + translator
    SESSION_ENDED = "session_ended"                    # mail: invoice / payroll info
    CUSTOMER_ADMIN_CANCELLED = "customer_admin_cancelled"  # mail: admin cancelled booking
    CANCELLATION_NOTICES = "cancellation_notices"      # mail: customer + translator


class EffectPhase(str, enum.Enum):
    BEFORE_PERSIST = "before_persist"
    AFTER_PERSIST = "after_persist"


@dataclass(frozen=True)
class Effect:
    kind: EffectKind
    phase: EffectPhase = EffectPhase.AFTER_PERSIST


@dataclass
class TransitionResult:
    status_changed: bool
    old_status: str
    new_status: str
    effects: list[Effect] = field(default_factory=list)
    rejection: Optional[str] = None

    @classmethod
    def rejected(cls, status: str, reason: str) -> "TransitionResult":
        return cls(status_changed=False, old_status=status, new_status=status, rejection=reason)

    @property
    def log_entry(self) -> dict:
        if not self.status_changed:
            return {}
        return {"old_status": self.old_status, "new_status": self.new_status}

    def effects_for(self, phase: EffectPhase) -> list[Effect]:
        return [effect for effect in self.effects if effect.phase == phase]


@dataclass
class AssignmentChange:
    changed: bool
    old: Optional[TranslatorAssignment] = None
    new_user: Optional[User] = None
    new: Optional[TranslatorAssignment] = None

    @property
    def log_entry(self) -> dict:
        if not self.changed:
            return {}
        return {
            "old_translator": self.old.user.email if self.old is not None else None,
            "new_translator": self.new_user.email if self.new_user is not None else None,
        }


@dataclass
class UpdateOutcome:
    updated: bool
    changes: list[dict] = field(default_factory=list)


@dataclass
class FlowResult:
    """Structured success/fail payload returned by the accept/cancel/end flows."""

    status: str
    message: Optional[str] = None
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, message: Optional[str] = None, **data) -> "FlowResult":
        return cls(status="success", message=message, data=data)

    @classmethod
    def fail(cls, message: str, **data) -> "FlowResult":
        return cls(status="fail", message=message, data=data)

    @property
    def ok(self) -> bool:
        return self.status == "success"
