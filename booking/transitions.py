"""
Status transition engine: decides whether an admin may move a booking from
its current status to a requested one.

The engine is a pure decision function:

    engine.apply(job, request, context) → TransitionResult

It looks up the (current status, target status) edge in a transition table,
runs that edge's handler to check preconditions, and on success mutates the
job's own fields (status, admin_comments, session_time, ...). It never opens
a session, never sends anything and never raises for a rejected request:
side effects come back as a list of Effect values that BookingWorkflow hands
to BookingNotifier after (or, for BEFORE_PERSIST effects, just before) the
commit.

Legal edges:

    timedout          → pending, assigned
    completed         → withdrawbefore24, withdrawafter24, timedout
    started           → withdrawbefore24, withdrawafter24, timedout, completed
    pending           → withdrawbefore24, withdrawafter24, timedout, assigned
    withdrawafter24   → timedout
    assigned          → withdrawbefore24, withdrawafter24, timedout

Everything else, including every edge out of withdrawbefore24 and
not_carried_out_customer, is a no-op. A no-op leaves the job untouched.

To add an edge: write a handler with the signature below and add it to
_TRANSITIONS. Handlers raise _Rejected before touching the job if a
precondition fails.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from models.enums import JobStatus
from models.job import Job
from booking.base import (
    Effect,
    EffectKind,
    EffectPhase,
    StatusChangeRequest,
    TransitionResult,
)
from booking.timing import format_interval, parse_session_time

logger = logging.getLogger(__name__)


@dataclass
class TransitionContext:
    """Facts about the surrounding request the engine needs but must not look up itself."""
    now: datetime
    translator_changed: bool = False


class _Rejected(Exception):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


Handler = Callable[[Job, StatusChangeRequest, TransitionContext], list[Effect]]


def _require_comment(request: StatusChangeRequest) -> None:
    # Exact match on "": operators must leave an audit trail for manual status changes
    if request.comment == "":
        raise _Rejected("admin_comments must not be empty")


def _require_not_past_due(job: Job, context: TransitionContext) -> None:
    if job.due is None or context.now > job.due:
        raise _Rejected("booking due time has already passed")


# ── timedout ────────────────────────────────────────────────────

def _reopen_timed_out(job: Job, request: StatusChangeRequest, context: TransitionContext) -> list[Effect]:
    _require_not_past_due(job, context)

    job.created_at = context.now
    job.email_sent = False
    job.email_sent_to_virpal = False
    return [
        Effect(EffectKind.CUSTOMER_REOPENED),
        Effect(EffectKind.BROADCAST_TO_TRANSLATORS),
    ]


def _assign_timed_out(job: Job, request: StatusChangeRequest, context: TransitionContext) -> list[Effect]:
    _require_not_past_due(job, context)
    if not context.translator_changed:
        raise _Rejected("a timed out booking can only be assigned together with a new translator")
    return [Effect(EffectKind.CUSTOMER_ACCEPTED)]


# ── completed / withdrawafter24 ─────────────────────────────────

def _commented_only(job: Job, request: StatusChangeRequest, context: TransitionContext) -> list[Effect]:
    _require_comment(request)
    return []


# ── started ─────────────────────────────────────────────────────

def _complete_session(job: Job, request: StatusChangeRequest, context: TransitionContext) -> list[Effect]:
    _require_comment(request)
    elapsed = parse_session_time(request.session_time)
    if elapsed is None:
        raise _Rejected(f"session_time {request.session_time!r} is not H:M")

    job.session_time = format_interval(elapsed)
    job.end_at = context.now
    return [Effect(EffectKind.SESSION_ENDED)]


# ── pending ─────────────────────────────────────────────────────

def _assign_pending(job: Job, request: StatusChangeRequest, context: TransitionContext) -> list[Effect]:
    _require_comment(request)
    if context.translator_changed:
        return [
            Effect(EffectKind.CUSTOMER_ACCEPTED),
            Effect(EffectKind.TRANSLATOR_ASSIGNED),
            Effect(EffectKind.SESSION_START_REMINDERS),
        ]
    return [Effect(EffectKind.CUSTOMER_ADMIN_CANCELLED)]


def _cancel_pending(job: Job, request: StatusChangeRequest, context: TransitionContext) -> list[Effect]:
    _require_comment(request)
    return [Effect(EffectKind.CUSTOMER_ADMIN_CANCELLED)]


# ── assigned ────────────────────────────────────────────────────

def _withdraw_assigned(job: Job, request: StatusChangeRequest, context: TransitionContext) -> list[Effect]:
    # Withdrawals of assigned bookings go through even without a comment;
    # only the timedout edge below insists on one.
    return [Effect(EffectKind.CANCELLATION_NOTICES, EffectPhase.BEFORE_PERSIST)]


def _time_out_assigned(job: Job, request: StatusChangeRequest, context: TransitionContext) -> list[Effect]:
    _require_comment(request)
    return []


_TRANSITIONS: dict[JobStatus, dict[JobStatus, Handler]] = {
    JobStatus.TIMEDOUT: {
        JobStatus.PENDING: _reopen_timed_out,
        JobStatus.ASSIGNED: _assign_timed_out,
    },
    JobStatus.COMPLETED: {
        JobStatus.WITHDRAWBEFORE24: _commented_only,
        JobStatus.WITHDRAWAFTER24: _commented_only,
        JobStatus.TIMEDOUT: _commented_only,
    },
    JobStatus.STARTED: {
        JobStatus.WITHDRAWBEFORE24: _commented_only,
        JobStatus.WITHDRAWAFTER24: _commented_only,
        JobStatus.TIMEDOUT: _commented_only,
        JobStatus.COMPLETED: _complete_session,
    },
    JobStatus.PENDING: {
        JobStatus.WITHDRAWBEFORE24: _cancel_pending,
        JobStatus.WITHDRAWAFTER24: _cancel_pending,
        JobStatus.TIMEDOUT: _cancel_pending,
        JobStatus.ASSIGNED: _assign_pending,
    },
    JobStatus.WITHDRAWAFTER24: {
        JobStatus.TIMEDOUT: _commented_only,
    },
    JobStatus.ASSIGNED: {
        JobStatus.WITHDRAWBEFORE24: _withdraw_assigned,
        JobStatus.WITHDRAWAFTER24: _withdraw_assigned,
        JobStatus.TIMEDOUT: _time_out_assigned,
    },
}


class StatusTransitionEngine:
    """
    Applies the transition table to one job at a time.

    Stateless apart from the table itself, so a single instance can be shared
    by every request handler.
    """

    def __init__(self, transitions: Optional[dict[JobStatus, dict[JobStatus, Handler]]] = None):
        self._transitions = transitions if transitions is not None else _TRANSITIONS

    def allowed_targets(self, status: JobStatus) -> frozenset[JobStatus]:
        return frozenset(self._transitions.get(status, {}))

    def apply(
        self,
        job: Job,
        request: StatusChangeRequest,
        context: TransitionContext,
    ) -> TransitionResult:
        old_status = job.status
        target = request.status

        if target is None or target.value == old_status:
            return TransitionResult.rejected(old_status, "status unchanged")

        try:
            current = JobStatus(old_status)
        except ValueError:
            return TransitionResult.rejected(old_status, f"unknown status {old_status!r}")

        handler = self._transitions.get(current, {}).get(target)
        if handler is None:
            return TransitionResult.rejected(
                old_status, f"{old_status} → {target.value} is not a legal transition"
            )

        if current == JobStatus.PENDING and job.due is None:
            return TransitionResult.rejected(old_status, "booking has no due time")

        try:
            effects = handler(job, request, context)
        except _Rejected as e:
            logger.info(f"Booking #{job.id}: {old_status} → {target.value} rejected: {e.reason}")
            return TransitionResult.rejected(old_status, e.reason)

        job.status = target.value
        if request.admin_comments is not None:
            job.admin_comments = request.admin_comments

        logger.info(f"Booking #{job.id}: {old_status} → {target.value}")
        return TransitionResult(
            status_changed=True,
            old_status=old_status,
            new_status=target.value,
            effects=effects,
        )
