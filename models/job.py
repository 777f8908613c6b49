"""
Job ORM model: maps to the "jobs" table.

A job is one interpretation booking. Key design decisions:
- Integer primary key: customers and translators quote "booking #123" in
  mails and phone calls, so the id doubles as the booking number
- status is stored as the JobStatus string value and only ever changed by
  the transition engine (booking/transitions.py) or the accept/cancel/end
  flows in booking/
- due / created_at / will_expire_at are naive UTC timestamps; all
  comparisons go through booking.timing.utcnow()
- Nothing is ever deleted: terminal bookings are kept for history and billing
"""

from datetime import datetime

from sqlalchemy import String, Integer, Boolean, DateTime, Text, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base
from models.enums import JobStatus, JobType
from models.language import Language  # noqa: F401  registers the "languages" table
from models.translator import TranslatorAssignment
from models.user import User


class Job(Base):
    __tablename__ = "jobs"

    # ── Identity ────────────────────────────────────────────────
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)

    # ── Lifecycle ───────────────────────────────────────────────
    status: Mapped[str] = mapped_column(
        String(30), default=JobStatus.PENDING.value, nullable=False, index=True
    )
    due: Mapped[datetime | None] = mapped_column(DateTime, nullable=True, index=True)
    will_expire_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    end_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    withdraw_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    # "H:MM:SS", only written when the booking becomes completed
    session_time: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # ── What was booked ─────────────────────────────────────────
    job_type: Mapped[str] = mapped_column(
        String(20), default=JobType.PAID.value, nullable=False
    )
    from_language_id: Mapped[int] = mapped_column(ForeignKey("languages.id"), nullable=False)
    to_language_id: Mapped[int | None] = mapped_column(ForeignKey("languages.id"), nullable=True)
    duration: Mapped[int] = mapped_column(Integer, default=60, nullable=False)  # minutes
    immediate: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    certified: Mapped[str | None] = mapped_column(String(20), nullable=True)
    gender: Mapped[str | None] = mapped_column(String(10), nullable=True)
    customer_phone_type: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    customer_physical_type: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    town: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # ── Contact & admin notes ───────────────────────────────────
    user_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    admin_comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    reference: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # ── Reminder flags (reset when a booking is reopened) ───────
    email_sent: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    email_sent_to_virpal: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    customer = relationship(User, foreign_keys=[user_id], lazy="joined")
    assignments = relationship(
        TranslatorAssignment,
        back_populates="job",
        order_by=TranslatorAssignment.id,
    )

    def __repr__(self) -> str:
        return f"<Job #{self.id} [{self.job_type}] {self.status}>"
