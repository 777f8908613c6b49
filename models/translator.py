"""
TranslatorAssignment ORM model: maps to the "translator_job_rel" table.

One row per (job, translator) assignment. Rows are append-only:
- reassigning a booking stamps cancel_at on the old row and inserts a new one
- finishing a session stamps completed_at / completed_by

The "active" assignment of a job is the single row with neither timestamp set.
"""

from datetime import datetime

from sqlalchemy import Integer, DateTime, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base


class TranslatorAssignment(Base):
    __tablename__ = "translator_job_rel"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    job_id: Mapped[int] = mapped_column(ForeignKey("jobs.id"), nullable=False, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    cancel_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    completed_by: Mapped[int | None] = mapped_column(Integer, nullable=True)

    user = relationship("User", lazy="joined")
    job = relationship("Job", back_populates="assignments")

    @property
    def is_active(self) -> bool:
        return self.cancel_at is None and self.completed_at is None

    def __repr__(self) -> str:
        state = "active" if self.is_active else "closed"
        return f"<TranslatorAssignment job=#{self.job_id} user={self.user_id} {state}>"
