"""
User ORM models: customers, translators and admins share the "users" table.

Only the attributes the booking flows read are modelled here:
- role replaces the old numeric role ids that were looked up from env vars
- translator_type / translator_level / gender / languages drive matching
  (booking/matching.py)
- push_muted / night_push_muted drive the push policy hooks of the
  notification gateway
"""

from sqlalchemy import String, Integer, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base
from models.enums import UserRole


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    role: Mapped[str] = mapped_column(
        String(20), default=UserRole.CUSTOMER.value, nullable=False, index=True
    )

    # ── Translator profile ──────────────────────────────────────
    gender: Mapped[str | None] = mapped_column(String(10), nullable=True)
    translator_type: Mapped[str | None] = mapped_column(String(30), nullable=True)
    translator_level: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # ── Customer profile ────────────────────────────────────────
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    customer_type: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # ── Notification preferences ────────────────────────────────
    push_muted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    night_push_muted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def is_role(self, role: UserRole) -> bool:
        return self.role == role.value

    def __repr__(self) -> str:
        return f"<User {self.id} {self.email} [{self.role}]>"


class UserLanguage(Base):
    """Languages a translator works with."""

    __tablename__ = "user_languages"
    __table_args__ = (UniqueConstraint("user_id", "language_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    language_id: Mapped[int] = mapped_column(ForeignKey("languages.id"), nullable=False)


class TranslatorBlacklist(Base):
    """A customer's list of translators who must never be offered their bookings."""

    __tablename__ = "users_blacklist"
    __table_args__ = (UniqueConstraint("user_id", "translator_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    translator_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
