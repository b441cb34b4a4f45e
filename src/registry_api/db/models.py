from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    String,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from registry_api.db.base import Base


def _new_id() -> str:
    return str(uuid4())


def _utcnow() -> datetime:
    return datetime.now(UTC)


class InstitutionStatus(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"


class ReviewDecision(StrEnum):
    APPROVED = "approved"
    DENIED = "denied"


class Role(StrEnum):
    STUDENT = "student"
    INSTITUTION = "institution"
    ADMIN = "admin"


class Institution(Base):
    __tablename__ = "institution"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(80), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    account_number: Mapped[str] = mapped_column(String(80), nullable=False)
    address: Mapped[str] = mapped_column(String(80), nullable=False)
    phone: Mapped[str] = mapped_column(String(15), nullable=False)
    logo: Mapped[str | None] = mapped_column(String(255), nullable=True)
    banner: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(String(32), nullable=False, default=Role.INSTITUTION.value)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=InstitutionStatus.PENDING.value
    )
    # Owning user account; kept as a plain id to avoid a users <-> institution FK cycle.
    owner_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
        onupdate=_utcnow,
    )

    members: Mapped[list[UserAccount]] = relationship(
        "UserAccount", back_populates="institution"
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'denied')", name="status_check"
        ),
    )


class UserAccount(Base):
    __tablename__ = "user_account"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    lastname: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    dni: Mapped[str | None] = mapped_column(String(8), nullable=True)
    address: Mapped[str | None] = mapped_column(String(80), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(15), nullable=True)
    img_profile: Mapped[str | None] = mapped_column(String(130), nullable=True)
    role: Mapped[str] = mapped_column(String(32), nullable=False, default=Role.STUDENT.value)
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    institution_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("institution.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now()
    )

    institution: Mapped[Institution | None] = relationship(
        "Institution", back_populates="members"
    )
    payments: Mapped[list[Payment]] = relationship(
        "Payment", back_populates="user", cascade="all, delete-orphan"
    )


class Payment(Base):
    __tablename__ = "payment"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    receipt_url: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now()
    )

    user: Mapped[UserAccount] = relationship("UserAccount", back_populates="payments")


__all__ = [
    "Institution",
    "InstitutionStatus",
    "Payment",
    "ReviewDecision",
    "Role",
    "UserAccount",
]
