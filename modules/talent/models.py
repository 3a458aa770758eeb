"""SQLAlchemy 2.0 models for the talent back-office.

Six tables:
- emerge_submissions:   Raw public-form talent submissions (intake)
- talent_applications:  Curated, staff-reviewed talent directory
- talent:               Roster of approved talent (migration target)
- talent_sync_status:   Audit trail, one row per reconciled submission
- user_roles:           Role assignment per principal (JWT subject)
- automation_logs:      One row per sync run, with result counts
"""
import enum
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Integer,
    JSON,
    String,
    Text,
    Index,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
)


class Base(DeclarativeBase):
    """Shared declarative base for all talent models."""
    pass


def _uuid() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# --- Enums ---


class SyncStatus(str, enum.Enum):
    """Persisted reconciliation state of a submission."""
    PENDING = "pending"
    SYNCED = "synced"
    ALREADY_EXISTS = "already_exists"


class TalentStatus(str, enum.Enum):
    """Staff review state of a talent application."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    ON_HOLD = "on_hold"


class TalentCategory(str, enum.Enum):
    """Roster category."""
    MODEL = "model"
    DESIGNER = "designer"
    PHOTOGRAPHER = "photographer"
    ACTOR = "actor"
    MUSICAL_ARTIST = "musical_artist"
    FINE_ARTIST = "fine_artist"
    EVENT_PLANNER = "event_planner"


class TalentLevel(str, enum.Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    EXPERT = "expert"


class UserRoleType(str, enum.Enum):
    ADMIN = "admin"
    EDITOR = "editor"
    VIEWER = "viewer"
    USER = "user"


# --- Models ---


class Submission(Base):
    """A public-form talent application before vetting.

    Email is not unique here: the same person may submit twice.
    """
    __tablename__ = "emerge_submissions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    full_name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    phone_number: Mapped[Optional[str]] = mapped_column(String(50))
    age: Mapped[Optional[int]] = mapped_column(Integer)
    country: Mapped[Optional[str]] = mapped_column(String(100))
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    gender: Mapped[str] = mapped_column(String(50), nullable=False)
    instagram: Mapped[Optional[str]] = mapped_column(String(200))
    tiktok: Mapped[Optional[str]] = mapped_column(String(200))
    telegram: Mapped[Optional[str]] = mapped_column(String(200))
    portfolio_url: Mapped[Optional[str]] = mapped_column(Text)
    measurements: Mapped[Optional[dict]] = mapped_column(JSON)
    talent_description: Mapped[Optional[str]] = mapped_column(Text)
    sync_status: Mapped[str] = mapped_column(
        String(20), default=SyncStatus.PENDING.value, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    __table_args__ = (
        Index("ix_emerge_submissions_sync_status", "sync_status"),
        Index("ix_emerge_submissions_email", "email"),
    )

    def __repr__(self) -> str:
        return (
            f"<Submission(id={self.id}, email='{self.email}', "
            f"sync_status='{self.sync_status}')>"
        )


class TalentApplication(Base):
    """A curated talent record, visible to staff.

    The unique email constraint turns a lost check-then-insert race into an
    IntegrityError instead of a duplicate row.
    """
    __tablename__ = "talent_applications"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    full_name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    age: Mapped[Optional[int]] = mapped_column(Integer)
    country: Mapped[Optional[str]] = mapped_column(String(100))
    category_type: Mapped[Optional[str]] = mapped_column(String(100))
    gender: Mapped[Optional[str]] = mapped_column(String(50))
    social_media: Mapped[Optional[dict]] = mapped_column(JSON)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    portfolio_url: Mapped[Optional[str]] = mapped_column(Text)
    photo_url: Mapped[Optional[str]] = mapped_column(Text)
    measurements: Mapped[Optional[dict]] = mapped_column(JSON)
    status: Mapped[str] = mapped_column(
        String(20), default=TalentStatus.PENDING.value, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    __table_args__ = (
        Index("ix_talent_applications_status", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<TalentApplication(id={self.id}, email='{self.email}', "
            f"status='{self.status}')>"
        )


class Talent(Base):
    """A roster entry, migrated from an approved talent application.

    Emails are matched case-insensitively when migrating.
    """
    __tablename__ = "talent"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    full_name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    category: Mapped[str] = mapped_column(
        String(30), default=TalentCategory.MODEL.value, nullable=False
    )
    level: Mapped[str] = mapped_column(
        String(20), default=TalentLevel.BEGINNER.value, nullable=False
    )
    portfolio_url: Mapped[Optional[str]] = mapped_column(Text)
    social_media_links: Mapped[Optional[dict]] = mapped_column(JSON)
    profile_image_url: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    __table_args__ = (
        Index("ix_talent_category", "category"),
    )

    def __repr__(self) -> str:
        return f"<Talent(id={self.id}, email='{self.email}', category='{self.category}')>"


class SyncAuditEntry(Base):
    """Audit trail: one row per Submission → TalentApplication creation."""
    __tablename__ = "talent_sync_status"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    emerge_submission_id: Mapped[str] = mapped_column(String(36), nullable=False)
    talent_application_id: Mapped[str] = mapped_column(String(36), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    submission_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    talent_sync_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )
    exists_in_talent_applications: Mapped[bool] = mapped_column(Boolean, default=True)

    def __repr__(self) -> str:
        return (
            f"<SyncAuditEntry({self.emerge_submission_id} → "
            f"{self.talent_application_id} at {self.talent_sync_date})>"
        )


class UserRole(Base):
    """Role held by a principal. user_id is the JWT subject."""
    __tablename__ = "user_roles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    role: Mapped[str] = mapped_column(
        String(20), default=UserRoleType.USER.value, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<UserRole(user_id='{self.user_id}', role='{self.role}')>"


class AutomationLog(Base):
    """Run log for automated jobs (talent-sync)."""
    __tablename__ = "automation_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    function_name: Mapped[str] = mapped_column(String(100), nullable=False)
    executed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )
    results: Mapped[Optional[dict]] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )

    __table_args__ = (
        Index("ix_automation_logs_function", "function_name", "executed_at"),
    )

    def __repr__(self) -> str:
        return f"<AutomationLog(function='{self.function_name}', at={self.executed_at})>"
