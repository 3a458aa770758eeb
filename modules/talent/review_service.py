"""Intake and staff review for talent records.

Status Flow (talent_applications.status):
    pending → approved
            → rejected
            → on_hold → approved / rejected / pending

Usage:
    from modules.talent.review_service import (
        create_submission,
        list_pending_submissions,
        list_applications,
        update_application_status,
        set_user_role,
    )
"""
import logging
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from common.config import ServiceConfig, get_config
from .authorization import ADMIN_ROLES, Principal, require_roles
from .models import (
    Submission,
    SyncStatus,
    TalentApplication,
    TalentStatus,
    UserRole,
    UserRoleType,
)
from .schemas import SubmissionCreate
from .store import StoreError, db_error_message

logger = logging.getLogger(__name__)

TALENT_STATUSES = {s.value for s in TalentStatus}
USER_ROLES = {r.value for r in UserRoleType}


class ReviewError(Exception):
    """Base class for review failures."""


class ApplicationNotFound(ReviewError):
    pass


class InvalidStatus(ReviewError):
    pass


class InvalidRole(ReviewError):
    pass


# ---------------------------------------------------------------------------
# 1) Public intake
# ---------------------------------------------------------------------------

def create_submission(session: Session, payload: SubmissionCreate) -> Submission:
    """Store a public-form submission as pending. No authorization needed."""
    submission = Submission(
        **payload.model_dump(),
        sync_status=SyncStatus.PENDING.value,
    )
    session.add(submission)
    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise StoreError(
            f"Failed to store submission for {payload.email}: {db_error_message(e)}"
        ) from e
    logger.info(f"New submission: {submission.email} ({submission.category})")
    return submission


def list_pending_submissions(session: Session) -> list[Submission]:
    """Submissions awaiting sync, newest first."""
    return list(
        session.scalars(
            select(Submission)
            .where(Submission.sync_status == SyncStatus.PENDING.value)
            .order_by(Submission.created_at.desc())
        )
    )


# ---------------------------------------------------------------------------
# 2) Talent directory
# ---------------------------------------------------------------------------

def list_applications(
    session: Session,
    status: Optional[str] = None,
    search: Optional[str] = None,
) -> list[TalentApplication]:
    """List directory entries, optionally filtered by status and name/email."""
    if status is not None and status not in TALENT_STATUSES:
        raise InvalidStatus(f"Unknown status '{status}'")

    query = select(TalentApplication)
    if status:
        query = query.where(TalentApplication.status == status)
    if search:
        pattern = f"%{search}%"
        query = query.where(
            or_(
                TalentApplication.full_name.ilike(pattern),
                TalentApplication.email.ilike(pattern),
            )
        )
    return list(session.scalars(query.order_by(TalentApplication.created_at.desc())))


def update_application_status(
    session: Session,
    principal: Optional[Principal],
    application_id: str,
    status: str,
    notes: Optional[str] = None,
    config: Optional[ServiceConfig] = None,
) -> TalentApplication:
    """Staff review action: set an application's status (auth.sync_roles).

    Raises:
        Unauthorized / PermissionDenied / PermissionCheckFailed
        InvalidStatus: status is not one of TALENT_STATUSES
        ApplicationNotFound
    """
    config = config or get_config()
    require_roles(session, principal, config.auth.sync_roles)

    if status not in TALENT_STATUSES:
        raise InvalidStatus(
            f"Unknown status '{status}' (expected one of {sorted(TALENT_STATUSES)})"
        )

    app = session.get(TalentApplication, application_id)
    if app is None:
        raise ApplicationNotFound(f"Talent application {application_id} not found")

    old_status = app.status
    app.status = status
    if notes is not None:
        app.notes = notes
    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise StoreError(db_error_message(e)) from e

    logger.info(
        f"Review: {app.email} {old_status} → {status} by {principal.user_id}"
    )
    return app


# ---------------------------------------------------------------------------
# 3) Roles
# ---------------------------------------------------------------------------

def get_user_roles(session: Session, user_id: str) -> list[str]:
    return sorted(
        session.scalars(select(UserRole.role).where(UserRole.user_id == user_id))
    )


def grant_role(session: Session, user_id: str, role: str) -> UserRole:
    """Assign a role without an authorization check (bootstrap / CLI)."""
    if role not in USER_ROLES:
        raise InvalidRole(f"Unknown role '{role}' (expected one of {sorted(USER_ROLES)})")

    row = session.scalars(select(UserRole).where(UserRole.user_id == user_id)).first()
    if row is None:
        row = UserRole(user_id=user_id, role=role)
        session.add(row)
    else:
        row.role = role
    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise StoreError(db_error_message(e)) from e
    logger.info(f"Role for {user_id} set to {role}")
    return row


def set_user_role(
    session: Session,
    principal: Optional[Principal],
    user_id: str,
    role: str,
) -> UserRole:
    """Assign a role to user_id. Only admins may do this."""
    require_roles(session, principal, ADMIN_ROLES)
    return grant_role(session, user_id, role)
