"""Data access for the reconciliation and migration workflows.

Every write commits on its own: a failure halfway through a batch leaves
earlier submissions synced and later ones pending. SQLAlchemy errors are
rolled back and re-raised as StoreError so callers only deal with one
exception family. StoreError messages carry the driver message only, never
the SQL statement or its bound parameters (applicant data).
"""
import logging
from datetime import datetime, timezone
from typing import Optional, Union

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError, StatementError
from sqlalchemy.orm import Session

from .models import (
    AutomationLog,
    Submission,
    SyncAuditEntry,
    SyncStatus,
    Talent,
    TalentApplication,
    TalentStatus,
    UserRole,
)

logger = logging.getLogger(__name__)


def db_error_message(e: SQLAlchemyError) -> str:
    """Driver-level message of e, without the statement and parameters."""
    if isinstance(e, StatementError):
        return str(e.orig) if e.orig is not None else type(e).__name__
    return str(e)


class StoreError(Exception):
    """A read or write against the database failed."""


class DuplicateEmail(StoreError):
    """Insert rejected by a unique email constraint."""

    def __init__(self, email: str, existing: Union[TalentApplication, Talent]):
        super().__init__(f"{existing.__tablename__} entry for {email} already exists")
        self.email = email
        self.existing = existing


class TalentStore:
    """Repository over the intake, directory, roster, audit and role tables."""

    def __init__(self, session: Session):
        self.session = session

    def _commit(self) -> None:
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreError(db_error_message(e)) from e

    def _read_failed(self, what: str, e: SQLAlchemyError) -> StoreError:
        self.session.rollback()
        return StoreError(f"{what}: {db_error_message(e)}")

    # --- Submission Store ---

    def fetch_pending_submissions(self) -> list[Submission]:
        """All submissions with sync_status='pending', in storage order."""
        try:
            return list(
                self.session.scalars(
                    select(Submission).where(
                        Submission.sync_status == SyncStatus.PENDING.value
                    )
                )
            )
        except SQLAlchemyError as e:
            raise self._read_failed("Failed to fetch pending submissions", e) from e

    def set_sync_status(self, submission: Submission, status: SyncStatus) -> None:
        """Write sync_status. Idempotent: rewriting the same value is a no-op."""
        try:
            submission.sync_status = status.value
            self._commit()
        except IntegrityError as e:
            raise StoreError(db_error_message(e)) from e

    # --- Talent Directory ---

    def find_application_by_email(self, email: str) -> Optional[TalentApplication]:
        try:
            return self.session.scalars(
                select(TalentApplication).where(TalentApplication.email == email)
            ).first()
        except SQLAlchemyError as e:
            raise self._read_failed(f"Failed to look up {email}", e) from e

    def insert_application(self, application: TalentApplication) -> TalentApplication:
        """Insert a directory entry.

        Raises:
            DuplicateEmail: another entry with this email won the race.
            StoreError: any other database failure.
        """
        self.session.add(application)
        try:
            self._commit()
        except IntegrityError as e:
            # The failed object is expunged by the rollback; nothing to clean up.
            existing = self.find_application_by_email(application.email)
            if existing is not None:
                raise DuplicateEmail(application.email, existing) from e
            raise StoreError(db_error_message(e)) from e
        return application

    def fetch_approved_applications(self, limit: Optional[int] = None) -> list[TalentApplication]:
        """Approved directory entries, oldest first."""
        query = (
            select(TalentApplication)
            .where(TalentApplication.status == TalentStatus.APPROVED.value)
            .order_by(TalentApplication.created_at.asc())
        )
        if limit is not None:
            query = query.limit(limit)
        try:
            return list(self.session.scalars(query))
        except SQLAlchemyError as e:
            raise self._read_failed("Failed to fetch approved applications", e) from e

    # --- Talent Roster ---

    def find_talent_by_email(self, email: str) -> Optional[Talent]:
        """Roster entry for email, compared case-insensitively."""
        try:
            return self.session.scalars(
                select(Talent).where(func.lower(Talent.email) == email.lower())
            ).first()
        except SQLAlchemyError as e:
            raise self._read_failed(f"Failed to look up talent {email}", e) from e

    def insert_talent(self, talent: Talent) -> Talent:
        """Insert a roster entry.

        Raises:
            DuplicateEmail: a roster entry with this email already exists.
            StoreError: any other database failure.
        """
        self.session.add(talent)
        try:
            self._commit()
        except IntegrityError as e:
            existing = self.find_talent_by_email(talent.email)
            if existing is not None:
                raise DuplicateEmail(talent.email, existing) from e
            raise StoreError(db_error_message(e)) from e
        return talent

    # --- Sync Audit Log ---

    def append_audit_entry(
        self, submission: Submission, application: TalentApplication
    ) -> SyncAuditEntry:
        entry = SyncAuditEntry(
            emerge_submission_id=submission.id,
            talent_application_id=application.id,
            email=submission.email,
            submission_date=submission.created_at,
            talent_sync_date=datetime.now(timezone.utc),
            exists_in_talent_applications=True,
        )
        self.session.add(entry)
        try:
            self._commit()
        except IntegrityError as e:
            raise StoreError(db_error_message(e)) from e
        return entry

    # --- Run log ---

    def append_run_log(self, function_name: str, results: dict) -> AutomationLog:
        log = AutomationLog(
            function_name=function_name,
            executed_at=datetime.now(timezone.utc),
            results=results,
        )
        self.session.add(log)
        try:
            self._commit()
        except IntegrityError as e:
            raise StoreError(db_error_message(e)) from e
        return log

    # --- Roles ---

    def get_roles(self, user_id: str) -> set[str]:
        """Roles held by a principal (empty set if none assigned)."""
        try:
            rows = self.session.scalars(
                select(UserRole.role).where(UserRole.user_id == user_id)
            )
            return set(rows)
        except SQLAlchemyError as e:
            raise self._read_failed(f"Role lookup failed for {user_id}", e) from e
