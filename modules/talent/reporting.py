"""Sync dashboard data: status counts, migration progress and run history."""
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .models import (
    AutomationLog,
    Submission,
    SyncAuditEntry,
    SyncStatus,
    Talent,
    TalentApplication,
    TalentStatus,
)
from .migration_service import FUNCTION_NAME as MIGRATION_FUNCTION
from .sync_service import FUNCTION_NAME as SYNC_FUNCTION

JOB_NAMES = (SYNC_FUNCTION, MIGRATION_FUNCTION)


def _count_by(session: Session, column, values) -> dict[str, int]:
    counts = {v: 0 for v in values}
    rows = session.execute(select(column, func.count()).group_by(column))
    for value, count in rows:
        counts[value] = count
    return counts


def get_sync_status_summary(session: Session) -> dict:
    """Counts for the sync dashboard.

    Returns:
        {
          "submissions": {"pending": N, "synced": N, "already_exists": N},
          "total_submissions": N,
          "applications": {"pending": N, "approved": N, ...},
          "total_applications": N,
          "audit_entries": N,
          "last_synced_at": iso-str | None,
        }
    """
    submissions = _count_by(
        session, Submission.sync_status, [s.value for s in SyncStatus]
    )
    applications = _count_by(
        session, TalentApplication.status, [s.value for s in TalentStatus]
    )
    audit_entries = session.scalar(select(func.count(SyncAuditEntry.id))) or 0
    last_sync = session.scalar(select(func.max(SyncAuditEntry.talent_sync_date)))

    return {
        "submissions": submissions,
        "total_submissions": sum(submissions.values()),
        "applications": applications,
        "total_applications": sum(applications.values()),
        "audit_entries": audit_entries,
        "last_synced_at": last_sync.isoformat() if last_sync else None,
    }


def get_sync_logs(
    session: Session, limit: int = 5, function_name: str = SYNC_FUNCTION
) -> list[dict]:
    """Most recent runs of function_name (talent-sync by default), newest first."""
    rows = session.scalars(
        select(AutomationLog)
        .where(AutomationLog.function_name == function_name)
        .order_by(AutomationLog.executed_at.desc(), AutomationLog.id.desc())
        .limit(limit)
    )
    return [
        {
            "id": log.id,
            "function_name": log.function_name,
            "executed_at": log.executed_at.isoformat(),
            "results": log.results or {},
        }
        for log in rows
    ]


def get_migration_stats(session: Session) -> dict:
    """Roster migration progress.

    pending_count is approved applications with no roster entry for their
    email (case-insensitive).
    """
    approved = session.scalar(
        select(func.count(TalentApplication.id)).where(
            TalentApplication.status == TalentStatus.APPROVED.value
        )
    ) or 0
    roster = session.scalar(select(func.count(Talent.id))) or 0
    on_roster = select(Talent.id).where(
        func.lower(Talent.email) == func.lower(TalentApplication.email)
    ).exists()
    pending = session.scalar(
        select(func.count(TalentApplication.id)).where(
            TalentApplication.status == TalentStatus.APPROVED.value,
            ~on_roster,
        )
    ) or 0
    migrated = approved - pending
    return {
        "approved_applications": approved,
        "roster_size": roster,
        "migrated_count": migrated,
        "pending_count": pending,
        "migration_percentage": round(100 * migrated / approved) if approved else 100,
    }
