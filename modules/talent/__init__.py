"""Talent back-office: intake, reconciliation and staff review.

SQLAlchemy-backed. The talent-sync job moves public-form submissions
(emerge_submissions) into the curated directory (talent_applications)
without duplicates and records an audit trail (talent_sync_status); the
talent-migration job copies approved applications into the roster (talent).
"""

from .models import (
    Base,
    Submission,
    TalentApplication,
    SyncAuditEntry,
    UserRole,
    AutomationLog,
    Talent,
    SyncStatus,
    TalentStatus,
)
from .database import get_engine, get_session, init_db
from .authorization import (
    Principal,
    Unauthorized,
    PermissionDenied,
    PermissionCheckFailed,
    require_roles,
)
from .sync_service import run_talent_sync, reconcile_pending
from .migration_service import run_talent_migration, migrate_approved
from .schemas import SyncSummary, SyncItemResult, SyncItemStatus, MigrationSummary
