"""Roster migration (talent-migration).

Copies approved talent applications into the talent roster. An application
whose email is already on the roster (compared case-insensitively) is
skipped, so re-running is safe.

Flow per approved application:
    roster lookup ─┬─ found     → skipped
                   └─ not found → insert ─┬─ ok          → migrated
                                          ├─ duplicate   → skipped
                                          └─ other error → error (retried next run)

Usage:
    from modules.talent.migration_service import run_talent_migration

    summary = run_talent_migration(session, principal, batch_size=50)
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from common.config import ServiceConfig, get_config
from .authorization import Principal, require_roles
from .models import Talent, TalentApplication, TalentCategory, TalentLevel
from .schemas import MigrationItemResult, MigrationItemStatus, MigrationSummary
from .store import DuplicateEmail, StoreError, TalentStore

logger = logging.getLogger(__name__)

FUNCTION_NAME = "talent-migration"

# First match wins; checked against the lowercased free-text category.
CATEGORY_KEYWORDS = [
    (("model",), TalentCategory.MODEL),
    (("design",), TalentCategory.DESIGNER),
    (("photo",), TalentCategory.PHOTOGRAPHER),
    (("act",), TalentCategory.ACTOR),
    (("music", "sing", "band"), TalentCategory.MUSICAL_ARTIST),
    (("art", "paint"), TalentCategory.FINE_ARTIST),
    (("event", "plan"), TalentCategory.EVENT_PLANNER),
]


def map_category(category_type: Optional[str]) -> TalentCategory:
    """Map a directory category_type to a roster category (default: model)."""
    if not category_type:
        return TalentCategory.MODEL
    lowered = category_type.lower()
    for keywords, category in CATEGORY_KEYWORDS:
        if any(k in lowered for k in keywords):
            return category
    return TalentCategory.MODEL


def application_to_talent(application: TalentApplication) -> Talent:
    """Build the roster entry for an approved application. Level is beginner."""
    social = application.social_media
    links = None
    if social:
        links = {
            "instagram": social.get("instagram"),
            "telegram": social.get("telegram"),
            "tiktok": social.get("tiktok"),
            "portfolio": application.portfolio_url,
        }
    return Talent(
        full_name=application.full_name,
        email=application.email,
        category=map_category(application.category_type).value,
        level=TalentLevel.BEGINNER.value,
        portfolio_url=application.portfolio_url,
        social_media_links=links,
        profile_image_url=application.photo_url,
    )


def migrate_application(store: TalentStore, application: TalentApplication) -> MigrationItemResult:
    """Migrate one approved application. Never raises StoreError."""
    application_id, email = application.id, application.email

    try:
        existing = store.find_talent_by_email(email)
    except StoreError as e:
        logger.error(f"Roster lookup failed for {email}: {e}")
        return MigrationItemResult(
            id=application_id, email=email, status=MigrationItemStatus.ERROR, error=str(e)
        )

    if existing is None:
        try:
            talent = store.insert_talent(application_to_talent(application))
        except DuplicateEmail as e:
            existing = e.existing
        except StoreError as e:
            logger.error(f"Migration failed for {email}: {e}")
            return MigrationItemResult(
                id=application_id, email=email, status=MigrationItemStatus.ERROR, error=str(e)
            )
        else:
            logger.info(f"Migrated: {email} → {talent.id} ({talent.category})")
            return MigrationItemResult(
                id=application_id,
                email=email,
                status=MigrationItemStatus.MIGRATED,
                talent_id=talent.id,
            )

    logger.debug(f"Skipped: {email} already on the roster")
    return MigrationItemResult(
        id=application_id,
        email=email,
        status=MigrationItemStatus.SKIPPED,
        talent_id=existing.id,
    )


def migrate_approved(
    session: Session,
    store: Optional[TalentStore] = None,
    batch_size: Optional[int] = None,
) -> MigrationSummary:
    """Migrate approved applications, oldest first. Caller must be authorized.

    Raises:
        StoreError: the approved list could not be fetched.
    """
    store = store or TalentStore(session)
    approved = store.fetch_approved_applications(limit=batch_size)
    if not approved:
        logger.info("Talent migration: no approved applications")
        return MigrationSummary(message="No approved applications to migrate")

    summary = MigrationSummary.from_results(
        [migrate_application(store, application) for application in approved]
    )
    logger.info(f"Talent migration: {summary.message}")
    return summary


def _record_run(
    store: TalentStore,
    summary: Optional[MigrationSummary],
    batch_size: Optional[int],
    error: Optional[str] = None,
) -> None:
    """Best-effort run log entry; failures are logged, never raised."""
    if summary is not None:
        results = {
            "operation": "migrate-approved",
            "success": summary.success,
            "processed": summary.processed,
            "migrated_count": summary.migrated_count,
            "skipped_count": summary.skipped_count,
            "error_count": summary.error_count,
            "batch_size": batch_size,
            "errors": [
                f"{r.email}: {r.error}"
                for r in summary.results
                if r.status is MigrationItemStatus.ERROR
            ][:50],
        }
    else:
        results = {"operation": "migrate-approved", "success": False, "error": error}
    try:
        store.append_run_log(FUNCTION_NAME, results)
    except StoreError as e:
        logger.warning(f"Run log not written: {e}")


def run_talent_migration(
    session: Session,
    principal: Optional[Principal],
    store: Optional[TalentStore] = None,
    config: Optional[ServiceConfig] = None,
    batch_size: Optional[int] = None,
) -> MigrationSummary:
    """Authorize the caller, then migrate approved applications to the roster.

    A run log row is written when something was migrated or failed, or when
    the approved list could not be fetched. Skip-only runs write nothing.

    Raises:
        Unauthorized / PermissionDenied / PermissionCheckFailed
        StoreError: the approved list could not be fetched.
    """
    config = config or get_config()
    require_roles(session, principal, config.auth.sync_roles)
    logger.info(f"Talent migration started by {principal.user_id}")

    store = store or TalentStore(session)
    try:
        summary = migrate_approved(session, store=store, batch_size=batch_size)
    except StoreError as e:
        logger.error(f"Talent migration aborted: {e}")
        if config.sync.run_log_enabled:
            _record_run(store, None, batch_size, error=str(e))
        raise

    if config.sync.run_log_enabled and (summary.migrated_count or summary.error_count):
        _record_run(store, summary, batch_size)
    return summary
