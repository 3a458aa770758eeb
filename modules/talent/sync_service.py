"""Talent submission reconciliation (talent-sync).

Moves pending public-form submissions into the talent directory without
creating duplicates, leaving an audit trail.

Flow per pending submission:
    lookup by email ─┬─ found     → mark already_exists
                     └─ not found → insert ─┬─ fails  → error (stays pending)
                                            └─ ok → mark synced ─┬─ fails → partial_success
                                                                 └─ ok    → audit entry, synced

Idempotency:
  - Only sync_status='pending' rows are read; synced/already_exists rows are
    never touched again.
  - talent_applications.email is unique: an insert that loses a race against
    a concurrent run is classified as already_exists.
  - The synced status write is retried before reporting partial_success.
    A partial_success row stays pending and resolves to already_exists on
    the next run.

Usage:
    from modules.talent.sync_service import run_talent_sync

    summary = run_talent_sync(session, principal)
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from common.config import ServiceConfig, get_config
from .authorization import Principal, require_roles
from .models import Submission, SyncStatus, TalentApplication, TalentStatus
from .schemas import SyncItemResult, SyncItemStatus, SyncSummary
from .store import DuplicateEmail, StoreError, TalentStore

logger = logging.getLogger(__name__)

FUNCTION_NAME = "talent-sync"


def submission_to_application(submission: Submission) -> TalentApplication:
    """Build the directory entry for a submission. Status is always pending."""
    return TalentApplication(
        full_name=submission.full_name,
        email=submission.email,
        phone=submission.phone_number,
        age=submission.age,
        country=submission.country,
        category_type=submission.category,
        gender=submission.gender,
        portfolio_url=submission.portfolio_url,
        measurements=submission.measurements,
        notes=submission.talent_description,
        social_media={
            "instagram": submission.instagram,
            "telegram": submission.telegram,
            "tiktok": submission.tiktok,
        },
        status=TalentStatus.PENDING.value,
    )


def _mark_synced(store: TalentStore, submission: Submission, retries: int) -> bool:
    """Set sync_status='synced', retrying up to `retries` extra times."""
    for attempt in range(retries + 1):
        try:
            store.set_sync_status(submission, SyncStatus.SYNCED)
            return True
        except StoreError as e:
            logger.warning(
                f"Status update failed for submission {submission.id} "
                f"(attempt {attempt + 1}/{retries + 1}): {e}"
            )
    return False


def _mark_already_exists(
    store: TalentStore, submission: Submission, existing: TalentApplication
) -> SyncItemResult:
    submission_id, email, existing_id = submission.id, submission.email, existing.id
    try:
        store.set_sync_status(submission, SyncStatus.ALREADY_EXISTS)
    except StoreError as e:
        logger.error(f"Could not mark {email} as already_exists: {e}")
        return SyncItemResult(
            id=submission_id,
            email=email,
            status=SyncItemStatus.ERROR,
            error=str(e),
            talent_application_id=existing_id,
        )
    logger.info(f"Already exists: {email} → {existing_id}")
    return SyncItemResult(
        id=submission_id,
        email=email,
        status=SyncItemStatus.ALREADY_EXISTS,
        talent_application_id=existing_id,
    )


def reconcile_submission(
    store: TalentStore,
    submission: Submission,
    config: ServiceConfig,
) -> SyncItemResult:
    """Reconcile one pending submission. Never raises StoreError."""
    # Copy identifiers up front: a rollback expires ORM attributes.
    submission_id, email = submission.id, submission.email

    try:
        existing = store.find_application_by_email(email)
    except StoreError as e:
        logger.error(f"Lookup failed for {email}: {e}")
        return SyncItemResult(
            id=submission_id, email=email, status=SyncItemStatus.ERROR, error=str(e)
        )

    if existing is not None:
        return _mark_already_exists(store, submission, existing)

    try:
        application = store.insert_application(submission_to_application(submission))
    except DuplicateEmail as e:
        # Lost a race with a concurrent run; the winner's row is authoritative.
        return _mark_already_exists(store, submission, e.existing)
    except StoreError as e:
        logger.error(f"Insert failed for {email}: {e}")
        return SyncItemResult(
            id=submission_id, email=email, status=SyncItemStatus.ERROR, error=str(e)
        )

    application_id = application.id

    if not _mark_synced(store, submission, config.sync.status_update_retries):
        return SyncItemResult(
            id=submission_id,
            email=email,
            status=SyncItemStatus.PARTIAL_SUCCESS,
            error="talent application created but submission status not updated",
            talent_application_id=application_id,
        )

    if config.sync.audit_enabled:
        try:
            store.append_audit_entry(submission, application)
        except StoreError as e:
            logger.warning(f"Audit entry not written for {email}: {e}")

    logger.info(f"Synced: {email} → {application_id}")
    return SyncItemResult(
        id=submission_id,
        email=email,
        status=SyncItemStatus.SYNCED,
        talent_application_id=application_id,
    )


def reconcile_pending(
    session: Session,
    store: Optional[TalentStore] = None,
    config: Optional[ServiceConfig] = None,
) -> SyncSummary:
    """Reconcile every pending submission. Caller must be authorized.

    Raises:
        StoreError: the pending list could not be fetched. Nothing was
            written in that case.
    """
    config = config or get_config()
    store = store or TalentStore(session)

    pending = store.fetch_pending_submissions()
    if not pending:
        logger.info("Talent sync: no pending submissions")
        return SyncSummary(processed=0, results=[])

    results = [reconcile_submission(store, submission, config) for submission in pending]
    summary = SyncSummary(processed=len(results), results=results)
    logger.info(f"Talent sync: {summary.processed} processed {summary.counts()}")
    return summary


def _record_run(store: TalentStore, summary: Optional[SyncSummary], error: Optional[str] = None) -> None:
    """Best-effort run log entry; failures are logged, never raised."""
    if summary is not None:
        results = {
            "success": summary.success,
            "processed": summary.processed,
            "counts": summary.counts(),
            "errors": [
                f"{r.email}: {r.error}" for r in summary.needs_attention
            ][:50],
        }
    else:
        results = {"success": False, "processed": 0, "error": error}
    try:
        store.append_run_log(FUNCTION_NAME, results)
    except StoreError as e:
        logger.warning(f"Run log not written: {e}")


def run_talent_sync(
    session: Session,
    principal: Optional[Principal],
    store: Optional[TalentStore] = None,
    config: Optional[ServiceConfig] = None,
) -> SyncSummary:
    """Authorize the caller, then reconcile all pending submissions.

    Raises:
        Unauthorized / PermissionDenied / PermissionCheckFailed: gate
            rejected the call; nothing was read or written.
        StoreError: the pending list could not be fetched.
    """
    config = config or get_config()
    require_roles(session, principal, config.auth.sync_roles)
    logger.info(f"Talent sync started by {principal.user_id}")

    store = store or TalentStore(session)
    try:
        summary = reconcile_pending(session, store=store, config=config)
    except StoreError as e:
        logger.error(f"Talent sync aborted: {e}")
        if config.sync.run_log_enabled:
            _record_run(store, None, error=str(e))
        raise

    if config.sync.run_log_enabled and summary.processed:
        _record_run(store, summary)
    return summary
