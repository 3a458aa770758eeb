"""
Talent Sync Endpoints

POST /functions/talent-sync   run the reconciliation (admin/editor)
GET  /api/talent/sync/status  dashboard counts (staff)
GET  /api/talent/sync/logs    recent runs (staff)
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from modules.talent.authorization import STAFF_ROLES, Principal, require_roles
from modules.talent.database import get_db
from modules.talent.reporting import get_sync_logs, get_sync_status_summary
from modules.talent.schemas import SyncSummary
from modules.talent.sync_service import run_talent_sync
from ..auth.jwt import get_current_principal

router = APIRouter()


@router.post("/functions/talent-sync", response_model=SyncSummary)
def talent_sync(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Move all pending submissions into the talent directory"""
    return run_talent_sync(db, principal)


@router.get("/api/talent/sync/status")
def sync_status(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Submission and directory counts for the sync dashboard"""
    require_roles(db, principal, STAFF_ROLES)
    return get_sync_status_summary(db)


@router.get("/api/talent/sync/logs")
def sync_logs(
    limit: int = Query(5, ge=1, le=100),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Most recent sync runs"""
    require_roles(db, principal, STAFF_ROLES)
    return get_sync_logs(db, limit=limit)
