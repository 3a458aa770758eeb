"""
Talent Migration Endpoints

POST /functions/talent-migration   copy approved applications to the roster
GET  /api/talent/migration/status  migration progress (staff)
GET  /api/talent/migration/logs    recent migration runs (staff)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from modules.talent.authorization import STAFF_ROLES, Principal, require_roles
from modules.talent.database import get_db
from modules.talent.migration_service import FUNCTION_NAME, run_talent_migration
from modules.talent.reporting import get_migration_stats, get_sync_logs
from modules.talent.schemas import MigrationSummary
from ..auth.jwt import get_current_principal

router = APIRouter()


@router.post("/functions/talent-migration", response_model=MigrationSummary)
def talent_migration(
    batch_size: Optional[int] = Query(None, ge=1, le=1000),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Move approved talent applications into the talent roster"""
    return run_talent_migration(db, principal, batch_size=batch_size)


@router.get("/api/talent/migration/status")
def migration_status(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Approved applications vs. roster entries"""
    require_roles(db, principal, STAFF_ROLES)
    return get_migration_stats(db)


@router.get("/api/talent/migration/logs")
def migration_logs(
    limit: int = Query(5, ge=1, le=100),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Most recent migration runs"""
    require_roles(db, principal, STAFF_ROLES)
    return get_sync_logs(db, limit=limit, function_name=FUNCTION_NAME)
