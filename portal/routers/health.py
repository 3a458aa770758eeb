"""
Health Check Endpoint

Unauthenticated. Reports database reachability and how many submissions
are waiting for the next talent sync.
"""

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from modules.talent.database import get_db
from modules.talent.models import Submission, SyncStatus
from modules.talent.store import db_error_message

router = APIRouter()


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Database status and sync backlog"""
    backend = db.get_bind().dialect.name
    try:
        pending = db.scalar(
            select(func.count(Submission.id)).where(
                Submission.sync_status == SyncStatus.PENDING.value
            )
        )
        db_status = "healthy"
    except SQLAlchemyError as e:
        pending = None
        db_status = f"unhealthy: {db_error_message(e)}"

    return {
        "status": "healthy" if db_status == "healthy" else "degraded",
        "database": db_status,
        "backend": backend,
        "pending_submissions": pending,
        "version": "1.0.0",
    }
