"""
Talent Intake & Directory Endpoints
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

from modules.talent.authorization import STAFF_ROLES, Principal, require_roles
from modules.talent.database import get_db
from modules.talent.review_service import (
    create_submission,
    list_applications,
    list_pending_submissions,
    update_application_status,
)
from modules.talent.schemas import SubmissionCreate
from ..auth.jwt import get_current_principal

router = APIRouter()


# Pydantic schemas
class SubmissionResponse(BaseModel):
    id: str
    full_name: str
    email: str
    category: str
    gender: str
    country: Optional[str]
    sync_status: str
    created_at: datetime

    class Config:
        from_attributes = True


class TalentApplicationResponse(BaseModel):
    id: str
    full_name: str
    email: str
    phone: Optional[str]
    age: Optional[int]
    country: Optional[str]
    category_type: Optional[str]
    gender: Optional[str]
    social_media: Optional[dict]
    notes: Optional[str]
    portfolio_url: Optional[str]
    measurements: Optional[dict]
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


class StatusUpdate(BaseModel):
    status: str
    notes: Optional[str] = None


# API Endpoints
@router.post(
    "/submissions",
    response_model=SubmissionResponse,
    status_code=201,
)
def submit_talent(payload: SubmissionCreate, db: Session = Depends(get_db)):
    """Public registration form: store a pending submission"""
    return create_submission(db, payload)


@router.get("/submissions/pending", response_model=List[SubmissionResponse])
def pending_submissions(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Submissions waiting for the next talent sync, newest first"""
    require_roles(db, principal, STAFF_ROLES)
    return list_pending_submissions(db)


@router.get("/talent/applications", response_model=List[TalentApplicationResponse])
def applications(
    status: Optional[str] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """List talent applications"""
    require_roles(db, principal, STAFF_ROLES)
    return list_applications(db, status=status, search=search)


@router.patch("/talent/applications/{application_id}", response_model=TalentApplicationResponse)
def review_application(
    application_id: str,
    update: StatusUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Approve / reject / hold a talent application (admin or editor)"""
    return update_application_status(
        db, principal, application_id, update.status, notes=update.notes
    )
