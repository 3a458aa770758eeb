"""
User Role Endpoints
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import List, Optional

from modules.talent.authorization import Principal
from modules.talent.database import get_db
from modules.talent.review_service import get_user_roles, set_user_role
from ..auth.jwt import get_current_principal

router = APIRouter()


class RoleUpdate(BaseModel):
    role: str


class UserRolesResponse(BaseModel):
    user_id: str
    email: Optional[str] = None
    roles: List[str]


@router.get("/me", response_model=UserRolesResponse)
def me(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Current principal and its roles"""
    return UserRolesResponse(
        user_id=principal.user_id,
        email=principal.email,
        roles=get_user_roles(db, principal.user_id),
    )


@router.put("/{user_id}/role", response_model=UserRolesResponse)
def update_role(
    user_id: str,
    update: RoleUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Assign a role (admin only)"""
    set_user_role(db, principal, user_id, update.role)
    return UserRolesResponse(user_id=user_id, roles=get_user_roles(db, user_id))
