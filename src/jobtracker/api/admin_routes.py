from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from jobtracker.api.deps import get_current_user, get_db
from jobtracker.api.schemas import ActiveUpdateRequest, RoleUpdateRequest
from jobtracker.core.access import require_admin
from jobtracker.core.admin import AdminService
from jobtracker.db.models import UserProfile
from jobtracker.types import UserProfileView, UserStatistics

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/users", response_model=list[UserProfileView])
def list_users(
    user: UserProfile = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[UserProfileView]:
    return AdminService(db).list_all_users(user.uid)


@router.get("/statistics", response_model=UserStatistics)
def statistics(
    user: UserProfile = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> UserStatistics:
    return AdminService(db).get_statistics(user.uid)


@router.patch("/users/{target_uid}/role", response_model=UserProfileView)
def update_role(
    target_uid: str,
    payload: RoleUpdateRequest,
    user: UserProfile = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> UserProfileView:
    return AdminService(db).update_user_role(user.uid, target_uid, payload.role)


@router.patch("/users/{target_uid}/active", response_model=UserProfileView)
def update_active(
    target_uid: str,
    payload: ActiveUpdateRequest,
    user: UserProfile = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> UserProfileView:
    if target_uid == user.uid and not payload.active:
        require_admin(db, user.uid)
        raise HTTPException(status_code=400, detail="Administrators cannot deactivate their own account")
    return AdminService(db).set_active(user.uid, target_uid, payload.active)
