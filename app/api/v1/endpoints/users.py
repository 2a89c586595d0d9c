"""
User Self-Service Endpoints for the Visa Processing System
Profile, personal dashboard and account activation
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v1.endpoints.auth import get_current_user, require_admin
from app.core.database import get_db
from app.models.user import User
from app.schemas.common import success_response
from app.schemas.user import ProfileUpdate, UserResponse
from app.services import user_service

router = APIRouter()


@router.get("/profile", summary="My Profile")
def get_profile(current_user: User = Depends(get_current_user)):
    return success_response({"user": UserResponse.model_validate(current_user)})


@router.put("/profile", summary="Update My Profile")
def update_profile(
    profile_in: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    user = user_service.update_profile(db, current_user, profile_in)
    return success_response({"user": UserResponse.model_validate(user)}, "Profile updated successfully")


@router.get("/dashboard", summary="My Dashboard")
def get_dashboard(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """
    Counts of the caller's applications, recent applications and notifications
    """
    return success_response(user_service.build_dashboard(db, current_user))


@router.get("/{user_id}", summary="Get User")
def get_user(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    user = user_service.get_user_for_viewer(db, user_id, current_user)
    return success_response({"user": UserResponse.model_validate(user)})


@router.put("/{user_id}/deactivate", summary="Deactivate User")
def deactivate_user(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    user = user_service.set_active(db, user_id, False, current_user)
    return success_response({"user": UserResponse.model_validate(user)}, "User account deactivated successfully")


@router.put("/{user_id}/activate", summary="Activate User")
def activate_user(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    user = user_service.set_active(db, user_id, True, current_user)
    return success_response({"user": UserResponse.model_validate(user)}, "User account activated successfully")
