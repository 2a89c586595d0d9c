"""
Account Service
Profile self-service, password changes, activation and bulk removal of accounts
"""

import logging
from typing import Any, Dict

from sqlalchemy.orm import Session

from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.core.security import verify_password
from app.crud import (
    application as crud_application, document as crud_document,
    notification as crud_notification, payment as crud_payment, user as crud_user,
)
from app.models.enums import ApplicationStatus, PaymentStatus
from app.models.user import User
from app.schemas.application import ApplicationListItem
from app.schemas.notification import NotificationResponse
from app.schemas.user import PasswordChange, ProfileUpdate
from app.services.audit_service import audit_service
from app.services.file_storage import DocumentFileManager

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: Any) -> User:
    user = crud_user.get(db, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def get_user_for_viewer(db: Session, user_id: Any, current_user: User) -> User:
    """The account itself or an admin"""
    if user_id != current_user.id and not current_user.is_admin:
        raise AuthorizationError("Not authorized to access this user")
    return get_user(db, user_id)


def update_profile(db: Session, current_user: User, profile_in: ProfileUpdate) -> User:
    changes = profile_in.model_dump(exclude_unset=True)
    user = crud_user.update(db, db_obj=current_user, obj_in=changes)
    audit_service.log_user_action(user.id, "update_profile", {"fields": sorted(changes)})
    return user


def change_password(db: Session, current_user: User, payload: PasswordChange) -> None:
    if not verify_password(payload.current_password, current_user.password_hash):
        raise ValidationError("Current password is incorrect")
    crud_user.set_password(db, user=current_user, password=payload.new_password)
    audit_service.log_user_action(current_user.id, "change_password")


def reset_password(db: Session, user_id: Any, new_password: str, current_user: User) -> User:
    user = get_user(db, user_id)
    user = crud_user.set_password(db, user=user, password=new_password)
    audit_service.log_admin_action(current_user.id, "reset_user_password", user.id, {"email": user.email})
    return user


def set_active(db: Session, user_id: Any, is_active: bool, current_user: User) -> User:
    user = get_user(db, user_id)
    if user.id == current_user.id and not is_active:
        raise ValidationError("Cannot deactivate your own account")
    user = crud_user.update(db, db_obj=user, obj_in={"is_active": is_active})
    audit_service.log_admin_action(
        current_user.id, "activate_user" if is_active else "deactivate_user", user.id
    )
    return user


def delete_all_users(db: Session, file_manager: DocumentFileManager, current_user: User) -> int:
    """
    Remove every account except the caller's, with their records and stored
    document files. Files are removed only after the rows are committed.
    """
    file_paths = crud_document.file_paths_for_users_except(db, keep_user_id=current_user.id)
    deleted = crud_user.delete_all_except(db, keep_id=current_user.id)
    removed_files = sum(1 for path in file_paths if file_manager.delete(path))
    logger.info(f"Deleted {deleted} users and {removed_files} stored document files")
    audit_service.log_admin_action(
        current_user.id, "delete_all_users", None, {"deleted_count": deleted, "removed_files": removed_files}
    )
    return deleted


def build_dashboard(db: Session, current_user: User) -> Dict[str, Any]:
    """Applicant home page: own application counts, recent activity and notifications"""
    user_id = current_user.id
    statistics = {
        "totalApplications": crud_application.count(db, user_id=user_id),
        "draftApplications": crud_application.count(db, user_id=user_id, status=ApplicationStatus.DRAFT),
        "submittedApplications": crud_application.count(db, user_id=user_id, status=ApplicationStatus.SUBMITTED),
        "completedApplications": (
            crud_application.count(db, user_id=user_id, status=ApplicationStatus.COMPLETED)
            + crud_application.count(db, user_id=user_id, status=ApplicationStatus.ISSUED)
        ),
        "pendingPayments": crud_payment.count(db, user_id=user_id, status=PaymentStatus.PENDING),
    }
    recent_notifications, _ = crud_notification.list_for_user(db, user_id=user_id, limit=3)
    return {
        "statistics": statistics,
        "recentApplications": [
            ApplicationListItem.model_validate(a) for a in crud_application.recent_for_user(db, user_id=user_id)
        ],
        "notifications": {
            "unreadCount": crud_notification.unread_count(db, user_id=user_id),
            "recent": [NotificationResponse.model_validate(n) for n in recent_notifications],
        },
    }
