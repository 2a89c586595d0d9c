"""
Admin API Endpoints for the Visa Processing System
Dashboard, user management and the staff side of the application workflow
"""

from typing import Optional
import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.v1.endpoints.auth import require_admin
from app.core.exceptions import NotFoundError, ValidationError
from app.core.database import get_db
from app.crud import (
    application as crud_application, user as crud_user, payment as crud_payment,
    document as crud_document, biometric_appointment as crud_biometric,
)
from app.models.enums import ApplicationStatus, BiometricStatus, DocumentStatus, DocumentType, PaymentStatus, UserRole, VisaType
from app.models.user import User
from app.schemas.application import (
    ApplicationStatusUpdate, ProcessingNoteCreate, OfficerAssignment, CostEstimationRequest,
    ApplicationResponse, ApplicationListItem, ApplicationListPayload
)
from app.schemas.biometric import BiometricAppointmentResponse
from app.schemas.common import PaginationMeta, success_response, offset_for
from app.schemas.document import DocumentStatusUpdate, DocumentDetail, DocumentListPayload, DocumentResponse
from app.schemas.payment import PaymentDetail
from app.schemas.user import PasswordReset, UserAdminUpdate, UserResponse, UserListPayload
from app.services import application_service, document_service, user_service
from app.services.file_storage import DocumentFileManager, get_file_manager
from app.services.audit_service import audit_service

router = APIRouter()


@router.get("/dashboard", summary="Admin Dashboard")
def get_dashboard(db: Session = Depends(get_db), current_user: User = Depends(require_admin)):
    """
    Headline counts, revenue and the most recent activity
    """
    status_counts = {s.value: crud_application.count(db, status=s) for s in ApplicationStatus}
    stats = {
        "totalUsers": crud_user.count(db, role=UserRole.USER),
        "totalApplications": crud_application.count(db),
        "pendingApplications": status_counts[ApplicationStatus.SUBMITTED.value]
                               + status_counts[ApplicationStatus.UNDER_REVIEW.value],
        "approvedApplications": status_counts[ApplicationStatus.APPROVED.value],
        "rejectedApplications": status_counts[ApplicationStatus.REJECTED.value],
        "pendingDocuments": crud_document.count(db, status=DocumentStatus.PENDING),
        "upcomingBiometrics": crud_biometric.count(db, status=BiometricStatus.SCHEDULED),
        "totalRevenue": crud_payment.total_revenue(db),
    }
    return success_response({
        "stats": stats,
        "applicationsByStatus": status_counts,
        "applicationsByVisaType": crud_application.count_by_visa_type(db),
        "recentApplications": [ApplicationListItem.model_validate(a) for a in crud_application.recent(db)],
        "recentPayments": [PaymentDetail.model_validate(p) for p in crud_payment.recent(db)],
    })


@router.get("/reports", summary="Admin Reports")
def get_reports(db: Session = Depends(get_db), current_user: User = Depends(require_admin)):
    """
    Status and visa type distribution, applications per month and completed revenue per month
    """
    return success_response({
        "applicationStats": crud_application.count_by_status(db),
        "visaStats": crud_application.count_by_visa_type(db),
        "monthlyStats": crud_application.count_by_month(db),
        "revenueStats": crud_payment.monthly_totals(db, status=PaymentStatus.COMPLETED),
    })


@router.get("/users", summary="List Users")
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    role: Optional[UserRole] = Query(None),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    users, total = crud_user.search_users(
        db, role=role, is_active=is_active, search=search, skip=offset_for(page, limit), limit=limit
    )
    return success_response(UserListPayload(
        users=[UserResponse.model_validate(u) for u in users],
        pagination=PaginationMeta.build(total, page, limit),
    ))


@router.put("/users/{user_id}", summary="Update User")
def update_user(
    user_id: uuid.UUID,
    user_in: UserAdminUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    user = crud_user.get(db, user_id)
    if not user:
        raise NotFoundError("User not found")
    if user.id == current_user.id and (user_in.is_active is False or user_in.role not in (None, UserRole.ADMIN)):
        raise ValidationError("Admins cannot deactivate or demote their own account")

    changes = user_in.model_dump(exclude_unset=True)
    user = crud_user.update(db, db_obj=user, obj_in=changes)
    audit_service.log_admin_action(
        current_user.id, "update_user", user.id, {k: str(v) for k, v in changes.items()}
    )
    return success_response({"user": UserResponse.model_validate(user)}, "User updated successfully")


@router.put("/users/{user_id}/reset-password", summary="Reset User Password")
def reset_user_password(
    user_id: uuid.UUID,
    reset_in: PasswordReset,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    user_service.reset_password(db, user_id, reset_in.new_password, current_user)
    return success_response(message="Password reset successfully. User can now login with the new password.")


@router.delete("/users", summary="Delete All Users")
def delete_all_users(
    db: Session = Depends(get_db),
    file_manager: DocumentFileManager = Depends(get_file_manager),
    current_user: User = Depends(require_admin)
):
    """
    Remove every user except the caller, with their applications, records and stored files
    """
    deleted = user_service.delete_all_users(db, file_manager, current_user)
    return success_response({"deletedCount": deleted}, f"Deleted {deleted} users")


@router.get("/applications", summary="List Applications")
def list_applications(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[ApplicationStatus] = Query(None),
    visa_type: Optional[VisaType] = Query(None, alias="visaType"),
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    applications, total = crud_application.search_applications(
        db, status=status, visa_type=visa_type, search=search, skip=offset_for(page, limit), limit=limit
    )
    return success_response(ApplicationListPayload(
        applications=[ApplicationListItem.model_validate(a) for a in applications],
        pagination=PaginationMeta.build(total, page, limit),
    ))


@router.put("/applications/{application_id}/status", summary="Set Application Status")
def set_application_status(
    application_id: uuid.UUID,
    status_in: ApplicationStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    application = application_service.set_application_status(db, application_id, status_in, current_user)
    return success_response(
        {"application": ApplicationResponse.model_validate(application)},
        "Application status updated successfully",
    )


@router.get("/application/{application_id}", summary="Application Detail")
def get_application_detail(
    application_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """
    Application with its applicant, documents, payment and appointment
    """
    application = application_service.get_application(db, application_id)
    payment = crud_payment.get_by_application(db, application_id=application.id)
    return success_response({
        "application": ApplicationListItem.model_validate(application),
        "documents": [DocumentResponse.model_validate(d) for d in application.documents],
        "payment": PaymentDetail.model_validate(payment) if payment else None,
        "biometricAppointment": (
            BiometricAppointmentResponse.model_validate(application.biometric_appointment)
            if application.biometric_appointment else None
        ),
    })


@router.post("/application/{application_id}/notes", summary="Add Processing Note")
def add_note(
    application_id: uuid.UUID,
    note_in: ProcessingNoteCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    entry = application_service.add_processing_note(db, application_id, note_in.note, current_user)
    return success_response({"note": entry}, "Note added successfully")


@router.put("/application/{application_id}/assign", summary="Assign Officer")
def assign_officer(
    application_id: uuid.UUID,
    assignment: OfficerAssignment,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    application = application_service.assign_application(db, application_id, assignment.officer_id, current_user)
    return success_response(
        {"application": ApplicationListItem.model_validate(application)},
        "Officer assigned successfully",
    )


@router.post("/application/{application_id}/send-cost-estimation", summary="Send Cost Estimation")
def send_cost_estimation(
    application_id: uuid.UUID,
    cost_in: CostEstimationRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    application = application_service.send_cost_estimation(db, application_id, cost_in, current_user)
    return success_response(
        {"application": ApplicationResponse.model_validate(application)},
        "Cost estimation sent successfully",
    )


@router.get("/documents", summary="List Documents")
def list_documents(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[DocumentStatus] = Query(None),
    document_type: Optional[DocumentType] = Query(None, alias="documentType"),
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    documents, total = crud_document.search_documents(
        db, status=status, document_type=document_type, search=search,
        skip=offset_for(page, limit), limit=limit,
    )
    return success_response(DocumentListPayload(
        documents=[DocumentDetail.model_validate(d) for d in documents],
        pagination=PaginationMeta.build(total, page, limit),
    ))


@router.put("/documents/{document_id}/status", summary="Review Document")
def review_document(
    document_id: uuid.UUID,
    status_in: DocumentStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    document = document_service.review_document(db, document_id, status_in, current_user)
    return success_response(
        {"document": DocumentResponse.model_validate(document)},
        "Document status updated successfully",
    )
