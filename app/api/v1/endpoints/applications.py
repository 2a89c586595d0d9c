"""
Application Management API Endpoints for the Visa Processing System
Applicant-facing application lifecycle: create, edit, submit, cancel
"""

from typing import Optional
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.v1.endpoints.auth import get_current_user, require_staff
from app.core.database import get_db
from app.crud import application as crud_application
from app.models.enums import ApplicationStatus, VisaType, TERMINAL_STATUSES
from app.models.user import User
from app.schemas.application import (
    ApplicationCreate, ApplicationUpdate, ApplicationResponse, ApplicationListItem,
    ApplicationListPayload, StatusOption
)
from app.schemas.common import PaginationMeta, success_response, offset_for
from app.services import application_service
from app.services.cost_estimator import build_cost_estimation
from app.services.workflow import allowed_targets

router = APIRouter()


@router.get("/", summary="List My Applications")
def list_my_applications(
    status: Optional[ApplicationStatus] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    applications = crud_application.get_by_user(db, user_id=current_user.id, status=status)
    return success_response(ApplicationListPayload(
        applications=[ApplicationListItem.model_validate(a) for a in applications]
    ))


@router.get("/meta/statuses", summary="Application Statuses")
def get_statuses(current_user: User = Depends(get_current_user)):
    """
    Every workflow status with the statuses staff may move it to
    """
    statuses = [
        StatusOption(
            value=s.value,
            label=s.value.replace("_", " ").title(),
            terminal=s in TERMINAL_STATUSES,
            next_statuses=sorted(t.value for t in allowed_targets(s)),
        )
        for s in ApplicationStatus
    ]
    return success_response({
        "statuses": statuses,
        "visaTypes": [{"value": v.value, "label": f"{v.value.title()} Visa"} for v in VisaType],
    })


@router.get("/cost-estimation", summary="Visa Cost Estimation")
def get_cost_estimation(
    visa_type: Optional[str] = Query(None, alias="visaType"),
    duration: Optional[int] = Query(None, ge=1),
    express: bool = Query(False),
    insurance: bool = Query(False),
    courier: bool = Query(False),
    current_user: User = Depends(get_current_user)
):
    """
    Price table for a visa type, with an itemized estimate when the duration matches a tier
    """
    return success_response(build_cost_estimation(visa_type, duration, express, insurance, courier))


@router.get("/admin/all", summary="List All Applications (Staff)")
def list_all_applications(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[ApplicationStatus] = Query(None),
    visa_type: Optional[VisaType] = Query(None, alias="visaType"),
    assigned_officer: Optional[uuid.UUID] = Query(None, alias="assignedOfficer"),
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    applications, total = crud_application.search_applications(
        db, status=status, visa_type=visa_type, assigned_officer_id=assigned_officer,
        search=search, skip=offset_for(page, limit), limit=limit,
    )
    return success_response(ApplicationListPayload(
        applications=[ApplicationListItem.model_validate(a) for a in applications],
        pagination=PaginationMeta.build(total, page, limit),
    ))


@router.get("/{application_id}", summary="Get Application")
def get_application(
    application_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    application = application_service.get_application_for_user(db, application_id, current_user)
    return success_response({"application": ApplicationListItem.model_validate(application)})


@router.post("/", status_code=status.HTTP_201_CREATED, summary="Create Application")
def create_application(
    application_in: ApplicationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Create a DRAFT application owned by the caller
    """
    application = application_service.create_application(db, application_in, current_user)
    return success_response(
        {"application": ApplicationResponse.model_validate(application)},
        "Application created successfully",
    )


@router.put("/{application_id}", summary="Update Application")
def update_application(
    application_id: uuid.UUID,
    application_in: ApplicationUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    application = application_service.update_application(db, application_id, application_in, current_user)
    return success_response(
        {"application": ApplicationResponse.model_validate(application)},
        "Application updated successfully",
    )


@router.put("/{application_id}/submit", summary="Submit Application")
def submit_application(
    application_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    application = application_service.submit_application(db, application_id, current_user)
    return success_response(
        {"application": ApplicationResponse.model_validate(application)},
        "Application submitted successfully",
    )


@router.put("/{application_id}/cancel", summary="Cancel Application")
def cancel_application(
    application_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    application = application_service.cancel_application(db, application_id, current_user)
    return success_response(
        {"application": ApplicationResponse.model_validate(application)},
        "Application cancelled successfully",
    )
