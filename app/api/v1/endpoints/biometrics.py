"""
Biometric Appointment API Endpoints for the Visa Processing System
"""

from datetime import date, datetime, time, timedelta
from typing import Optional
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.v1.endpoints.auth import get_current_user, require_staff
from app.core.database import get_db
from app.core.exceptions import AuthorizationError
from app.crud import biometric_appointment as crud_biometric
from app.models.enums import BiometricStatus
from app.models.user import User
from app.schemas.biometric import (
    BiometricScheduleRequest, BiometricStatusUpdate, BiometricReschedule,
    BiometricAppointmentResponse, BiometricAppointmentDetail, BiometricListPayload, BiometricLocation
)
from app.schemas.common import PaginationMeta, success_response, offset_for
from app.services import biometric_service

router = APIRouter()

BIOMETRIC_LOCATIONS = [
    BiometricLocation(id="dubai_main", name="Dubai Main Center", city="Dubai", country="UAE", phone="+971-4-123-4567"),
    BiometricLocation(id="abu_dhabi", name="Abu Dhabi Branch", city="Abu Dhabi", country="UAE", phone="+971-2-765-4321"),
    BiometricLocation(id="sharjah", name="Sharjah Office", city="Sharjah", country="UAE", phone="+971-6-987-6543"),
    BiometricLocation(id="al_ain", name="Al Ain Center", city="Al Ain", country="UAE"),
    BiometricLocation(id="ras_al_khaimah", name="Ras Al Khaimah Office", city="Ras Al Khaimah", country="UAE"),
]


@router.get("/", summary="List My Appointments")
def list_my_appointments(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    appointments = crud_biometric.get_by_user(db, user_id=current_user.id)
    return success_response(BiometricListPayload(
        appointments=[BiometricAppointmentDetail.model_validate(a) for a in appointments]
    ))


@router.get("/locations", summary="Biometric Locations")
def list_locations(current_user: User = Depends(get_current_user)):
    return success_response({"locations": BIOMETRIC_LOCATIONS})


@router.get("/admin/all", summary="List All Appointments (Staff)")
def list_all_appointments(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[BiometricStatus] = Query(None),
    date_from: Optional[datetime] = Query(None, alias="dateFrom"),
    date_to: Optional[datetime] = Query(None, alias="dateTo"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    appointments, total = crud_biometric.search_appointments(
        db, status=status, date_from=date_from, date_to=date_to, skip=offset_for(page, limit), limit=limit
    )
    return success_response(BiometricListPayload(
        appointments=[BiometricAppointmentDetail.model_validate(a) for a in appointments],
        pagination=PaginationMeta.build(total, page, limit),
    ))


@router.get("/admin/stats", summary="Appointment Statistics (Staff)")
def get_appointment_stats(db: Session = Depends(get_db), current_user: User = Depends(require_staff)):
    """
    Appointment counts per status, overall and for today
    """
    today_start = datetime.combine(date.today(), time.min)
    return success_response({
        "statusStats": crud_biometric.count_by_status(db),
        "todayStats": crud_biometric.count_by_status(
            db, date_from=today_start, date_to=today_start + timedelta(days=1)
        ),
    })


@router.get("/{appointment_id}", summary="Get Appointment")
def get_appointment(
    appointment_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    appointment = biometric_service.get_appointment(db, appointment_id)
    if appointment.user_id != current_user.id and not current_user.is_staff:
        raise AuthorizationError("Not authorized to access this appointment")
    return success_response({"appointment": BiometricAppointmentDetail.model_validate(appointment)})


@router.post("/", status_code=status.HTTP_201_CREATED, summary="Schedule Appointment")
def schedule_appointment(
    appointment_in: BiometricScheduleRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Schedule the application's biometric appointment (staff only)
    """
    appointment = biometric_service.schedule_appointment(db, appointment_in, current_user)
    return success_response(
        {"appointment": BiometricAppointmentResponse.model_validate(appointment)},
        "Biometric appointment scheduled successfully",
    )


@router.put("/{appointment_id}/status", summary="Update Appointment Status")
def update_appointment_status(
    appointment_id: uuid.UUID,
    status_in: BiometricStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    appointment = biometric_service.update_appointment_status(db, appointment_id, status_in, current_user)
    return success_response(
        {"appointment": BiometricAppointmentResponse.model_validate(appointment)},
        "Appointment status updated successfully",
    )


@router.put("/{appointment_id}/reschedule", summary="Reschedule Appointment")
def reschedule_appointment(
    appointment_id: uuid.UUID,
    reschedule_in: BiometricReschedule,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    appointment = biometric_service.reschedule_appointment(db, appointment_id, reschedule_in, current_user)
    return success_response(
        {"appointment": BiometricAppointmentResponse.model_validate(appointment)},
        "Appointment rescheduled successfully",
    )
