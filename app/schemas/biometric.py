"""
Biometric Appointment Schemas for the Visa Processing System API
"""

from pydantic import Field, validator
from typing import Optional, List
from datetime import datetime
import uuid

from app.models.enums import BiometricStatus, ApplicationStatus, VisaType
from app.schemas.common import CamelModel, RequestModel, PaginationMeta
from app.schemas.user import UserSummary


class BiometricScheduleRequest(RequestModel):
    application_id: uuid.UUID
    appointment_date: datetime
    location: str = Field(..., min_length=1, max_length=200)
    notes: Optional[str] = Field(None, max_length=500)

    @validator('location')
    def strip_location(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Location is required')
        return v


class BiometricStatusUpdate(RequestModel):
    status: BiometricStatus
    notes: Optional[str] = Field(None, max_length=500)


class BiometricReschedule(RequestModel):
    appointment_date: datetime
    location: Optional[str] = Field(None, max_length=200)
    reason: str = Field(..., min_length=1)

    @validator('reason')
    def strip_reason(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Reschedule reason is required')
        return v


class AppointmentApplication(CamelModel):
    id: uuid.UUID
    application_number: str
    visa_type: VisaType
    status: ApplicationStatus
    destination_country: Optional[str] = None


class BiometricAppointmentResponse(CamelModel):
    id: uuid.UUID
    application_id: uuid.UUID
    user_id: uuid.UUID
    appointment_date: datetime
    location: str
    status: BiometricStatus
    notes: Optional[str] = None
    scheduled_by: Optional[uuid.UUID] = None
    completed_by: Optional[uuid.UUID] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class BiometricAppointmentDetail(BiometricAppointmentResponse):
    application: Optional[AppointmentApplication] = None
    scheduled_by_user: Optional[UserSummary] = None
    completed_by_user: Optional[UserSummary] = None


class BiometricListPayload(CamelModel):
    appointments: List[BiometricAppointmentDetail]
    pagination: Optional[PaginationMeta] = None


class BiometricLocation(CamelModel):
    id: str
    name: str
    city: str
    country: str
    phone: Optional[str] = None
    is_active: bool = True
