"""
Pydantic schemas for Visa Application Management
Handles validation and serialization for application, workflow and staff actions

Request bodies forbid unknown keys, so fields such as status, applicationNumber
or the fee columns can only change through their dedicated workflow actions.
"""

from typing import List, Optional, Dict, Any
from pydantic import Field, field_validator, validator, model_validator
from datetime import datetime, date
from decimal import Decimal
import uuid

from app.models.enums import ApplicationStatus, VisaType, AccommodationType
from app.schemas.common import CamelModel, RequestModel, PaginationMeta
from app.schemas.user import UserSummary


# Applicant-editable fields shared by create and update
class ApplicationFields(RequestModel):
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    destination_country: Optional[str] = Field(None, max_length=100)
    passport_number: Optional[str] = Field(None, max_length=50)
    nationality: Optional[str] = Field(None, max_length=100)
    date_of_birth: Optional[date] = None
    purpose_of_visit: Optional[str] = Field(None, max_length=500)
    duration_of_stay: Optional[int] = Field(None, ge=1, le=365, description="Intended stay in days")
    intended_date_of_arrival: Optional[date] = None
    intended_date_of_departure: Optional[date] = None
    port_of_entry: Optional[str] = Field(None, max_length=100)
    accommodation_type: Optional[AccommodationType] = None
    processing_center: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None

    @validator('first_name', 'last_name', 'destination_country', 'passport_number', 'nationality', 'port_of_entry')
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @model_validator(mode="after")
    def check_travel_dates(self):
        arrival, departure = self.intended_date_of_arrival, self.intended_date_of_departure
        if arrival and departure and departure < arrival:
            raise ValueError('Departure date must not be before arrival date')
        return self


class ApplicationCreate(ApplicationFields):
    """New application; always starts in DRAFT"""
    visa_type: VisaType
    full_name: Optional[str] = Field(None, max_length=200, description="Split into first/last name when those are absent")

    @model_validator(mode="after")
    def split_full_name(self):
        if self.full_name and not self.first_name and not self.last_name:
            parts = self.full_name.strip().split(" ")
            self.first_name = parts[0]
            self.last_name = " ".join(parts[1:]) or None
        return self


class ApplicationUpdate(ApplicationFields):
    """Field edits; never changes the workflow status"""
    visa_type: Optional[VisaType] = None

    @field_validator("visa_type")
    @classmethod
    def visa_type_not_null(cls, v):
        if v is None:
            raise ValueError("visaType cannot be cleared")
        return v


# Staff workflow actions
class ApplicationStatusUpdate(RequestModel):
    status: ApplicationStatus
    notes: Optional[str] = None
    assigned_officer: Optional[uuid.UUID] = Field(None, description="Officer to assign in the same transition")


class ProcessingNoteCreate(RequestModel):
    note: str = Field(..., min_length=1)

    @validator('note')
    def strip_note(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Note content is required')
        return v


class OfficerAssignment(RequestModel):
    officer_id: uuid.UUID


class CostEstimationRequest(RequestModel):
    """
    Fee breakdown sent to the applicant.
    total is stored as given; it is not recomputed from the parts.
    Omitted fees fall back to the configured defaults.
    """
    processing_fee: Optional[Decimal] = Field(None, ge=0)
    biometrics_fee: Optional[Decimal] = Field(None, ge=0)
    service_fee: Optional[Decimal] = Field(None, ge=0)
    courier_fee: Optional[Decimal] = Field(None, ge=0)
    total: Optional[Decimal] = Field(None, ge=0)
    payment_deadline: Optional[date] = None


# Responses
class ProcessingNote(CamelModel):
    content: str
    created_by: str
    created_by_name: str
    created_at: str


class ApplicationResponse(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    application_number: str
    visa_type: VisaType
    status: ApplicationStatus

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    destination_country: Optional[str] = None
    passport_number: Optional[str] = None
    nationality: Optional[str] = None
    date_of_birth: Optional[date] = None
    purpose_of_visit: Optional[str] = None
    duration_of_stay: Optional[int] = None
    intended_date_of_arrival: Optional[date] = None
    intended_date_of_departure: Optional[date] = None
    port_of_entry: Optional[str] = None
    accommodation_type: Optional[AccommodationType] = None
    processing_center: Optional[str] = None
    notes: Optional[str] = None

    processing_fee: Optional[Decimal] = None
    biometrics_fee: Optional[Decimal] = None
    service_fee: Optional[Decimal] = None
    courier_fee: Optional[Decimal] = None
    total_cost: Optional[Decimal] = None
    cost_provided_at: Optional[datetime] = None
    payment_deadline: Optional[date] = None

    assigned_officer_id: Optional[uuid.UUID] = None
    assigned_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    biometrics_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    issued_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    processing_notes: Optional[List[Dict[str, Any]]] = None

    created_at: datetime
    updated_at: datetime


class ApplicationListItem(ApplicationResponse):
    user: Optional[UserSummary] = None
    assigned_officer: Optional[UserSummary] = None


class ApplicationListPayload(CamelModel):
    applications: List[ApplicationListItem]
    pagination: Optional[PaginationMeta] = None


class StatusOption(CamelModel):
    value: str
    label: str
    terminal: bool
    next_statuses: List[str]
