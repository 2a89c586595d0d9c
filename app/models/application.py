"""
Visa Application Model
The subject of the status workflow

Features:
- 7 visa types: tourist, business, student, work, transit, family, diplomatic
- 17 workflow statuses, from DRAFT to ISSUED (see app.services.workflow)
- Fee breakdown recorded by the cost estimation transition
- Decision and processing timestamps stamped by transitions
- Officer assignment and staff processing notes
"""

from sqlalchemy import Column, String, DateTime, Date, Text, Integer, ForeignKey, Numeric, JSON, Uuid
from sqlalchemy.orm import relationship

from app.models.base import BaseModel, EnumValueType
from app.models.enums import ApplicationStatus, VisaType, AccommodationType, TERMINAL_STATUSES


class Application(BaseModel):
    """
    Visa application.
    application_number is globally unique and never changes after creation.
    """
    __tablename__ = "applications"

    # Core application information
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True, comment="Owning applicant")
    visa_type = Column(EnumValueType(VisaType, 20), nullable=False, index=True)
    application_number = Column(String(40), nullable=False, unique=True, index=True, comment="Human readable application number")
    status = Column(EnumValueType(ApplicationStatus), nullable=False, default=ApplicationStatus.DRAFT, index=True)

    # Applicant supplied details
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    destination_country = Column(String(100), nullable=True)
    passport_number = Column(String(50), nullable=True)
    nationality = Column(String(100), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    purpose_of_visit = Column(Text, nullable=True)
    duration_of_stay = Column(Integer, nullable=True, comment="Intended stay in days")
    intended_date_of_arrival = Column(Date, nullable=True)
    intended_date_of_departure = Column(Date, nullable=True)
    port_of_entry = Column(String(100), nullable=True)
    accommodation_type = Column(EnumValueType(AccommodationType, 20), nullable=True)
    processing_center = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)

    # Cost estimation
    processing_fee = Column(Numeric(10, 2), nullable=True)
    biometrics_fee = Column(Numeric(10, 2), nullable=True)
    service_fee = Column(Numeric(10, 2), nullable=True)
    courier_fee = Column(Numeric(10, 2), nullable=True)
    total_cost = Column(Numeric(10, 2), nullable=True, comment="Caller supplied total, stored verbatim")
    cost_provided_at = Column(DateTime(timezone=True), nullable=True)
    payment_deadline = Column(Date, nullable=True)

    # Assignment
    assigned_officer_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    assigned_at = Column(DateTime(timezone=True), nullable=True)

    # Workflow timestamps
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)
    biometrics_date = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    issued_at = Column(DateTime(timezone=True), nullable=True)

    # Decision details
    rejection_reason = Column(Text, nullable=True)
    processing_notes = Column(JSON, nullable=True, comment="List of staff note entries")

    # Relationships
    user = relationship("User", foreign_keys=[user_id], back_populates="applications")
    assigned_officer = relationship("User", foreign_keys=[assigned_officer_id])
    documents = relationship("Document", back_populates="application", cascade="all, delete-orphan")
    payments = relationship("Payment", back_populates="application", cascade="all, delete-orphan")
    biometric_appointment = relationship(
        "BiometricAppointment", back_populates="application", uselist=False, cascade="all, delete-orphan"
    )
    notifications = relationship("Notification", back_populates="application", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Application(number='{self.application_number}', status='{self.status}')>"

    @property
    def full_name(self) -> str:
        if self.first_name and self.last_name:
            return f"{self.first_name} {self.last_name}"
        return self.first_name or self.last_name or "N/A"

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES
