"""
Biometric Appointment Model
One appointment per application; its status cascades into the application
"""

from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from app.models.base import BaseModel, EnumValueType
from app.models.enums import BiometricStatus


class BiometricAppointment(BaseModel):
    """Biometric capture appointment scheduled by staff"""
    __tablename__ = "biometric_appointments"

    application_id = Column(Uuid(as_uuid=True), ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    appointment_date = Column(DateTime(timezone=True), nullable=False, index=True)
    location = Column(String(200), nullable=False)
    status = Column(EnumValueType(BiometricStatus, 20), nullable=False, default=BiometricStatus.SCHEDULED, index=True)
    notes = Column(Text, nullable=True)

    scheduled_by = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    completed_by = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    application = relationship("Application", back_populates="biometric_appointment")
    user = relationship("User", foreign_keys=[user_id], back_populates="biometric_appointments")
    scheduled_by_user = relationship("User", foreign_keys=[scheduled_by])
    completed_by_user = relationship("User", foreign_keys=[completed_by])

    def __repr__(self):
        return f"<BiometricAppointment(date='{self.appointment_date}', status='{self.status}')>"
