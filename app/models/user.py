"""
User Model for the Visa Processing System
Applicants and staff (officers, admins) share one table, distinguished by role
"""

from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.orm import relationship

from app.models.base import BaseModel, EnumValueType
from app.models.enums import UserRole, STAFF_ROLES


class User(BaseModel):
    """
    Account for applicants and staff.
    is_active gates every authenticated request.
    """
    __tablename__ = "users"

    email = Column(String(255), nullable=False, unique=True, index=True, comment="Login email")
    password_hash = Column(String(255), nullable=False, comment="bcrypt password hash")
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    role = Column(EnumValueType(UserRole, 20), nullable=False, default=UserRole.USER, index=True)

    phone_number = Column(String(30), nullable=True)
    nationality = Column(String(100), nullable=True)
    passport_number = Column(String(50), nullable=True)

    is_active = Column(Boolean, nullable=False, default=True, comment="Deactivated accounts cannot authenticate")
    is_verified = Column(Boolean, nullable=False, default=False)
    last_login = Column(DateTime(timezone=True), nullable=True)

    applications = relationship(
        "Application", foreign_keys="Application.user_id", back_populates="user",
        cascade="all, delete-orphan"
    )
    documents = relationship("Document", foreign_keys="Document.user_id", back_populates="user", cascade="all, delete-orphan")
    payments = relationship("Payment", foreign_keys="Payment.user_id", back_populates="user", cascade="all, delete-orphan")
    notifications = relationship(
        "Notification", foreign_keys="Notification.user_id", back_populates="user",
        cascade="all, delete-orphan"
    )
    biometric_appointments = relationship(
        "BiometricAppointment", foreign_keys="BiometricAppointment.user_id", back_populates="user",
        cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<User(email='{self.email}', role='{self.role}')>"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
