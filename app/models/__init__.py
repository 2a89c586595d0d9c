"""
Database Models for the Visa Processing System
"""

from app.models.base import Base, BaseModel
from app.models.user import User
from app.models.application import Application
from app.models.document import Document
from app.models.payment import Payment
from app.models.biometric import BiometricAppointment
from app.models.notification import Notification

__all__ = [
    "Base",
    "BaseModel",
    "User",
    "Application",
    "Document",
    "Payment",
    "BiometricAppointment",
    "Notification",
]
