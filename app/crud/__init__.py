"""
CRUD operations for the Visa Processing System
Imports all CRUD classes for easy access
"""

from app.crud.base import CRUDBase
from app.crud.crud_user import CRUDUser
from app.crud.crud_application import CRUDApplication, ApplicationNumberGenerator
from app.crud.crud_document import CRUDDocument
from app.crud.crud_payment import CRUDPayment
from app.crud.crud_biometric import CRUDBiometricAppointment
from app.crud.crud_notification import CRUDNotification

# Import CRUD instances
from app.crud.crud_user import user
from app.crud.crud_application import application, application_numbers
from app.crud.crud_document import document
from app.crud.crud_payment import payment
from app.crud.crud_biometric import biometric_appointment
from app.crud.crud_notification import notification
