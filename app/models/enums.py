"""
Shared Enums for the Visa Processing System
Standardized enumerations used across models, schemas and the workflow engine
"""

from enum import Enum as PythonEnum


class UserRole(str, PythonEnum):
    """Account roles"""
    USER = "user"           # Applicant
    OFFICER = "officer"     # Processing officer
    ADMIN = "admin"         # Administrator


STAFF_ROLES = frozenset({UserRole.ADMIN, UserRole.OFFICER})


class VisaType(str, PythonEnum):
    """Visa categories"""
    TOURIST = "tourist"
    BUSINESS = "business"
    STUDENT = "student"
    WORK = "work"
    TRANSIT = "transit"
    FAMILY = "family"
    DIPLOMATIC = "diplomatic"


class ApplicationStatus(str, PythonEnum):
    """
    Canonical application workflow status.
    Every value the workflow writes is declared here; see app.services.workflow
    for the legal edges between them.
    """
    DRAFT = "draft"                                 # Being prepared by the applicant
    SUBMITTED = "submitted"                         # Submitted, awaiting review
    UNDER_REVIEW = "under_review"                   # Being reviewed by staff
    DOCUMENTS_REQUIRED = "documents_required"       # Review found missing documents
    DOCUMENTS_REQUESTED = "documents_requested"     # Documents re-requested after a cancelled biometric appointment
    COST_PROVIDED = "cost_provided"                 # Fee breakdown sent to applicant
    PAYMENT_PENDING = "payment_pending"             # Payment record created, not yet confirmed
    PAYMENT_COMPLETED = "payment_completed"         # Payment confirmed by staff
    BIOMETRICS_SCHEDULED = "biometrics_scheduled"   # Biometric appointment booked
    BIOMETRICS_COMPLETED = "biometrics_completed"   # Biometrics captured
    EMBASSY_SUBMITTED = "embassy_submitted"         # Handed over to the embassy
    PROCESSING = "processing"                       # Being processed by the embassy
    APPROVED = "approved"                           # Visa approved
    REJECTED = "rejected"                           # Terminal
    COMPLETED = "completed"                         # Terminal - processing finished
    ISSUED = "issued"                               # Terminal - visa issued
    CANCELLED = "cancelled"                         # Terminal - withdrawn


TERMINAL_STATUSES = frozenset({
    ApplicationStatus.REJECTED,
    ApplicationStatus.COMPLETED,
    ApplicationStatus.ISSUED,
    ApplicationStatus.CANCELLED,
})


class AccommodationType(str, PythonEnum):
    HOTEL = "hotel"
    HOSTEL = "hostel"
    RENTED = "rented"
    FRIEND_RELATIVE = "friend_relative"
    OWN_PROPERTY = "own_property"
    OTHER = "other"


class DocumentType(str, PythonEnum):
    """Supporting document categories"""
    PASSPORT = "passport"
    PASSPORT_PHOTO = "passport_photo"
    PASSPORT_COPY = "passport_copy"
    PHOTO = "photo"
    ID_CARD = "id_card"
    BIRTH_CERTIFICATE = "birth_certificate"
    MARRIAGE_CERTIFICATE = "marriage_certificate"
    EMPLOYMENT_LETTER = "employment_letter"
    BANK_STATEMENT = "bank_statement"
    TRAVEL_INSURANCE = "travel_insurance"
    TRAVEL_ITINERARY = "travel_itinerary"
    FLIGHT_ITINERARY = "flight_itinerary"
    HOTEL_BOOKING = "hotel_booking"
    INVITATION_LETTER = "invitation_letter"
    INSURANCE_POLICY = "insurance_policy"
    EDUCATIONAL_CERTIFICATE = "educational_certificate"
    OTHER = "other"


class DocumentStatus(str, PythonEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class PaymentStatus(str, PythonEnum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(str, PythonEnum):
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    BANK_TRANSFER = "bank_transfer"
    PAYPAL = "paypal"
    CASH = "cash"


class Currency(str, PythonEnum):
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    AED = "AED"
    CAD = "CAD"
    AUD = "AUD"


class BiometricStatus(str, PythonEnum):
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"
    RESCHEDULED = "rescheduled"


class NotificationType(str, PythonEnum):
    """Closed set of notification categories"""
    APPLICATION_STATUS_UPDATE = "application_status_update"
    DOCUMENT_REQUEST = "document_request"
    PAYMENT_REMINDER = "payment_reminder"
    BIOMETRICS_SCHEDULED = "biometrics_scheduled"
    BIOMETRICS_REMINDER = "biometrics_reminder"
    BIOMETRICS_RESCHEDULED = "biometrics_rescheduled"
    APPLICATION_APPROVED = "application_approved"
    APPLICATION_REJECTED = "application_rejected"
    DOCUMENT_APPROVED = "document_approved"
    DOCUMENT_REJECTED = "document_rejected"
    PAYMENT_COMPLETED = "payment_completed"
    COST_ESTIMATION = "cost_estimation"
    ASSIGNMENT = "assignment"
    FAREWELL = "farewell"
    GENERAL_ANNOUNCEMENT = "general_announcement"
    SYSTEM_NOTIFICATION = "system_notification"


NOTIFICATION_TYPE_LABELS = {
    NotificationType.APPLICATION_STATUS_UPDATE: "Application Update",
    NotificationType.DOCUMENT_REQUEST: "Document Request",
    NotificationType.PAYMENT_REMINDER: "Payment Reminder",
    NotificationType.BIOMETRICS_SCHEDULED: "Biometrics Scheduled",
    NotificationType.BIOMETRICS_REMINDER: "Biometrics Reminder",
    NotificationType.BIOMETRICS_RESCHEDULED: "Biometrics Rescheduled",
    NotificationType.APPLICATION_APPROVED: "Application Approved",
    NotificationType.APPLICATION_REJECTED: "Application Rejected",
    NotificationType.DOCUMENT_APPROVED: "Document Approved",
    NotificationType.DOCUMENT_REJECTED: "Document Rejected",
    NotificationType.PAYMENT_COMPLETED: "Payment Completed",
    NotificationType.COST_ESTIMATION: "Cost Estimation",
    NotificationType.ASSIGNMENT: "Assignment",
    NotificationType.FAREWELL: "Application Complete",
    NotificationType.GENERAL_ANNOUNCEMENT: "Announcement",
    NotificationType.SYSTEM_NOTIFICATION: "System Notification",
}


class NotificationStatus(str, PythonEnum):
    UNREAD = "unread"
    READ = "read"
    ARCHIVED = "archived"


class NotificationPriority(str, PythonEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"
