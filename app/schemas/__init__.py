"""
Pydantic schemas for request/response validation
"""

# Shared building blocks
from app.schemas.common import CamelModel, RequestModel, PaginationMeta, ResponseEnvelope, success_response

# User schemas
from app.schemas.user import (
    UserRegister, LoginRequest, UserAdminUpdate, UserSummary, UserResponse, AuthPayload, UserListPayload
)

# Application schemas
from app.schemas.application import (
    ApplicationCreate, ApplicationUpdate, ApplicationStatusUpdate, ProcessingNoteCreate,
    OfficerAssignment, CostEstimationRequest, ApplicationResponse, ApplicationListItem,
    ApplicationListPayload, StatusOption
)

# Related entity schemas
from app.schemas.document import DocumentStatusUpdate, DocumentResponse, DocumentDetail, DocumentListPayload
from app.schemas.payment import PaymentCreate, PaymentStatusUpdate, RefundRequest, PaymentResponse, PaymentDetail
from app.schemas.biometric import (
    BiometricScheduleRequest, BiometricStatusUpdate, BiometricReschedule,
    BiometricAppointmentResponse, BiometricAppointmentDetail
)
from app.schemas.notification import BroadcastRequest, NotificationResponse, NotificationListPayload
from app.schemas.cost import CostEstimate, CostEstimationPayload
