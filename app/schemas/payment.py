"""
Payment Schemas for the Visa Processing System API
"""

from pydantic import Field, validator
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
import uuid

from app.models.enums import PaymentStatus, PaymentMethod, Currency, ApplicationStatus, VisaType
from app.schemas.common import CamelModel, RequestModel, PaginationMeta
from app.schemas.user import UserSummary


class PaymentCreate(RequestModel):
    application_id: uuid.UUID
    amount: Decimal = Field(..., ge=0)
    currency: Currency
    payment_method: PaymentMethod
    description: Optional[str] = Field(None, max_length=500)
    transaction_id: Optional[str] = Field(None, max_length=100)


class PaymentStatusUpdate(RequestModel):
    status: PaymentStatus
    transaction_id: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = Field(None, max_length=500)

    @validator('transaction_id')
    def transaction_id_not_blank(cls, v):
        if v is not None and not v.strip():
            raise ValueError('Transaction ID cannot be empty')
        return v.strip() if v else v


class RefundRequest(RequestModel):
    amount: Optional[Decimal] = Field(None, ge=0)
    reason: str = Field(..., min_length=1)

    @validator('reason')
    def strip_reason(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Refund reason is required')
        return v


class PaymentApplication(CamelModel):
    id: uuid.UUID
    application_number: str
    visa_type: VisaType
    status: ApplicationStatus


class PaymentResponse(CamelModel):
    id: uuid.UUID
    application_id: uuid.UUID
    user_id: uuid.UUID
    amount: Decimal
    currency: Currency
    payment_method: PaymentMethod
    status: PaymentStatus
    transaction_id: Optional[str] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    processed_by: Optional[uuid.UUID] = None
    processed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class PaymentDetail(PaymentResponse):
    application: Optional[PaymentApplication] = None
    user: Optional[UserSummary] = None


class PaymentListPayload(CamelModel):
    payments: List[PaymentDetail]
    pagination: Optional[PaginationMeta] = None


class RefundPayload(CamelModel):
    payment: PaymentResponse
    refund_amount: Decimal
    reason: str
