"""
Payment Model for the Visa Processing System
Bookkeeping only - no gateway integration

One logical payment per application, enforced by the payment service before
insert rather than by a database constraint.
"""

from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Numeric, Uuid
from sqlalchemy.orm import relationship

from app.models.base import BaseModel, EnumValueType
from app.models.enums import PaymentStatus, PaymentMethod, Currency


class Payment(BaseModel):
    """Payment record for an application's fees"""
    __tablename__ = "payments"

    application_id = Column(Uuid(as_uuid=True), ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(EnumValueType(Currency, 3), nullable=False, default=Currency.USD)
    payment_method = Column(EnumValueType(PaymentMethod, 20), nullable=False)
    status = Column(EnumValueType(PaymentStatus, 20), nullable=False, default=PaymentStatus.PENDING, index=True)
    transaction_id = Column(String(100), nullable=True, unique=True, comment="External reference, unique when present")
    description = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    # Set only on the transition into COMPLETED
    processed_by = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    processed_at = Column(DateTime(timezone=True), nullable=True)

    application = relationship("Application", back_populates="payments")
    user = relationship("User", foreign_keys=[user_id], back_populates="payments")
    processed_by_user = relationship("User", foreign_keys=[processed_by])

    def __repr__(self):
        return f"<Payment(amount={self.amount} {self.currency}, status='{self.status}')>"
