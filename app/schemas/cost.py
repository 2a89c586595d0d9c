"""
Cost Estimation Schemas
Read-only price table and itemized estimates produced by app.services.cost_estimator
"""

from typing import List, Optional
from decimal import Decimal

from app.models.enums import VisaType
from app.schemas.common import CamelModel


class DurationTier(CamelModel):
    days: int
    price: Decimal
    label: str


class VisaPricing(CamelModel):
    visa_type: VisaType
    description: str
    base_price: Decimal
    durations: List[DurationTier]


class CostLineItem(CamelModel):
    item: str
    amount: Decimal


class CostEstimate(CamelModel):
    visa_type: VisaType
    duration: int
    express: bool
    items: List[CostLineItem]
    subtotal: Decimal
    government_fee: Decimal
    total: Decimal
    currency: str


class CostEstimationPayload(CamelModel):
    pricing: VisaPricing
    add_ons: dict
    estimate: Optional[CostEstimate] = None
    currency: str
