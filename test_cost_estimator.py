#!/usr/bin/env python3
"""
Cost Estimator Tests
"""

from decimal import Decimal

import pytest

from app.core.exceptions import ValidationError
from app.models.enums import VisaType
from app.services.cost_estimator import (
    VISA_PRICING, build_cost_estimation, estimate_cost, government_fee, parse_visa_type
)


def test_every_visa_type_is_priced():
    assert set(VISA_PRICING) == set(VisaType)


def test_government_fee_rounds_half_up():
    assert government_fee(Decimal("150")) == Decimal("15")
    assert government_fee(Decimal("325")) == Decimal("33")
    assert government_fee(Decimal("0")) == Decimal("0")


def test_tourist_30_days():
    estimate = estimate_cost(VisaType.TOURIST, 30)
    assert estimate.subtotal == Decimal("150")
    assert estimate.government_fee == Decimal("15")
    assert estimate.total == Decimal("165")
    assert estimate.currency == "USD"
    assert [item.item for item in estimate.items][-1] == "Government Fee"


def test_add_ons_are_included_before_government_fee():
    estimate = estimate_cost(VisaType.TOURIST, 30, express=True, insurance=True, courier=True)
    # 150 + 150 + 50 + 25
    assert estimate.subtotal == Decimal("375")
    assert estimate.government_fee == Decimal("38")
    assert estimate.total == Decimal("413")


def test_unknown_duration_has_no_estimate():
    assert estimate_cost(VisaType.BUSINESS, 45) is None
    payload = build_cost_estimation("business", 45)
    assert payload.estimate is None
    assert payload.pricing.visa_type == VisaType.BUSINESS


def test_diplomatic_visa_estimate_is_free():
    estimate = estimate_cost(VisaType.DIPLOMATIC, 90)
    assert estimate is not None
    assert estimate.total == Decimal("0")


@pytest.mark.parametrize("value", [None, "", "space"])
def test_invalid_visa_type_lists_valid_types(value):
    with pytest.raises(ValidationError) as exc_info:
        parse_visa_type(value)
    assert exc_info.value.errors[0]["validTypes"] == [v.value for v in VisaType]
