"""
Visa Cost Estimator
Static price table per visa type with an itemized estimate for a chosen duration

All amounts are USD. The government fee is 10% of the subtotal, rounded half up
to a whole unit.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional, Union

from app.core.exceptions import ValidationError
from app.models.enums import VisaType
from app.schemas.cost import (
    CostEstimate, CostEstimationPayload, CostLineItem, DurationTier, VisaPricing
)

CURRENCY = "USD"
GOVERNMENT_FEE_RATE = Decimal("0.10")

ADD_ON_FEES: Dict[str, Decimal] = {
    "express": Decimal("150"),
    "insurance": Decimal("50"),
    "sms_updates": Decimal("10"),
    "email_updates": Decimal("0"),
    "courier": Decimal("25"),
}


def _tiers(*rows):
    return [DurationTier(days=days, price=Decimal(price), label=label) for days, price, label in rows]


VISA_PRICING: Dict[VisaType, VisaPricing] = {
    VisaType.TOURIST: VisaPricing(
        visa_type=VisaType.TOURIST, description="Tourist Visa", base_price=Decimal("150"),
        durations=_tiers(
            (30, 150, "30 Days Single Entry"),
            (60, 250, "60 Days Single Entry"),
            (90, 350, "90 Days Single Entry"),
            (180, 500, "180 Days Multiple Entry"),
        ),
    ),
    VisaType.BUSINESS: VisaPricing(
        visa_type=VisaType.BUSINESS, description="Business Visa", base_price=Decimal("300"),
        durations=_tiers(
            (30, 300, "30 Days Business"),
            (90, 500, "90 Days Business"),
            (180, 800, "180 Days Business"),
            (365, 1200, "1 Year Business"),
        ),
    ),
    VisaType.STUDENT: VisaPricing(
        visa_type=VisaType.STUDENT, description="Student Visa", base_price=Decimal("500"),
        durations=_tiers(
            (90, 500, "3 Months Student"),
            (180, 800, "6 Months Student"),
            (365, 1200, "1 Year Student"),
            (730, 2000, "2 Years Student"),
        ),
    ),
    VisaType.WORK: VisaPricing(
        visa_type=VisaType.WORK, description="Work Visa", base_price=Decimal("1000"),
        durations=_tiers(
            (365, 1000, "1 Year Work Permit"),
            (730, 1800, "2 Years Work Permit"),
            (1095, 2500, "3 Years Work Permit"),
        ),
    ),
    VisaType.TRANSIT: VisaPricing(
        visa_type=VisaType.TRANSIT, description="Transit Visa", base_price=Decimal("100"),
        durations=_tiers(
            (2, 100, "48 Hours Transit"),
            (4, 150, "96 Hours Transit"),
        ),
    ),
    VisaType.FAMILY: VisaPricing(
        visa_type=VisaType.FAMILY, description="Family Visa", base_price=Decimal("400"),
        durations=_tiers(
            (365, 400, "1 Year Family"),
            (730, 700, "2 Years Family"),
            (1095, 1000, "3 Years Family"),
        ),
    ),
    VisaType.DIPLOMATIC: VisaPricing(
        visa_type=VisaType.DIPLOMATIC, description="Diplomatic Visa", base_price=Decimal("0"),
        durations=_tiers(
            (30, 0, "30 Days Diplomatic"),
            (90, 0, "90 Days Diplomatic"),
            (180, 0, "180 Days Diplomatic"),
            (365, 0, "1 Year Diplomatic"),
        ),
    ),
}


def parse_visa_type(visa_type: Optional[Union[str, VisaType]]) -> VisaType:
    """Resolve a visa type, listing the valid values when it is missing or unknown"""
    valid = [v.value for v in VisaType]
    if not visa_type:
        raise ValidationError("visaType query parameter is required", errors=[{"validTypes": valid}])
    try:
        return VisaType(visa_type)
    except ValueError:
        raise ValidationError(
            f"Invalid visaType: '{visa_type}'. Valid types are: {', '.join(valid)}",
            errors=[{"validTypes": valid}],
        )


def government_fee(subtotal: Decimal) -> Decimal:
    return (subtotal * GOVERNMENT_FEE_RATE).quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def estimate_cost(
    visa_type: VisaType,
    duration: Optional[int] = None,
    express: bool = False,
    insurance: bool = False,
    courier: bool = False,
) -> Optional[CostEstimate]:
    """
    Itemized estimate for one duration tier.
    Returns None when the duration does not match a tier of the visa type.
    """
    pricing = VISA_PRICING[visa_type]
    tier = next((t for t in pricing.durations if t.days == duration), None)
    if tier is None:
        return None

    items = [CostLineItem(item=f"{pricing.description} - {tier.label}", amount=tier.price)]
    if express:
        items.append(CostLineItem(item="Express Processing", amount=ADD_ON_FEES["express"]))
    if insurance:
        items.append(CostLineItem(item="Travel Insurance", amount=ADD_ON_FEES["insurance"]))
    if courier:
        items.append(CostLineItem(item="Courier Delivery", amount=ADD_ON_FEES["courier"]))

    subtotal = sum((i.amount for i in items), Decimal("0"))
    gov_fee = government_fee(subtotal)
    items.append(CostLineItem(item="Government Fee", amount=gov_fee))

    return CostEstimate(
        visa_type=visa_type,
        duration=tier.days,
        express=express,
        items=items,
        subtotal=subtotal,
        government_fee=gov_fee,
        total=subtotal + gov_fee,
        currency=CURRENCY,
    )


def build_cost_estimation(
    visa_type: Optional[str],
    duration: Optional[int] = None,
    express: bool = False,
    insurance: bool = False,
    courier: bool = False,
) -> CostEstimationPayload:
    """Price table for the visa type plus an estimate when the duration is known"""
    resolved = parse_visa_type(visa_type)
    return CostEstimationPayload(
        pricing=VISA_PRICING[resolved],
        add_ons={name: fee for name, fee in ADD_ON_FEES.items()},
        estimate=estimate_cost(resolved, duration, express, insurance, courier),
        currency=CURRENCY,
    )
