"""Funeral cover - plans, premiums, coverage and claim waiting periods"""

import math
from datetime import datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional

from vema_gateway.domain.exceptions import (
    InvalidPlanError,
    InvalidStateError,
    MissingFamilyDetailsError,
    NotAllowedError,
)
from vema_gateway.domain.models import (
    AdditionalBenefit,
    CauseOfDeath,
    FamilyMember,
    FuneralClaim,
    FuneralCoverMembership,
    FuneralPlan,
    FuneralPlanId,
)
from vema_gateway.utils.date_utils import utc_now

PLANS: Mapping[FuneralPlanId, FuneralPlan] = MappingProxyType(
    {
        FuneralPlanId.BASIC: FuneralPlan(
            id=FuneralPlanId.BASIC,
            name="Basic Plan",
            price=Decimal("99"),
            coverage=MappingProxyType(
                {
                    "mainMember": Decimal("25000"),
                    "spouse": Decimal("0"),
                    "children": Decimal("0"),
                    "extended": Decimal("0"),
                }
            ),
            max_children=0,
            max_extended=0,
        ),
        FuneralPlanId.FAMILY: FuneralPlan(
            id=FuneralPlanId.FAMILY,
            name="Family Plan",
            price=Decimal("199"),
            coverage=MappingProxyType(
                {
                    "mainMember": Decimal("50000"),
                    "spouse": Decimal("50000"),
                    "children": Decimal("15000"),
                    "extended": Decimal("0"),
                }
            ),
            max_children=5,
            max_extended=0,
        ),
        FuneralPlanId.EXTENDED: FuneralPlan(
            id=FuneralPlanId.EXTENDED,
            name="Extended Family Plan",
            price=Decimal("299"),
            coverage=MappingProxyType(
                {
                    "mainMember": Decimal("75000"),
                    "spouse": Decimal("75000"),
                    "children": Decimal("20000"),
                    "extended": Decimal("30000"),
                }
            ),
            max_children=5,
            max_extended=4,
        ),
    }
)

ADDITIONAL_BENEFITS: Mapping[str, AdditionalBenefit] = MappingProxyType(
    {
        "CHAIRS": AdditionalBenefit(key="CHAIRS", name="100 Chairs", price=Decimal("25")),
        "TOILET": AdditionalBenefit(key="TOILET", name="Mobile Toilet", price=Decimal("30")),
        "FRIDGE": AdditionalBenefit(key="FRIDGE", name="Mobile Fridge", price=Decimal("35")),
        "DECORATION": AdditionalBenefit(key="DECORATION", name="Decoration", price=Decimal("65")),
        "CATERING": AdditionalBenefit(key="CATERING", name="Catering", price=Decimal("75")),
    }
)

# Months of cover required before a claim for each cause is paid
WAITING_PERIODS: Mapping[str, int] = MappingProxyType(
    {
        CauseOfDeath.NATURAL_DEATH.value: 6,
        CauseOfDeath.ACCIDENTAL_DEATH.value: 0,
        CauseOfDeath.SUICIDE.value: 24,
    }
)
DEFAULT_WAITING_PERIOD = 6

# 30-day months, not calendar months
DAYS_PER_MONTH = 30

PLANS_WITH_DEPENDENTS = frozenset({FuneralPlanId.FAMILY, FuneralPlanId.EXTENDED})


def get_plan(plan_id: str) -> Optional[FuneralPlan]:
    try:
        return PLANS[FuneralPlanId(plan_id)]
    except ValueError:
        return None


def premium(plan_id: str, add_on_keys: Iterable[str] = ()) -> Decimal:
    """
    Monthly premium: plan price plus recognised add-on benefits.

    Unknown add-on keys are skipped. An unknown plan returns 0 so callers can
    treat it as an invalid plan without catching anything.
    """
    plan = get_plan(plan_id)
    if plan is None:
        return Decimal("0")

    total = plan.price
    for key in add_on_keys:
        benefit = ADDITIONAL_BENEFITS.get(key)
        if benefit is not None:
            total += benefit.price
    return total


def coverage_for(plan_id: str, member_category: str) -> Decimal:
    """Cover amount for mainMember, spouse, children or extended"""
    plan = get_plan(plan_id)
    if plan is None:
        return Decimal("0")
    return plan.coverage.get(member_category, Decimal("0"))


def total_cover(plan_id: str, family_details: Optional[List[FamilyMember]] = None) -> Decimal:
    """
    Total benefit across the main member and listed dependents.

    Children and extended family only count up to the plan's caps.
    """
    plan = get_plan(plan_id)
    if plan is None:
        return Decimal("0")

    members = family_details or []
    has_spouse = any(m.relationship == "spouse" for m in members)
    children = sum(1 for m in members if m.relationship == "child")
    extended = sum(1 for m in members if m.relationship == "extended")

    total = plan.coverage["mainMember"]
    if has_spouse:
        total += plan.coverage["spouse"]
    total += plan.coverage["children"] * min(children, plan.max_children)
    total += plan.coverage["extended"] * min(extended, plan.max_extended)
    return total


def activate(
    user_id: str,
    plan_id: str,
    add_ons: Iterable[str] = (),
    family_details: Optional[List[FamilyMember]] = None,
    payment_method: str = "",
    now: datetime | None = None,
) -> FuneralCoverMembership:
    """
    Start funeral cover for a member.

    Raises:
        InvalidPlanError: plan_id is not a known plan
        MissingFamilyDetailsError: family or extended plan without dependents listed
    """
    plan = get_plan(plan_id)
    if plan is None:
        raise InvalidPlanError("Invalid plan selected")

    if plan.id in PLANS_WITH_DEPENDENTS and not family_details:
        raise MissingFamilyDetailsError("Family details required for this plan")

    add_ons = tuple(add_ons)
    return FuneralCoverMembership(
        user_id=user_id,
        plan_id=plan.id,
        start_date=now or utc_now(),
        monthly_premium=premium(plan.id, add_ons),
        additional_benefits=add_ons,
        family_details=list(family_details) if family_details else None,
        payment_method=payment_method,
        active=True,
    )


def waiting_period_for(cause_of_death: str) -> int:
    return WAITING_PERIODS.get(cause_of_death, DEFAULT_WAITING_PERIOD)


def months_since_start(start_date: datetime, now: datetime | None = None) -> int:
    """Elapsed cover in 30-day months, rounded up"""
    elapsed = abs((now or utc_now()) - start_date)
    return math.ceil(elapsed.total_seconds() / (DAYS_PER_MONTH * 86400))


def is_claim_eligible(
    membership: FuneralCoverMembership,
    cause_of_death: str,
    now: datetime | None = None,
) -> bool:
    return months_since_start(membership.start_date, now) >= waiting_period_for(cause_of_death)


def submit_claim(
    membership: FuneralCoverMembership,
    cause_of_death: str,
    deceased_name: str,
    relationship: str,
    now: datetime | None = None,
) -> FuneralClaim:
    now = now or utc_now()

    if not membership.active:
        raise InvalidStateError("No active funeral cover")

    if not is_claim_eligible(membership, cause_of_death, now):
        months_required = waiting_period_for(cause_of_death)
        raise NotAllowedError(
            f"Waiting period not met. {months_required} months required for {cause_of_death}."
        )

    return FuneralClaim(
        user_id=membership.user_id,
        plan_id=membership.plan_id,
        cause_of_death=cause_of_death,
        deceased_name=deceased_name,
        relationship=relationship,
        submitted_at=now,
    )
