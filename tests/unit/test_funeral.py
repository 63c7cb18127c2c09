"""Unit tests for funeral cover plans, premiums and claim eligibility"""

import pytest
from datetime import timedelta
from decimal import Decimal
from vema_gateway.domain import funeral
from vema_gateway.domain.exceptions import (
    InvalidPlanError,
    InvalidStateError,
    MissingFamilyDetailsError,
    NotAllowedError,
)
from vema_gateway.domain.models import ClaimStatus, FamilyMember, FuneralPlanId


@pytest.fixture
def family():
    return [
        FamilyMember(name="Sipho", relationship="spouse"),
        FamilyMember(name="Lindiwe", relationship="child", age=7),
        FamilyMember(name="Gogo", relationship="extended", age=71),
    ]


def test_premium_plan_only():
    """Premium without add-ons is the plan price"""
    assert funeral.premium("basic") == Decimal("99")
    assert funeral.premium("family") == Decimal("199")
    assert funeral.premium("extended") == Decimal("299")


def test_premium_with_add_ons():
    """Add-on prices are added to the plan price"""
    assert funeral.premium("family", ["CHAIRS", "CATERING"]) == Decimal("299")


def test_premium_ignores_unknown_add_ons():
    """Unknown add-ons cost nothing"""
    assert funeral.premium("basic", ["CHAIRS", "FIREWORKS"]) == Decimal("124")


def test_premium_unknown_plan_is_zero():
    """Unknown plans have no premium"""
    assert funeral.premium("platinum", ["CHAIRS"]) == 0


def test_coverage_for():
    """Cover per member category, zero when not offered"""
    assert funeral.coverage_for("extended", "extended") == Decimal("30000")
    assert funeral.coverage_for("basic", "spouse") == 0
    assert funeral.coverage_for("family", "cousin") == 0
    assert funeral.coverage_for("platinum", "mainMember") == 0


def test_total_cover_basic_ignores_dependents(family):
    """Basic plan covers the main member only"""
    assert funeral.total_cover("basic", family) == Decimal("25000")


def test_total_cover_family(family):
    """Family plan adds spouse and child cover"""
    # main + spouse + one child; extended family not covered on this plan
    assert funeral.total_cover("family", family) == Decimal("115000")


def test_total_cover_caps_children():
    """Children beyond the plan maximum add no cover"""
    children = [FamilyMember(name=f"Child {i}", relationship="child") for i in range(7)]
    assert funeral.total_cover("family", children) == Decimal("50000") + 5 * Decimal("15000")


def test_activate_basic(now):
    """Basic cover starts active with the plan premium"""
    cover = funeral.activate("member_1", "basic", ["TOILET"], now=now)

    assert cover.plan_id == FuneralPlanId.BASIC
    assert cover.monthly_premium == Decimal("129")
    assert cover.additional_benefits == ("TOILET",)
    assert cover.start_date == now
    assert cover.active


def test_activate_unknown_plan():
    """Unknown plan ids are rejected"""
    with pytest.raises(InvalidPlanError):
        funeral.activate("member_1", "platinum")


@pytest.mark.parametrize("plan_id", ["family", "extended"])
def test_activate_family_plans_need_dependents(plan_id):
    """Family and extended plans require dependents"""
    with pytest.raises(MissingFamilyDetailsError):
        funeral.activate("member_1", plan_id, family_details=[])


def test_activate_family_plan(family):
    """Family cover keeps its dependents and add-ons"""
    cover = funeral.activate("member_1", "extended", family_details=family)
    assert cover.family_details == family
    assert cover.monthly_premium == Decimal("299")


def test_waiting_periods():
    """Waiting period per cause, six months by default"""
    assert funeral.waiting_period_for("NATURAL_DEATH") == 6
    assert funeral.waiting_period_for("ACCIDENTAL_DEATH") == 0
    assert funeral.waiting_period_for("SUICIDE") == 24
    assert funeral.waiting_period_for("UNKNOWN_CAUSE") == 6


def test_months_since_start_rounds_up(now):
    """Partial 30-day months count as whole months"""
    assert funeral.months_since_start(now, now) == 0
    assert funeral.months_since_start(now - timedelta(days=30), now) == 1
    assert funeral.months_since_start(now - timedelta(days=31), now) == 2


def test_natural_death_not_eligible_after_150_days(covered_since, now):
    """150 days is five months, short of the natural-death wait"""
    assert not funeral.is_claim_eligible(covered_since(150, now), "NATURAL_DEATH", now)


def test_natural_death_eligible_after_181_days(covered_since, now):
    """181 days rounds up to seven months"""
    assert funeral.is_claim_eligible(covered_since(181, now), "NATURAL_DEATH", now)


def test_accidental_death_covered_immediately(covered_since, now):
    """Accidental death has no waiting period"""
    assert funeral.is_claim_eligible(covered_since(0, now), "ACCIDENTAL_DEATH", now)


def test_suicide_needs_24_months(covered_since, now):
    """Suicide claims wait 24 months"""
    assert not funeral.is_claim_eligible(covered_since(365, now), "SUICIDE", now)
    assert funeral.is_claim_eligible(covered_since(720, now), "SUICIDE", now)


def test_submit_claim(covered_since, now):
    """Eligible claims are submitted"""
    claim = funeral.submit_claim(
        covered_since(200, now), "NATURAL_DEATH", "Sipho Mokoena", "spouse", now=now
    )

    assert claim.status == ClaimStatus.SUBMITTED
    assert claim.plan_id == FuneralPlanId.BASIC
    assert claim.submitted_at == now


def test_submit_claim_within_waiting_period(covered_since, now):
    """Claims inside the waiting period are not allowed"""
    with pytest.raises(NotAllowedError) as exc_info:
        funeral.submit_claim(covered_since(10, now), "NATURAL_DEATH", "Sipho", "spouse", now=now)
    assert "6 months required" in exc_info.value.message


def test_submit_claim_on_cancelled_cover(covered_since, now):
    """Cancelled cover cannot be claimed against"""
    cover = covered_since(400, now)
    cover.active = False
    with pytest.raises(InvalidStateError):
        funeral.submit_claim(cover, "ACCIDENTAL_DEATH", "Sipho", "spouse", now=now)
