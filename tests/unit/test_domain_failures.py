"""Unit tests for how domain operations report failures"""

import pytest
from dataclasses import replace
from datetime import date, datetime, timezone
from decimal import Decimal
from vema_gateway.api.errors import STATUS_BY_KIND
from vema_gateway.domain import discounts, funeral, loans, orders, referrals, stokvels
from vema_gateway.domain.exceptions import DomainException, ErrorKind
from vema_gateway.domain.models import StokvelMembership, StokvelType
from vema_gateway.domain.validation import validate_loan_application

NOW = datetime(2025, 6, 15, tzinfo=timezone.utc)


def planning_membership(balance: str = "300") -> StokvelMembership:
    return StokvelMembership(
        stokvel_id="stokvel_1",
        name="Planning Stokvel",
        stokvel_type=StokvelType.PLANNING,
        monthly_contribution=Decimal("300"),
        projected_payout=Decimal("3000"),
        balance=Decimal(balance),
        contributions_count=1,
        next_contribution_date=date(2025, 7, 15),
    )


def pending_loan():
    return loans.open_loan("member_1", 1000, 2, now=NOW)


def cancelled_cover():
    return replace(funeral.activate("member_1", "basic", now=NOW), active=False)


FAILURES = [
    ("quote_zero_principal", lambda: loans.quote(0, 2), ErrorKind.INVALID_AMOUNT),
    ("quote_text_principal", lambda: loans.quote("a lot", 2), ErrorKind.INVALID_AMOUNT),
    ("quote_nan_principal", lambda: loans.quote(float("nan"), 2), ErrorKind.INVALID_AMOUNT),
    ("quote_bad_term", lambda: loans.quote(1000, 6), ErrorKind.INVALID_APPLICATION),
    ("zero_payment", lambda: loans.apply_payment(pending_loan(), 0), ErrorKind.INVALID_AMOUNT),
    ("payment_on_pending", lambda: loans.apply_payment(pending_loan(), 100), ErrorKind.INVALID_STATE),
    ("approve_rejected", lambda: loans.approve(loans.reject(pending_loan())), ErrorKind.INVALID_STATE),
    ("unoffered_amount", lambda: validate_loan_application(1500, 2), ErrorKind.INVALID_APPLICATION),
    ("infinite_amount", lambda: validate_loan_application("Infinity", 2), ErrorKind.INVALID_AMOUNT),
    (
        "zero_contribution",
        lambda: stokvels.record_contribution(planning_membership(), 0),
        ErrorKind.INVALID_AMOUNT,
    ),
    (
        "early_withdrawal_from_january",
        lambda: stokvels.request_withdrawal(
            replace(planning_membership(), stokvel_type=StokvelType.JANUARY), 100
        ),
        ErrorKind.NOT_ALLOWED,
    ),
    (
        "overdrawn_withdrawal",
        lambda: stokvels.request_withdrawal(planning_membership("100"), 500),
        ErrorKind.INSUFFICIENT_BALANCE,
    ),
    ("unknown_plan", lambda: funeral.activate("member_1", "platinum"), ErrorKind.INVALID_PLAN),
    (
        "family_plan_without_dependents",
        lambda: funeral.activate("member_1", "family"),
        ErrorKind.MISSING_FAMILY_DETAILS,
    ),
    (
        "claim_on_cancelled_cover",
        lambda: funeral.submit_claim(cancelled_cover(), "ACCIDENTAL_DEATH", "Thabo", "self"),
        ErrorKind.INVALID_STATE,
    ),
    (
        "claim_inside_waiting_period",
        lambda: funeral.submit_claim(
            funeral.activate("member_1", "basic", now=NOW), "NATURAL_DEATH", "Thabo", "self", now=NOW
        ),
        ErrorKind.NOT_ALLOWED,
    ),
    ("empty_cart", lambda: orders.create_order("member_1", [], 0, "", ""), ErrorKind.INVALID_AMOUNT),
    ("negative_commission", lambda: referrals.commission(-1), ErrorKind.INVALID_AMOUNT),
    ("text_savings", lambda: discounts.discount_percent("plenty", False), ErrorKind.INVALID_AMOUNT),
]


@pytest.mark.parametrize(
    "call, kind",
    [(call, kind) for _, call, kind in FAILURES],
    ids=[name for name, _, _ in FAILURES],
)
def test_failures_are_domain_exceptions_with_a_kind(call, kind):
    """Every rejected operation raises a DomainException carrying its ErrorKind"""
    with pytest.raises(DomainException) as exc_info:
        call()

    assert exc_info.value.kind == kind
    assert exc_info.value.message


def test_every_kind_has_an_http_status():
    """The API maps each failure kind to a client error status"""
    assert set(STATUS_BY_KIND) == set(ErrorKind)
    assert all(400 <= status < 500 for status in STATUS_BY_KIND.values())


def test_failed_payment_leaves_loan_untouched():
    """A rejected payment does not alter the account it was applied to"""
    loan = loans.approve(pending_loan(), now=NOW)

    with pytest.raises(DomainException):
        loans.apply_payment(loan, -50)

    assert loan.amount_paid == 0
    assert loan.remaining_balance == loan.total_repayment
