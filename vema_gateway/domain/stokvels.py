"""Stokvel lifecycle - type rules, dates, contributions and withdrawals"""

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Iterable, Mapping

from vema_gateway.domain.exceptions import (
    InsufficientBalanceError,
    InvalidAmountError,
    InvalidStateError,
    NotAllowedError,
)
from vema_gateway.domain.models import (
    MembershipStatus,
    Stokvel,
    StokvelDates,
    StokvelMembership,
    StokvelType,
    StokvelTypeConfig,
    WithdrawalRequest,
)
from vema_gateway.utils.date_utils import add_months, days_until, utc_now
from vema_gateway.utils.money import Number, to_decimal

STOKVEL_TYPES: Mapping[StokvelType, StokvelTypeConfig] = MappingProxyType(
    {
        StokvelType.JANUARY: StokvelTypeConfig(
            name="January Stokvel",
            type=StokvelType.JANUARY,
            duration_months=10,
            description="Save for 10 months, receive payout in January",
            payout_month=1,
        ),
        StokvelType.GROCERY: StokvelTypeConfig(
            name="Grocery Stokvel",
            type=StokvelType.GROCERY,
            duration_months=10,
            description="Save for groceries during October/November specials",
            payout_month=10,
        ),
        StokvelType.PLANNING: StokvelTypeConfig(
            name="Planning Ahead Stokvel",
            type=StokvelType.PLANNING,
            duration_months=10,
            description="Flexible stokvel for emergencies and savings",
            payout_month=None,
            allows_early_withdrawal=True,
        ),
    }
)


def get_type_config(stokvel_type: StokvelType) -> StokvelTypeConfig:
    return STOKVEL_TYPES[StokvelType(stokvel_type)]


def allows_early_withdrawal(stokvel_type: StokvelType) -> bool:
    return get_type_config(stokvel_type).allows_early_withdrawal


def dates_for(
    stokvel_type: StokvelType,
    reference_year: int | None = None,
    today: date | None = None,
) -> StokvelDates:
    """
    Derive the saving window for a stokvel type.

    - January:  Feb 1 -> Dec 1 of the reference year
    - Grocery:  Jan 1 -> Oct 1 of the reference year
    - Planning: today -> today + 10 calendar months

    The January window spans 11 months although the type declares a
    10-month duration. Kept as-is until product confirms which is right.
    """
    today = today or date.today()
    year = reference_year if reference_year is not None else today.year
    stokvel_type = StokvelType(stokvel_type)

    if stokvel_type == StokvelType.JANUARY:
        return StokvelDates(start_date=date(year, 2, 1), end_date=date(year, 12, 1))

    if stokvel_type == StokvelType.GROCERY:
        return StokvelDates(start_date=date(year, 1, 1), end_date=date(year, 10, 1))

    duration = get_type_config(stokvel_type).duration_months
    return StokvelDates(start_date=today, end_date=add_months(today, duration))


def next_contribution_date(today: date | None = None) -> date:
    """One calendar month from today"""
    return add_months(today or date.today(), 1)


def create_stokvel(
    user_id: str,
    stokvel_type: StokvelType,
    monthly_contribution: Number,
    today: date | None = None,
) -> Stokvel:
    """Build the stokvel record a new member joins"""
    monthly_contribution = to_decimal(monthly_contribution)
    if monthly_contribution <= 0:
        raise InvalidAmountError("Monthly contribution must be greater than 0")

    config = get_type_config(stokvel_type)
    dates = dates_for(config.type, today=today)

    return Stokvel(
        name=config.name,
        type=config.type,
        start_date=dates.start_date,
        end_date=dates.end_date,
        duration_months=config.duration_months,
        monthly_contribution=monthly_contribution,
        members=[user_id],
        status=MembershipStatus.ACTIVE,
    )


def new_membership(
    stokvel: Stokvel,
    today: date | None = None,
    joined_at: datetime | None = None,
) -> StokvelMembership:
    if stokvel.id is None:
        raise InvalidStateError("Stokvel must be persisted before members can join")

    return StokvelMembership(
        stokvel_id=stokvel.id,
        name=stokvel.name,
        stokvel_type=stokvel.type,
        monthly_contribution=stokvel.monthly_contribution,
        projected_payout=stokvel.monthly_contribution * stokvel.duration_months,
        balance=Decimal("0"),
        contributions_count=0,
        next_contribution_date=next_contribution_date(today),
        status=MembershipStatus.ACTIVE,
        joined_at=joined_at or utc_now(),
    )


def record_contribution(
    membership: StokvelMembership,
    amount: Number,
    today: date | None = None,
) -> StokvelMembership:
    """
    Credit a contribution to a membership.

    The next due date is always one month from today, not from the previous
    due date, so late contributions do not catch the schedule up.
    """
    amount = to_decimal(amount)
    if amount <= 0:
        raise InvalidAmountError("Contribution amount must be greater than 0")

    return replace(
        membership,
        balance=membership.balance + amount,
        contributions_count=membership.contributions_count + 1,
        next_contribution_date=next_contribution_date(today),
    )


def request_withdrawal(
    membership: StokvelMembership,
    amount: Number,
    reason: str = "",
    user_id: str = "",
    now: datetime | None = None,
) -> WithdrawalRequest:
    """
    Raise an early withdrawal request against a membership balance.

    Only Planning stokvels allow early withdrawal. The request starts pending
    and is approved outside this module.
    """
    if not allows_early_withdrawal(membership.stokvel_type):
        raise NotAllowedError("Early withdrawal not allowed for this stokvel type")

    amount = to_decimal(amount)
    if amount <= 0:
        raise InvalidAmountError("Withdrawal amount must be greater than 0")
    if amount > membership.balance:
        raise InsufficientBalanceError("Insufficient balance")

    return WithdrawalRequest(
        user_id=user_id,
        stokvel_id=membership.stokvel_id,
        amount=amount,
        reason=reason,
        requested_at=now or utc_now(),
    )


def is_contribution_due(membership: StokvelMembership, today: date | None = None) -> bool:
    if membership.next_contribution_date is None:
        return False
    return (today or date.today()) >= membership.next_contribution_date


def is_stokvel_active(stokvel: Stokvel, today: date | None = None) -> bool:
    today = today or date.today()
    return (
        stokvel.status == MembershipStatus.ACTIVE
        and stokvel.start_date <= today <= stokvel.end_date
    )


def days_until_payout(stokvel: Stokvel, today: date | None = None) -> int:
    return days_until(stokvel.end_date, today or date.today())


def total_savings(memberships: Iterable[StokvelMembership]) -> Decimal:
    """Sum of balances across a member's stokvels"""
    return sum((m.balance for m in memberships), Decimal("0"))
