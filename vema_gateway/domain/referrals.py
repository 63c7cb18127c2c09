"""Referral commission and referral lifecycle"""

import secrets
import string
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Iterable

from vema_gateway.domain.exceptions import InvalidAmountError
from vema_gateway.domain.models import Referral, ReferralStatus
from vema_gateway.utils.date_utils import utc_now
from vema_gateway.utils.money import Number, to_decimal

COMMISSION_RATE = Decimal("0.05")
REFERRAL_CODE_PREFIX = "VEMA"
_CODE_ALPHABET = string.ascii_uppercase + string.digits


def commission(referred_loan_amount: Number) -> Decimal:
    """5% of the referred loan's principal"""
    amount = to_decimal(referred_loan_amount)
    if amount < 0:
        raise InvalidAmountError("Referred loan amount cannot be negative")
    return amount * COMMISSION_RATE


def generate_referral_code() -> str:
    return REFERRAL_CODE_PREFIX + "".join(secrets.choice(_CODE_ALPHABET) for _ in range(8))


def create_referral(
    referrer_id: str,
    referred_name: str,
    referred_email: str,
    referred_phone: str,
    now: datetime | None = None,
) -> Referral:
    return Referral(
        referrer_id=referrer_id,
        referred_name=referred_name,
        referred_email=referred_email,
        referred_phone=referred_phone,
        code=generate_referral_code(),
        date=now or utc_now(),
    )


def activate_referral(referral: Referral, loan_amount: Number = 0) -> Referral:
    """Mark a referral active; commission is earned once a loan amount is known"""
    amount = to_decimal(loan_amount)
    if amount <= 0:
        return replace(referral, status=ReferralStatus.ACTIVE)

    return replace(
        referral,
        status=ReferralStatus.ACTIVE,
        loan_amount=amount,
        commission=commission(amount),
    )


def total_earnings(referrals: Iterable[Referral]) -> Decimal:
    return sum((r.commission for r in referrals), Decimal("0"))
