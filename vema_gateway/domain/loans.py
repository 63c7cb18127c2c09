"""Loan calculator - fees, repayment totals and payment application"""

from dataclasses import replace
from datetime import datetime
from decimal import Decimal

from vema_gateway.domain.exceptions import (
    InvalidAmountError,
    InvalidApplicationError,
    InvalidStateError,
)
from vema_gateway.domain.models import LoanAccount, LoanQuote, LoanStatus
from vema_gateway.domain.validation import VALID_LOAN_TERMS
from vema_gateway.utils.date_utils import utc_now
from vema_gateway.utils.money import Number, to_decimal

INTEREST_RATE = Decimal("0.045")  # flat, on principal
SERVICE_FEE = Decimal("52.26")
INITIATION_FEE_RATE = Decimal("0.15")


def quote(principal: Number, term_months: int) -> LoanQuote:
    """
    Calculate fees and repayments for a loan.

    interest       = principal * 4.5%   (flat, not compounding)
    initiation fee = principal * 15%
    service fee    = R52.26 regardless of principal
    total          = principal + interest + service fee + initiation fee
    monthly        = total / term  (unrounded; round for display only)

    Example:
        R1000 over 2 months -> interest 45, initiation 150, total 1247.26, monthly 623.63
    """
    principal = to_decimal(principal)
    if principal <= 0:
        raise InvalidAmountError("Loan principal must be greater than 0")
    if term_months not in VALID_LOAN_TERMS:
        raise InvalidApplicationError("Invalid loan term. Choose 1, 2, or 3 months")

    interest = principal * INTEREST_RATE
    initiation_fee = principal * INITIATION_FEE_RATE
    total_repayment = principal + interest + SERVICE_FEE + initiation_fee

    return LoanQuote(
        principal=principal,
        term_months=term_months,
        interest_rate=INTEREST_RATE * 100,
        interest=interest,
        service_fee=SERVICE_FEE,
        initiation_fee=initiation_fee,
        total_repayment=total_repayment,
        monthly_repayment=total_repayment / term_months,
    )


def open_loan(
    user_id: str,
    principal: Number,
    term_months: int,
    purpose: str = "",
    now: datetime | None = None,
) -> LoanAccount:
    """Create a pending loan application carrying its quote"""
    loan_quote = quote(principal, term_months)

    return LoanAccount(
        user_id=user_id,
        principal=loan_quote.principal,
        term_months=loan_quote.term_months,
        interest_rate=loan_quote.interest_rate,
        interest=loan_quote.interest,
        service_fee=loan_quote.service_fee,
        initiation_fee=loan_quote.initiation_fee,
        total_repayment=loan_quote.total_repayment,
        monthly_repayment=loan_quote.monthly_repayment,
        remaining_balance=loan_quote.total_repayment,
        status=LoanStatus.PENDING,
        purpose=purpose,
        application_date=now or utc_now(),
    )


def approve(account: LoanAccount, now: datetime | None = None) -> LoanAccount:
    """Approve a pending loan; funds are disbursed at approval"""
    if account.status != LoanStatus.PENDING:
        raise InvalidStateError(f"Cannot approve a loan that is {account.status.value}")

    approved_at = now or utc_now()
    return replace(
        account,
        status=LoanStatus.APPROVED,
        approval_date=approved_at,
        disbursement_date=approved_at,
    )


def reject(account: LoanAccount, reason: str = "") -> LoanAccount:
    if account.status != LoanStatus.PENDING:
        raise InvalidStateError(f"Cannot reject a loan that is {account.status.value}")

    return replace(account, status=LoanStatus.REJECTED, rejection_reason=reason)


def apply_payment(account: LoanAccount, amount: Number) -> LoanAccount:
    """
    Record a repayment against an approved loan.

    The balance is clamped at zero and the loan flips to paid once settled.
    Anything paid beyond the total repayment is absorbed, not held as credit.
    """
    amount = to_decimal(amount)
    if amount <= 0:
        raise InvalidAmountError("Payment amount must be greater than 0")
    if account.status != LoanStatus.APPROVED:
        raise InvalidStateError(
            f"Payments are only accepted on approved loans (loan is {account.status.value})"
        )

    amount_paid = account.amount_paid + amount
    remaining = max(Decimal("0"), account.total_repayment - amount_paid)
    status = LoanStatus.PAID if remaining == 0 else account.status

    return replace(
        account,
        amount_paid=amount_paid,
        remaining_balance=remaining,
        status=status,
    )
