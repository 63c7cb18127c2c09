"""Loan application policy applied before a quote is produced"""

from decimal import Decimal
from typing import FrozenSet

from vema_gateway.domain.exceptions import InvalidApplicationError
from vema_gateway.utils.money import Number, to_decimal

VALID_LOAN_AMOUNTS: FrozenSet[Decimal] = frozenset(
    {Decimal("500"), Decimal("1000"), Decimal("2000"), Decimal("3000")}
)
VALID_LOAN_TERMS: FrozenSet[int] = frozenset({1, 2, 3})


def validate_loan_application(amount: Number, term_months: int) -> None:
    """
    Gate loan applications to the offered amounts and terms.

    Raises:
        InvalidApplicationError: amount not in R500/R1000/R2000/R3000 or term not 1-3 months
    """
    if to_decimal(amount) not in VALID_LOAN_AMOUNTS:
        raise InvalidApplicationError(
            "Invalid loan amount. Choose from R500, R1000, R2000, or R3000"
        )

    if term_months not in VALID_LOAN_TERMS:
        raise InvalidApplicationError("Invalid loan term. Choose 1, 2, or 3 months")
