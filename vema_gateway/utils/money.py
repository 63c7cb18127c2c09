"""Currency helpers"""

from decimal import Decimal, InvalidOperation
from typing import Union

from vema_gateway.domain.exceptions import InvalidAmountError

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number) -> Decimal:
    """
    Convert a stored or user-supplied amount to Decimal.

    Floats go through str() so 52.26 stays 52.26 rather than its binary expansion.
    Text that is not a number, NaN and infinities raise InvalidAmountError.
    """
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value))
        except InvalidOperation as e:
            raise InvalidAmountError(f"Not a valid amount: {value!r}") from e

    if not amount.is_finite():
        raise InvalidAmountError(f"Not a valid amount: {value!r}")
    return amount
