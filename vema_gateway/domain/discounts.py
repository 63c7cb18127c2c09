"""Store discount tiers derived from savings and funeral cover"""

from decimal import Decimal
from typing import Tuple

from vema_gateway.utils.money import Number, to_decimal

# (minimum cumulative savings, discount percent), highest threshold first
TIERS_WITHOUT_COVER: Tuple[Tuple[Decimal, int], ...] = (
    (Decimal("10000"), 25),
    (Decimal("5000"), 10),
)
TIERS_WITH_COVER: Tuple[Tuple[Decimal, int], ...] = (
    (Decimal("10000"), 30),
    (Decimal("5000"), 20),
)


def discount_percent(cumulative_savings: Number, has_funeral_cover: bool) -> int:
    """
    Map a member's savings and cover status to a store discount.

    Derived state: recompute whenever savings or cover status change instead
    of trusting a stored value.
    """
    savings = to_decimal(cumulative_savings)
    tiers = TIERS_WITH_COVER if has_funeral_cover else TIERS_WITHOUT_COVER

    for threshold, percent in tiers:
        if savings >= threshold:
            return percent
    return 0
