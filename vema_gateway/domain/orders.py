"""Order totals for store checkouts"""

from datetime import datetime
from decimal import Decimal
from typing import List, Sequence

from vema_gateway.domain.exceptions import InvalidAmountError
from vema_gateway.domain.models import CartItem, Order, OrderStatus, OrderTotals
from vema_gateway.utils.date_utils import utc_now


def totals(items: Sequence[CartItem], discount_percent: int = 0) -> OrderTotals:
    """
    subtotal = sum(unit_price * quantity)
    discount = subtotal * discount_percent / 100
    total    = subtotal - discount

    Items are assumed valid (quantity >= 1, unit_price >= 0).
    """
    subtotal = sum((item.total for item in items), Decimal("0"))
    discount = subtotal * Decimal(discount_percent) / 100

    return OrderTotals(
        subtotal=subtotal,
        discount_percent=discount_percent,
        discount=discount,
        total=subtotal - discount,
    )


def create_order(
    user_id: str,
    items: List[CartItem],
    discount_percent: int,
    shipping_address: str,
    payment_method: str,
    now: datetime | None = None,
) -> Order:
    if not items:
        raise InvalidAmountError("Cart is empty")

    order_totals = totals(items, discount_percent)
    return Order(
        user_id=user_id,
        items=list(items),
        subtotal=order_totals.subtotal,
        discount=order_totals.discount,
        total=order_totals.total,
        shipping_address=shipping_address,
        payment_method=payment_method,
        created_at=now or utc_now(),
        status=OrderStatus.PROCESSING,
    )
