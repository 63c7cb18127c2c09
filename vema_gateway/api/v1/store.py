"""Member store: products, loyalty discount, cart totals and orders"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from vema_gateway.api.dependencies import get_member_or_404, get_request_id, get_store
from vema_gateway.api.v1.schemas import (
    CartItemSchema,
    CartTotalsRequest,
    CartTotalsResponse,
    DiscountResponse,
    OrderListResponse,
    OrderRequest,
    OrderResponse,
    ProductListResponse,
    ProductSchema,
)
from vema_gateway.domain import orders
from vema_gateway.domain.discounts import discount_percent
from vema_gateway.domain.models import MemberProfile, Order
from vema_gateway.infrastructure.database.repositories import (
    OrderRepository,
    ProductRepository,
    UserRepository,
)
from vema_gateway.infrastructure.database.store import DocumentStore
from vema_gateway.infrastructure.observability.logging import log_operation
from vema_gateway.infrastructure.observability.metrics import record_order

router = APIRouter()


def member_discount(profile: MemberProfile) -> int:
    return discount_percent(profile.savings_total, profile.funeral_cover)


def to_order_response(order: Order) -> OrderResponse:
    return OrderResponse(
        order_id=order.id,
        user_id=order.user_id,
        items=[
            CartItemSchema(id=i.product_id, name=i.name, price=i.unit_price, quantity=i.quantity)
            for i in order.items
        ],
        subtotal=order.subtotal,
        discount=order.discount,
        total=order.total,
        shipping_address=order.shipping_address,
        payment_method=order.payment_method,
        status=order.status.value,
        created_at=order.created_at,
    )


@router.get("/store/products", response_model=ProductListResponse)
def list_products(
    category: Optional[str] = Query(None),
    store: DocumentStore = Depends(get_store),
):
    products = ProductRepository(store).get_products(category)
    return ProductListResponse(
        products=[
            ProductSchema(
                id=p.id,
                name=p.name,
                description=p.description,
                price=p.price,
                category=p.category,
                stock=p.stock,
                featured=p.featured,
                in_stock=p.in_stock,
            )
            for p in products
        ]
    )


@router.get("/store/discount", response_model=DiscountResponse)
def get_discount(
    user_id: str = Query(..., description="Member identifier"),
    store: DocumentStore = Depends(get_store),
):
    """Discount tier from cumulative stokvel savings and funeral cover status"""
    profile = get_member_or_404(UserRepository(store), user_id)
    return DiscountResponse(
        user_id=user_id,
        discount=member_discount(profile),
        savings_total=profile.savings_total,
        has_funeral_cover=profile.funeral_cover,
    )


@router.post("/store/cart/totals", response_model=CartTotalsResponse)
def cart_totals(request_body: CartTotalsRequest, store: DocumentStore = Depends(get_store)):
    profile = get_member_or_404(UserRepository(store), request_body.user_id)
    order_totals = orders.totals(
        [item.to_domain() for item in request_body.items],
        member_discount(profile),
    )
    return CartTotalsResponse(
        subtotal=order_totals.subtotal,
        discount_percent=order_totals.discount_percent,
        discount=order_totals.discount,
        total=order_totals.total,
    )


@router.post("/store/orders", response_model=OrderResponse, status_code=201)
def place_order(
    request_body: OrderRequest,
    request: Request,
    store: DocumentStore = Depends(get_store),
):
    """
    Place an order at the member's current discount.

    Every product must exist; stock is reduced for each (never below zero).
    """
    profile = get_member_or_404(UserRepository(store), request_body.user_id)
    percent = member_discount(profile)

    products = ProductRepository(store)
    for item in request_body.items:
        if products.get_product_by_id(item.id) is None:
            raise HTTPException(status_code=404, detail=f"Product {item.id} not found")

    order = orders.create_order(
        user_id=profile.uid,
        items=[item.to_domain() for item in request_body.items],
        discount_percent=percent,
        shipping_address=request_body.shipping_address,
        payment_method=request_body.payment_method,
    )
    order = OrderRepository(store).create_order(order)

    for item in order.items:
        products.update_stock(item.product_id, -item.quantity)
    store.db.commit()

    record_order(order.total)
    log_operation(
        get_request_id(request),
        profile.uid,
        "order_placed",
        order_id=order.id,
        subtotal=order.subtotal,
        discount_percent=percent,
        total=order.total,
    )
    return to_order_response(order)


@router.get("/store/orders", response_model=OrderListResponse)
def list_orders(
    user_id: str = Query(..., description="Member identifier"),
    store: DocumentStore = Depends(get_store),
):
    user_orders = OrderRepository(store).get_orders_for_user(user_id)
    return OrderListResponse(user_id=user_id, orders=[to_order_response(o) for o in user_orders])


@router.get("/store/orders/{order_id}", response_model=OrderResponse)
def get_order(order_id: str, store: DocumentStore = Depends(get_store)):
    order = OrderRepository(store).get_order_by_id(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return to_order_response(order)
