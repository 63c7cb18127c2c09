"""Integration tests for stokvel, funeral cover and store endpoints"""

import pytest
from decimal import Decimal
from fastapi.testclient import TestClient
from vema_gateway.domain.models import MemberProfile, Product
from vema_gateway.infrastructure.database.repositories import ProductRepository
from vema_gateway.infrastructure.database.store import DocumentStore


def join(client: TestClient, stokvel_type: str, monthly_contribution: int = 500) -> str:
    response = client.post(
        "/v1/stokvels/join",
        json={"user_id": "member_1", "stokvel_type": stokvel_type, "monthly_contribution": monthly_contribution},
    )
    assert response.status_code == 201
    return response.json()["stokvel"]["stokvel_id"]


def contribute(client: TestClient, stokvel_id: str, amount) -> dict:
    response = client.post(
        f"/v1/stokvels/{stokvel_id}/contributions",
        json={"user_id": "member_1", "amount": amount, "payment_method": "eft"},
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def products(store: DocumentStore):
    repo = ProductRepository(store)
    repo.create_product(Product(id="rice", name="Rice 10kg", price=Decimal("100"), category="groceries", stock=5))
    repo.create_product(Product(id="oil", name="Cooking oil", price=Decimal("50"), category="groceries", stock=1))
    repo.create_product(Product(id="pot", name="Potjie pot", price=Decimal("450"), category="kitchen", stock=3))
    store.db.commit()


def test_stokvel_types(client: TestClient):
    """Stokvel types are listed with their rules"""
    response = client.get("/v1/stokvels/types")

    assert response.status_code == 200
    types = {t["type"]: t for t in response.json()}
    assert set(types) == {"January", "Grocery", "Planning"}
    assert types["Planning"]["allows_early_withdrawal"] is True
    assert types["January"]["payout_month"] == 1


def test_join_stokvel_by_label(client: TestClient, member: MemberProfile):
    """Free-text type labels resolve to a stokvel type"""
    response = client.post(
        "/v1/stokvels/join",
        json={"user_id": "member_1", "stokvel_type": "Planning Ahead Stokvel", "monthly_contribution": 300},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["stokvel"]["type"] == "Planning"
    assert data["stokvel"]["members"] == ["member_1"]
    assert Decimal(data["membership"]["balance"]) == 0
    assert Decimal(data["membership"]["projected_payout"]) == Decimal("3000")

    listed = client.get("/v1/stokvels", params={"user_id": "member_1"}).json()
    assert [m["stokvel_id"] for m in listed["stokvels"]] == [data["stokvel"]["stokvel_id"]]


def test_join_unknown_stokvel_type(client: TestClient, member: MemberProfile):
    """Unknown type labels fail validation"""
    response = client.post(
        "/v1/stokvels/join",
        json={"user_id": "member_1", "stokvel_type": "Holiday", "monthly_contribution": 300},
    )
    assert response.status_code == 422


def test_join_requires_member_profile(client: TestClient):
    """Joining requires an existing member"""
    response = client.post(
        "/v1/stokvels/join",
        json={"user_id": "nobody", "stokvel_type": "January", "monthly_contribution": 300},
    )
    assert response.status_code == 404


def test_contribution_updates_savings_and_discount(client: TestClient, member: MemberProfile):
    """Contributions raise savings and the store discount"""
    stokvel_id = join(client, "January")

    first = contribute(client, stokvel_id, 4000)
    assert first["store_discount"] == 0

    # The discount follows the savings total including this contribution
    second = contribute(client, stokvel_id, 1000)
    assert Decimal(second["new_balance"]) == Decimal("5000")
    assert Decimal(second["savings_total"]) == Decimal("5000")
    assert second["store_discount"] == 10
    assert second["membership"]["contributions_count"] == 2

    history = client.get(f"/v1/stokvels/{stokvel_id}/contributions", params={"user_id": "member_1"}).json()
    assert len(history["contributions"]) == 2

    summary = client.get("/v1/stokvels", params={"user_id": "member_1"}).json()
    assert Decimal(summary["total_savings"]) == Decimal("5000")
    assert summary["store_discount"] == 10


def test_contribution_must_be_positive(client: TestClient, member: MemberProfile):
    """Zero contributions are rejected"""
    stokvel_id = join(client, "Grocery")

    response = client.post(
        f"/v1/stokvels/{stokvel_id}/contributions",
        json={"user_id": "member_1", "amount": 0},
    )

    assert response.status_code == 422
    assert response.json()["error"] == "InvalidAmount"


def test_contribution_to_stokvel_not_joined(client: TestClient, member: MemberProfile):
    """Contributing to a stokvel not joined is 404"""
    response = client.post(
        "/v1/stokvels/other/contributions",
        json={"user_id": "member_1", "amount": 100},
    )
    assert response.status_code == 404


def test_early_withdrawal_from_planning_stokvel(client: TestClient, member: MemberProfile):
    """Planning stokvels accept withdrawal requests"""
    stokvel_id = join(client, "Planning")
    contribute(client, stokvel_id, 800)

    response = client.post(
        f"/v1/stokvels/{stokvel_id}/withdrawals",
        json={"user_id": "member_1", "amount": 500, "reason": "Hospital bill"},
    )

    assert response.status_code == 201
    assert response.json()["status"] == "pending"


def test_early_withdrawal_not_allowed_for_january(client: TestClient, member: MemberProfile):
    """January stokvels refuse withdrawal requests"""
    stokvel_id = join(client, "January")
    contribute(client, stokvel_id, 800)

    response = client.post(
        f"/v1/stokvels/{stokvel_id}/withdrawals",
        json={"user_id": "member_1", "amount": 100},
    )

    assert response.status_code == 403
    assert response.json()["error"] == "NotAllowed"


def test_withdrawal_exceeding_balance(client: TestClient, member: MemberProfile):
    """Withdrawals cannot exceed the balance"""
    stokvel_id = join(client, "Planning")
    contribute(client, stokvel_id, 200)

    response = client.post(
        f"/v1/stokvels/{stokvel_id}/withdrawals",
        json={"user_id": "member_1", "amount": 500},
    )

    assert response.status_code == 422
    assert response.json()["error"] == "InsufficientBalance"


def test_funeral_catalogue(client: TestClient):
    """Plans and add-on benefits are listed"""
    plans = client.get("/v1/funeral/plans").json()
    assert [p["id"] for p in plans] == ["basic", "family", "extended"]

    benefits = client.get("/v1/funeral/benefits").json()
    assert {b["key"] for b in benefits} == {"CHAIRS", "TOILET", "FRIDGE", "DECORATION", "CATERING"}

    quote = client.post("/v1/funeral/quote", json={"plan_id": "family", "additional_benefits": ["FRIDGE"]}).json()
    assert Decimal(quote["monthly_premium"]) == Decimal("234")
    assert quote["valid_plan"] is True

    unknown = client.post("/v1/funeral/quote", json={"plan_id": "gold"}).json()
    assert Decimal(unknown["monthly_premium"]) == 0
    assert unknown["valid_plan"] is False


def test_activate_cover_raises_discount(client: TestClient, member: MemberProfile):
    """Funeral cover moves the member to the covered discount tier"""
    stokvel_id = join(client, "January")
    contribute(client, stokvel_id, 6000)

    response = client.post(
        "/v1/funeral/cover",
        json={"user_id": "member_1", "plan_id": "basic", "additional_benefits": ["CHAIRS"]},
    )

    assert response.status_code == 201
    data = response.json()
    assert Decimal(data["monthly_premium"]) == Decimal("124")
    assert Decimal(data["total_cover"]) == Decimal("25000")
    assert data["store_discount"] == 20

    discount = client.get("/v1/store/discount", params={"user_id": "member_1"}).json()
    assert discount["discount"] == 20
    assert discount["has_funeral_cover"] is True


def test_family_plan_needs_family_details(client: TestClient, member: MemberProfile):
    """Family plan without dependents is rejected"""
    response = client.post("/v1/funeral/cover", json={"user_id": "member_1", "plan_id": "family"})

    assert response.status_code == 422
    assert response.json()["error"] == "MissingFamilyDetails"


def test_family_plan_with_dependents(client: TestClient, member: MemberProfile):
    """Family plan with dependents is activated"""
    response = client.post(
        "/v1/funeral/cover",
        json={
            "user_id": "member_1",
            "plan_id": "family",
            "family_details": [
                {"name": "Sipho", "relationship": "spouse", "id_number": "8001015009087"},
                {"name": "Ayanda", "relationship": "child", "age": 6},
            ],
        },
    )

    assert response.status_code == 201
    assert Decimal(response.json()["total_cover"]) == Decimal("115000")

    stored = client.get("/v1/funeral/cover", params={"user_id": "member_1"}).json()
    assert stored["plan_id"] == "family"
    assert stored["active"] is True


def test_unknown_plan(client: TestClient, member: MemberProfile):
    """Unknown plans are rejected"""
    response = client.post("/v1/funeral/cover", json={"user_id": "member_1", "plan_id": "gold"})

    assert response.status_code == 422
    assert response.json()["error"] == "InvalidPlan"


def test_claims_respect_waiting_period(client: TestClient, member: MemberProfile):
    """Natural-death claims wait, accidental-death claims do not"""
    client.post("/v1/funeral/cover", json={"user_id": "member_1", "plan_id": "basic"})

    natural = client.post(
        "/v1/funeral/claims",
        json={"user_id": "member_1", "cause_of_death": "NATURAL_DEATH", "deceased_name": "Thandi Mokoena"},
    )
    assert natural.status_code == 403
    assert "6 months required" in natural.json()["detail"]

    accidental = client.post(
        "/v1/funeral/claims",
        json={"user_id": "member_1", "cause_of_death": "ACCIDENTAL_DEATH", "deceased_name": "Thandi Mokoena"},
    )
    assert accidental.status_code == 201
    assert accidental.json()["status"] == "submitted"


def test_claim_without_cover(client: TestClient, member: MemberProfile):
    """Claims need active cover"""
    response = client.post(
        "/v1/funeral/claims",
        json={"user_id": "member_1", "cause_of_death": "ACCIDENTAL_DEATH", "deceased_name": "Thandi"},
    )
    assert response.status_code == 409


def test_cancel_cover_lowers_discount(client: TestClient, member: MemberProfile):
    """Cancelling cover drops the covered discount"""
    stokvel_id = join(client, "January")
    contribute(client, stokvel_id, 10000)
    client.post("/v1/funeral/cover", json={"user_id": "member_1", "plan_id": "basic"})
    assert client.get("/v1/store/discount", params={"user_id": "member_1"}).json()["discount"] == 30

    response = client.post("/v1/funeral/cover/cancel", json={"user_id": "member_1", "reason": "Moved provider"})

    assert response.status_code == 200
    assert response.json()["store_discount"] == 25
    assert client.get("/v1/funeral/cover", params={"user_id": "member_1"}).json()["active"] is False

    again = client.post("/v1/funeral/cover/cancel", json={"user_id": "member_1"})
    assert again.status_code == 409


def test_products_by_category(client: TestClient, products):
    """Products filter by category"""
    response = client.get("/v1/store/products", params={"category": "groceries"})

    assert response.status_code == 200
    assert [p["id"] for p in response.json()["products"]] == ["oil", "rice"]


def test_cart_totals_apply_member_discount(client: TestClient, member: MemberProfile):
    """Cart totals use the member's discount"""
    stokvel_id = join(client, "Grocery")
    contribute(client, stokvel_id, 5000)

    response = client.post(
        "/v1/store/cart/totals",
        json={
            "user_id": "member_1",
            "items": [
                {"id": "rice", "name": "Rice 10kg", "price": 100, "quantity": 2},
                {"id": "oil", "name": "Cooking oil", "price": 50, "quantity": 1},
            ],
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert Decimal(data["subtotal"]) == Decimal("250")
    assert data["discount_percent"] == 10
    assert Decimal(data["discount"]) == Decimal("25")
    assert Decimal(data["total"]) == Decimal("225")


def test_cart_item_quantity_must_be_positive(client: TestClient, member: MemberProfile):
    """Cart quantities must be at least one"""
    response = client.post(
        "/v1/store/cart/totals",
        json={"user_id": "member_1", "items": [{"id": "rice", "price": 100, "quantity": 0}]},
    )
    assert response.status_code == 422


def test_place_order(client: TestClient, member: MemberProfile, products):
    """Orders reduce stock and are listed for the member"""
    response = client.post(
        "/v1/store/orders",
        json={
            "user_id": "member_1",
            "items": [
                {"id": "rice", "name": "Rice 10kg", "price": 100, "quantity": 2},
                {"id": "oil", "name": "Cooking oil", "price": 50, "quantity": 3},
            ],
            "shipping_address": "12 Vilakazi St, Soweto",
            "payment_method": "card",
        },
    )

    assert response.status_code == 201
    order = response.json()
    assert order["status"] == "processing"
    assert Decimal(order["total"]) == Decimal("350")

    stock = {p["id"]: p for p in client.get("/v1/store/products").json()["products"]}
    assert stock["rice"]["stock"] == 3
    assert stock["oil"]["stock"] == 0
    assert stock["oil"]["in_stock"] is False

    assert client.get(f"/v1/store/orders/{order['order_id']}").status_code == 200
    listed = client.get("/v1/store/orders", params={"user_id": "member_1"}).json()
    assert [o["order_id"] for o in listed["orders"]] == [order["order_id"]]


def test_empty_order_rejected(client: TestClient, member: MemberProfile):
    """Empty orders are rejected"""
    response = client.post("/v1/store/orders", json={"user_id": "member_1", "items": []})

    assert response.status_code == 422
    assert response.json()["error"] == "InvalidAmount"


def test_order_not_found(client: TestClient):
    """Unknown orders are 404"""
    assert client.get("/v1/store/orders/missing").status_code == 404


def test_order_with_unknown_product_rejected(client: TestClient, member: MemberProfile, products):
    """Orders naming a product the store does not carry are refused before anything is written"""
    response = client.post(
        "/v1/store/orders",
        json={
            "user_id": "member_1",
            "items": [
                {"id": "rice", "name": "Rice 10kg", "price": 100, "quantity": 1},
                {"id": "gold", "name": "Gold bar", "price": 1, "quantity": 1},
            ],
        },
    )

    assert response.status_code == 404
    assert client.get("/v1/store/orders", params={"user_id": "member_1"}).json()["orders"] == []
    stock = {p["id"]: p["stock"] for p in client.get("/v1/store/products").json()["products"]}
    assert stock["rice"] == 5
