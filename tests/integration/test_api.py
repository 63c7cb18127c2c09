"""Integration tests for service, loan and referral endpoints"""

import pytest
from decimal import Decimal
from fastapi.testclient import TestClient


@pytest.fixture
def loan_id(client: TestClient) -> str:
    response = client.post(
        "/v1/loans",
        json={"user_id": "member_1", "amount": 1000, "term": 2, "purpose": "Stock for spaza"},
    )
    assert response.status_code == 201
    return response.json()["loan_id"]


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "vema-gateway"}


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "vema_loan_applications_total" in response.text


def test_request_id_is_echoed(client: TestClient):
    """The request id header is returned"""
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


def test_loan_quote(client: TestClient):
    """Quote endpoint returns the fee breakdown"""
    response = client.post("/v1/loans/quote", json={"amount": 1000, "term": 2})

    assert response.status_code == 200
    data = response.json()
    assert Decimal(data["total_repayment"]) == Decimal("1247.26")
    assert Decimal(data["monthly_repayment"]) == Decimal("623.63")
    assert Decimal(data["service_fee"]) == Decimal("52.26")


def test_loan_quote_outside_offered_amounts(client: TestClient):
    """Quotes are limited to offered amounts"""
    response = client.post("/v1/loans/quote", json={"amount": 1500, "term": 2})

    assert response.status_code == 422
    assert response.json()["error"] == "InvalidApplication"


def test_apply_for_loan(client: TestClient, loan_id: str):
    """Applications are stored pending"""
    response = client.get(f"/v1/loans/{loan_id}")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "pending"
    assert data["purpose"] == "Stock for spaza"
    assert Decimal(data["remaining_balance"]) == Decimal("1247.26")
    assert data["application_date"] is not None


def test_apply_for_loan_with_invalid_term(client: TestClient):
    """Invalid terms return a structured error"""
    response = client.post("/v1/loans", json={"user_id": "member_1", "amount": 1000, "term": 6})

    assert response.status_code == 422
    body = response.json()
    assert body["error"] == "InvalidApplication"
    assert body["detail"] == "Invalid loan term. Choose 1, 2, or 3 months"


def test_loan_not_found(client: TestClient):
    """Unknown loans are 404"""
    assert client.get("/v1/loans/does-not-exist").status_code == 404
    assert client.post("/v1/loans/does-not-exist/approve").status_code == 404


def test_list_loans_for_member(client: TestClient, loan_id: str):
    """Loan listing is per member"""
    client.post("/v1/loans", json={"user_id": "member_2", "amount": 500, "term": 1})

    response = client.get("/v1/loans", params={"user_id": "member_1"})

    assert response.status_code == 200
    assert [loan["loan_id"] for loan in response.json()["loans"]] == [loan_id]


def test_repay_loan_in_full(client: TestClient, loan_id: str):
    """Approve and repay a loan to paid"""
    approved = client.post(f"/v1/loans/{loan_id}/approve")
    assert approved.status_code == 200
    assert approved.json()["status"] == "approved"
    assert approved.json()["disbursement_date"] is not None

    first = client.post(f"/v1/loans/{loan_id}/payments", json={"amount": "623.63"})
    assert first.status_code == 200
    assert Decimal(first.json()["remaining_balance"]) == Decimal("623.63")

    second = client.post(f"/v1/loans/{loan_id}/payments", json={"amount": "700"})
    assert second.status_code == 200
    assert second.json()["status"] == "paid"
    assert Decimal(second.json()["remaining_balance"]) == 0

    # Stored state matches what was returned
    assert client.get(f"/v1/loans/{loan_id}").json()["status"] == "paid"


def test_payment_on_pending_loan_conflicts(client: TestClient, loan_id: str):
    """Paying a pending loan is a conflict"""
    response = client.post(f"/v1/loans/{loan_id}/payments", json={"amount": 100})

    assert response.status_code == 409
    assert response.json()["error"] == "InvalidState"


def test_zero_payment_rejected(client: TestClient, loan_id: str):
    """Zero payments are rejected"""
    client.post(f"/v1/loans/{loan_id}/approve")

    response = client.post(f"/v1/loans/{loan_id}/payments", json={"amount": 0})

    assert response.status_code == 422
    assert response.json()["error"] == "InvalidAmount"


def test_rejected_loan_cannot_be_approved(client: TestClient, loan_id: str):
    """Rejection is final"""
    rejected = client.post(f"/v1/loans/{loan_id}/reject", json={"reason": "Incomplete documents"})
    assert rejected.json()["status"] == "rejected"
    assert rejected.json()["rejection_reason"] == "Incomplete documents"

    response = client.post(f"/v1/loans/{loan_id}/approve")
    assert response.status_code == 409


def test_referral_flow(client: TestClient):
    """Create, activate and summarise a referral"""
    created = client.post(
        "/v1/referrals",
        json={
            "referrer_id": "member_1",
            "referred_name": "Bongani Dlamini",
            "referred_email": "bongani@example.com",
            "referred_phone": "083 123 4567",
        },
    )
    assert created.status_code == 201
    referral = created.json()
    assert referral["status"] == "pending"
    assert referral["code"].startswith("VEMA")

    activated = client.post(f"/v1/referrals/{referral['referral_id']}/activate", json={"loan_amount": 2000})
    assert activated.status_code == 200
    assert Decimal(activated.json()["commission"]) == Decimal("100")

    summary = client.get("/v1/referrals", params={"user_id": "member_1"}).json()
    assert summary["total_referrals"] == 1
    assert summary["active_referrals"] == 1
    assert Decimal(summary["total_earnings"]) == Decimal("100")


def test_referral_requires_valid_contact_details(client: TestClient):
    """Referral contact details are validated"""
    response = client.post(
        "/v1/referrals",
        json={
            "referrer_id": "member_1",
            "referred_name": "Bongani",
            "referred_email": "not-an-email",
            "referred_phone": "12345",
        },
    )
    assert response.status_code == 422


def test_activate_unknown_referral(client: TestClient):
    """Unknown referrals are 404"""
    response = client.post("/v1/referrals/missing/activate", json={"loan_amount": 1000})
    assert response.status_code == 404
