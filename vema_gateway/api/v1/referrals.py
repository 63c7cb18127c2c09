"""Loan referrals and referral commission"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from vema_gateway.api.dependencies import get_request_id, get_store
from vema_gateway.api.v1.schemas import (
    ReferralActivationRequest,
    ReferralListResponse,
    ReferralRequest,
    ReferralResponse,
)
from vema_gateway.domain import referrals
from vema_gateway.domain.models import Referral, ReferralStatus
from vema_gateway.infrastructure.database.repositories import ReferralRepository
from vema_gateway.infrastructure.database.store import DocumentStore
from vema_gateway.infrastructure.observability.logging import log_operation

router = APIRouter()


def to_referral_response(referral: Referral) -> ReferralResponse:
    return ReferralResponse(
        referral_id=referral.id,
        referrer_id=referral.referrer_id,
        referred_name=referral.referred_name,
        referred_email=referral.referred_email,
        referred_phone=referral.referred_phone,
        code=referral.code,
        status=referral.status.value,
        loan_amount=referral.loan_amount,
        commission=referral.commission,
        date=referral.date,
    )


@router.post("/referrals", response_model=ReferralResponse, status_code=201)
def create_referral(
    request_body: ReferralRequest,
    request: Request,
    store: DocumentStore = Depends(get_store),
):
    referral = referrals.create_referral(
        referrer_id=request_body.referrer_id,
        referred_name=request_body.referred_name,
        referred_email=request_body.referred_email,
        referred_phone=request_body.referred_phone,
    )
    referral = ReferralRepository(store).create_referral(referral)
    store.db.commit()

    log_operation(get_request_id(request), referral.referrer_id, "referral_created", referral_id=referral.id)
    return to_referral_response(referral)


@router.get("/referrals", response_model=ReferralListResponse)
def list_referrals(
    user_id: str = Query(..., description="Referrer identifier"),
    store: DocumentStore = Depends(get_store),
):
    """Referrals made by a member with their earned commission"""
    user_referrals = ReferralRepository(store).get_referrals_for_user(user_id)

    return ReferralListResponse(
        user_id=user_id,
        referrals=[to_referral_response(r) for r in user_referrals],
        total_referrals=len(user_referrals),
        active_referrals=sum(1 for r in user_referrals if r.status == ReferralStatus.ACTIVE),
        total_earnings=referrals.total_earnings(user_referrals),
    )


@router.post("/referrals/{referral_id}/activate", response_model=ReferralResponse)
def activate_referral(
    referral_id: str,
    request_body: ReferralActivationRequest,
    request: Request,
    store: DocumentStore = Depends(get_store),
):
    """Mark a referral active once the referred friend takes a loan"""
    repo = ReferralRepository(store)
    referral = repo.get_referral_by_id(referral_id)
    if referral is None:
        raise HTTPException(status_code=404, detail="Referral not found")

    referral = referrals.activate_referral(referral, request_body.loan_amount)
    repo.save(referral)
    store.db.commit()

    log_operation(
        get_request_id(request),
        referral.referrer_id,
        "referral_activated",
        referral_id=referral.id,
        commission=referral.commission,
    )
    return to_referral_response(referral)
