"""Funeral cover plans, activation, cancellation and claims"""

from dataclasses import replace
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from vema_gateway.api.dependencies import get_member_or_404, get_request_id, get_store
from vema_gateway.api.v1.schemas import (
    ActivateCoverRequest,
    BenefitSchema,
    CancelCoverRequest,
    CancelCoverResponse,
    ClaimRequest,
    ClaimResponse,
    CoverResponse,
    FuneralPlanSchema,
    PremiumQuoteRequest,
    PremiumQuoteResponse,
)
from vema_gateway.domain import funeral
from vema_gateway.domain.exceptions import InvalidStateError, NotAllowedError
from vema_gateway.domain.models import FuneralCoverMembership
from vema_gateway.infrastructure.database.repositories import (
    FuneralCoverRepository,
    UserRepository,
)
from vema_gateway.infrastructure.database.store import DocumentStore
from vema_gateway.infrastructure.observability.logging import log_operation
from vema_gateway.infrastructure.observability.metrics import (
    claim_counter,
    funeral_activation_counter,
)

router = APIRouter()


def to_cover_response(cover: FuneralCoverMembership, store_discount: Optional[int] = None) -> CoverResponse:
    return CoverResponse(
        user_id=cover.user_id,
        plan_id=cover.plan_id.value,
        plan_name=funeral.get_plan(cover.plan_id).name,
        active=cover.active,
        start_date=cover.start_date,
        monthly_premium=cover.monthly_premium,
        additional_benefits=list(cover.additional_benefits),
        total_cover=funeral.total_cover(cover.plan_id, cover.family_details),
        store_discount=store_discount,
    )


@router.get("/funeral/plans", response_model=List[FuneralPlanSchema])
def list_plans():
    return [
        FuneralPlanSchema(
            id=plan.id.value,
            name=plan.name,
            price=plan.price,
            coverage=dict(plan.coverage),
            max_children=plan.max_children,
            max_extended=plan.max_extended,
        )
        for plan in funeral.PLANS.values()
    ]


@router.get("/funeral/benefits", response_model=List[BenefitSchema])
def list_benefits():
    return [
        BenefitSchema(key=benefit.key, name=benefit.name, price=benefit.price)
        for benefit in funeral.ADDITIONAL_BENEFITS.values()
    ]


@router.post("/funeral/quote", response_model=PremiumQuoteResponse)
def quote_premium(request_body: PremiumQuoteRequest):
    """Monthly premium for a plan plus add-ons; unknown plans quote 0"""
    return PremiumQuoteResponse(
        plan_id=request_body.plan_id,
        monthly_premium=funeral.premium(request_body.plan_id, request_body.additional_benefits),
        valid_plan=funeral.get_plan(request_body.plan_id) is not None,
    )


@router.post("/funeral/cover", response_model=CoverResponse, status_code=201)
def activate_cover(
    request_body: ActivateCoverRequest,
    request: Request,
    store: DocumentStore = Depends(get_store),
):
    """
    Activate funeral cover for a member.

    Having cover raises the member's store discount tier, so the profile is
    updated in the same request.
    """
    users = UserRepository(store)
    profile = get_member_or_404(users, request_body.user_id)

    family_details = (
        [member.to_domain() for member in request_body.family_details]
        if request_body.family_details
        else None
    )
    cover = funeral.activate(
        user_id=profile.uid,
        plan_id=request_body.plan_id,
        add_ons=request_body.additional_benefits,
        family_details=family_details,
        payment_method=request_body.payment_method,
    )
    FuneralCoverRepository(store).save_cover(cover)
    profile = users.save(
        replace(
            profile,
            funeral_cover=True,
            funeral_cover_type=cover.plan_id,
            funeral_cover_since=cover.start_date,
        )
    )
    store.db.commit()

    funeral_activation_counter.labels(plan=cover.plan_id.value).inc()
    log_operation(
        get_request_id(request),
        profile.uid,
        "funeral_cover_activated",
        plan_id=cover.plan_id.value,
        monthly_premium=cover.monthly_premium,
        store_discount=profile.store_discount,
    )
    return to_cover_response(cover, profile.store_discount)


@router.get("/funeral/cover", response_model=CoverResponse)
def get_cover(
    user_id: str = Query(..., description="Member identifier"),
    store: DocumentStore = Depends(get_store),
):
    cover = FuneralCoverRepository(store).get_cover(user_id)
    if cover is None:
        raise HTTPException(status_code=404, detail="No funeral cover found")
    return to_cover_response(cover)


@router.post("/funeral/cover/cancel", response_model=CancelCoverResponse)
def cancel_cover(
    request_body: CancelCoverRequest,
    request: Request,
    store: DocumentStore = Depends(get_store),
):
    covers = FuneralCoverRepository(store)
    cover = covers.get_cover(request_body.user_id)
    if cover is None or not cover.active:
        raise InvalidStateError("No active funeral cover")

    users = UserRepository(store)
    profile = get_member_or_404(users, request_body.user_id)

    covers.save_cover(replace(cover, active=False))
    profile = users.save(
        replace(profile, funeral_cover=False, funeral_cover_type=None, funeral_cover_since=None)
    )
    store.db.commit()

    log_operation(
        get_request_id(request),
        profile.uid,
        "funeral_cover_cancelled",
        plan_id=cover.plan_id.value,
        reason=request_body.reason,
    )
    return CancelCoverResponse(
        user_id=profile.uid,
        active=False,
        store_discount=profile.store_discount,
    )


@router.post("/funeral/claims", response_model=ClaimResponse, status_code=201)
def submit_claim(
    request_body: ClaimRequest,
    request: Request,
    store: DocumentStore = Depends(get_store),
):
    """Lodge a claim once the waiting period for the cause of death has passed"""
    covers = FuneralCoverRepository(store)
    cover = covers.get_cover(request_body.user_id)
    if cover is None:
        raise InvalidStateError("No active funeral cover")

    try:
        claim = funeral.submit_claim(
            cover,
            request_body.cause_of_death,
            request_body.deceased_name,
            request_body.relationship,
        )
    except NotAllowedError:
        claim_counter.labels(outcome="waiting_period").inc()
        raise

    claim = covers.create_claim(claim)
    store.db.commit()

    claim_counter.labels(outcome="submitted").inc()
    log_operation(
        get_request_id(request),
        request_body.user_id,
        "funeral_claim_submitted",
        claim_id=claim.id,
        cause_of_death=claim.cause_of_death,
    )
    return ClaimResponse(
        claim_id=claim.id,
        status=claim.status.value,
        cause_of_death=claim.cause_of_death,
        message="Claim submitted successfully",
    )
