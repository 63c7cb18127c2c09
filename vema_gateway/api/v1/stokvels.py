"""Stokvel types, joining, contributions and early withdrawals"""

from dataclasses import replace
from typing import List, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from vema_gateway.api.dependencies import get_member_or_404, get_request_id, get_store
from vema_gateway.api.v1.schemas import (
    ContributionHistoryResponse,
    ContributionRequest,
    ContributionResponse,
    ContributionSchema,
    JoinStokvelRequest,
    JoinStokvelResponse,
    MembershipSchema,
    MemberStokvelsResponse,
    StokvelResponse,
    StokvelTypeSchema,
    WithdrawalRequestBody,
    WithdrawalResponse,
)
from vema_gateway.domain import stokvels
from vema_gateway.domain.exceptions import DomainException
from vema_gateway.domain.models import (
    Contribution,
    MemberProfile,
    Stokvel,
    StokvelMembership,
)
from vema_gateway.infrastructure.database.repositories import StokvelRepository, UserRepository
from vema_gateway.infrastructure.database.store import DocumentStore
from vema_gateway.infrastructure.observability.logging import log_operation
from vema_gateway.infrastructure.observability.metrics import (
    record_contribution,
    withdrawal_request_counter,
)
from vema_gateway.utils.date_utils import utc_now

router = APIRouter()


def to_stokvel_response(stokvel: Stokvel) -> StokvelResponse:
    return StokvelResponse(
        stokvel_id=stokvel.id,
        name=stokvel.name,
        type=stokvel.type.value,
        manager=stokvel.manager,
        start_date=stokvel.start_date,
        end_date=stokvel.end_date,
        duration_months=stokvel.duration_months,
        monthly_contribution=stokvel.monthly_contribution,
        members=stokvel.members,
        status=stokvel.status.value,
        days_until_payout=stokvels.days_until_payout(stokvel),
        active=stokvels.is_stokvel_active(stokvel),
    )


def to_membership_schema(membership: StokvelMembership) -> MembershipSchema:
    return MembershipSchema(
        stokvel_id=membership.stokvel_id,
        name=membership.name,
        type=membership.stokvel_type.value,
        balance=membership.balance,
        monthly_contribution=membership.monthly_contribution,
        contributions_count=membership.contributions_count,
        next_contribution_date=membership.next_contribution_date,
        status=membership.status.value,
        projected_payout=membership.projected_payout,
        contribution_due=stokvels.is_contribution_due(membership),
    )


def _get_membership_or_404(
    users: UserRepository, user_id: str, stokvel_id: str
) -> Tuple[MemberProfile, StokvelMembership]:
    profile = get_member_or_404(users, user_id)
    for membership in profile.stokvels:
        if membership.stokvel_id == stokvel_id:
            return profile, membership
    raise HTTPException(status_code=404, detail="Not a member of this stokvel")


@router.get("/stokvels/types", response_model=List[StokvelTypeSchema])
def list_stokvel_types():
    return [
        StokvelTypeSchema(
            name=config.name,
            type=config.type.value,
            duration_months=config.duration_months,
            description=config.description,
            payout_month=config.payout_month,
            allows_early_withdrawal=config.allows_early_withdrawal,
        )
        for config in stokvels.STOKVEL_TYPES.values()
    ]


@router.post("/stokvels/join", response_model=JoinStokvelResponse, status_code=201)
def join_stokvel(
    request_body: JoinStokvelRequest,
    request: Request,
    store: DocumentStore = Depends(get_store),
):
    """
    Join a stokvel of the requested type.

    Creates the stokvel record, then adds the membership to the member's profile.
    """
    users = UserRepository(store)
    profile = get_member_or_404(users, request_body.user_id)

    stokvel = stokvels.create_stokvel(
        request_body.user_id,
        request_body.stokvel_type,
        request_body.monthly_contribution,
    )
    stokvel = StokvelRepository(store).create_stokvel(stokvel)
    membership = stokvels.new_membership(stokvel)
    users.add_stokvel(profile, membership)
    store.db.commit()

    log_operation(
        get_request_id(request),
        profile.uid,
        "stokvel_joined",
        stokvel_id=stokvel.id,
        stokvel_type=stokvel.type.value,
        monthly_contribution=stokvel.monthly_contribution,
    )
    return JoinStokvelResponse(
        stokvel=to_stokvel_response(stokvel),
        membership=to_membership_schema(membership),
    )


@router.get("/stokvels", response_model=MemberStokvelsResponse)
def list_member_stokvels(
    user_id: str = Query(..., description="Member identifier"),
    store: DocumentStore = Depends(get_store),
):
    profile = get_member_or_404(UserRepository(store), user_id)
    return MemberStokvelsResponse(
        user_id=user_id,
        stokvels=[to_membership_schema(m) for m in profile.stokvels],
        total_savings=stokvels.total_savings(profile.stokvels),
        store_discount=profile.store_discount,
    )


@router.get("/stokvels/{stokvel_id}", response_model=StokvelResponse)
def get_stokvel(stokvel_id: str, store: DocumentStore = Depends(get_store)):
    stokvel = StokvelRepository(store).get_stokvel_by_id(stokvel_id)
    if stokvel is None:
        raise HTTPException(status_code=404, detail="Stokvel not found")
    return to_stokvel_response(stokvel)


@router.post("/stokvels/{stokvel_id}/contributions", response_model=ContributionResponse, status_code=201)
def make_contribution(
    stokvel_id: str,
    request_body: ContributionRequest,
    request: Request,
    store: DocumentStore = Depends(get_store),
):
    """
    Credit a contribution to the member's stokvel.

    Flow:
    1. Update the membership balance and next due date
    2. Record the contribution
    3. Add to the member's savings total (store discount follows the new total)
    """
    users = UserRepository(store)
    profile, membership = _get_membership_or_404(users, request_body.user_id, stokvel_id)

    membership = stokvels.record_contribution(membership, request_body.amount)
    StokvelRepository(store).record_contribution(
        Contribution(
            user_id=profile.uid,
            stokvel_id=stokvel_id,
            amount=request_body.amount,
            method=request_body.payment_method,
            date=utc_now(),
        )
    )
    profile = replace(profile, savings_total=profile.savings_total + request_body.amount)
    profile = users.replace_stokvel(profile, membership)
    store.db.commit()

    record_contribution(membership.stokvel_type.value, request_body.amount)
    log_operation(
        get_request_id(request),
        profile.uid,
        "stokvel_contribution",
        stokvel_id=stokvel_id,
        amount=request_body.amount,
        new_balance=membership.balance,
        store_discount=profile.store_discount,
    )
    return ContributionResponse(
        membership=to_membership_schema(membership),
        new_balance=membership.balance,
        savings_total=profile.savings_total,
        store_discount=profile.store_discount,
    )


@router.get("/stokvels/{stokvel_id}/contributions", response_model=ContributionHistoryResponse)
def list_contributions(
    stokvel_id: str,
    user_id: Optional[str] = Query(None, description="Only this member's contributions"),
    store: DocumentStore = Depends(get_store),
):
    """Contribution history, newest first"""
    contributions = StokvelRepository(store).get_contributions(stokvel_id, user_id)
    return ContributionHistoryResponse(
        stokvel_id=stokvel_id,
        contributions=[
            ContributionSchema(
                contribution_id=c.id,
                user_id=c.user_id,
                amount=c.amount,
                method=c.method,
                date=c.date,
            )
            for c in contributions
        ],
    )


@router.post("/stokvels/{stokvel_id}/withdrawals", response_model=WithdrawalResponse, status_code=201)
def request_withdrawal(
    stokvel_id: str,
    request_body: WithdrawalRequestBody,
    request: Request,
    store: DocumentStore = Depends(get_store),
):
    """Raise an early withdrawal request (Planning stokvels only)"""
    _, membership = _get_membership_or_404(UserRepository(store), request_body.user_id, stokvel_id)

    try:
        withdrawal = stokvels.request_withdrawal(
            membership,
            request_body.amount,
            reason=request_body.reason,
            user_id=request_body.user_id,
        )
    except DomainException:
        withdrawal_request_counter.labels(outcome="refused").inc()
        raise

    withdrawal = StokvelRepository(store).create_withdrawal(withdrawal)
    store.db.commit()

    withdrawal_request_counter.labels(outcome="pending").inc()
    log_operation(
        get_request_id(request),
        request_body.user_id,
        "withdrawal_requested",
        stokvel_id=stokvel_id,
        withdrawal_id=withdrawal.id,
        amount=withdrawal.amount,
    )
    return WithdrawalResponse(
        withdrawal_id=withdrawal.id,
        stokvel_id=stokvel_id,
        amount=withdrawal.amount,
        status=withdrawal.status.value,
        message="Withdrawal request submitted for approval",
    )
