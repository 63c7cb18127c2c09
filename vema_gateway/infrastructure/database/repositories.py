"""Data access layer for platform entities"""

import logging
from dataclasses import replace
from typing import List, Optional

from vema_gateway.domain.discounts import discount_percent
from vema_gateway.domain.models import (
    Contribution,
    FuneralClaim,
    FuneralCoverMembership,
    LoanAccount,
    MemberProfile,
    Order,
    Product,
    Referral,
    Stokvel,
    StokvelMembership,
    WithdrawalRequest,
)
from vema_gateway.infrastructure.database import documents
from vema_gateway.infrastructure.database.store import DocumentStore


class LoanRepository:
    """Repository for loans"""

    collection = "loans"

    def __init__(self, store: DocumentStore):
        self.store = store

    def create_loan(self, loan: LoanAccount) -> LoanAccount:
        loan_id = self.store.create(self.collection, documents.loan_to_document(loan))
        return replace(loan, id=loan_id)

    def get_loan_by_id(self, loan_id: str) -> Optional[LoanAccount]:
        data = self.store.get_by_id(self.collection, loan_id)
        return documents.loan_from_document(data) if data else None

    def get_loans_for_user(self, user_id: str) -> List[LoanAccount]:
        """Most recent application first"""
        rows = self.store.query(
            self.collection,
            [("userId", "==", user_id)],
            order_by=("applicationDate", "desc"),
        )
        return [documents.loan_from_document(row) for row in rows]

    def save(self, loan: LoanAccount) -> None:
        self.store.update(self.collection, loan.id, documents.loan_to_document(loan))


class ReferralRepository:
    """Repository for referrals"""

    collection = "referrals"

    def __init__(self, store: DocumentStore):
        self.store = store

    def create_referral(self, referral: Referral) -> Referral:
        referral_id = self.store.create(self.collection, documents.referral_to_document(referral))
        return replace(referral, id=referral_id)

    def get_referral_by_id(self, referral_id: str) -> Optional[Referral]:
        data = self.store.get_by_id(self.collection, referral_id)
        return documents.referral_from_document(data) if data else None

    def get_referrals_for_user(self, user_id: str) -> List[Referral]:
        rows = self.store.query(
            self.collection,
            [("referrerId", "==", user_id)],
            order_by=("date", "desc"),
        )
        return [documents.referral_from_document(row) for row in rows]

    def save(self, referral: Referral) -> None:
        self.store.update(self.collection, referral.id, documents.referral_to_document(referral))


class StokvelRepository:
    """Repository for stokvel groups, contributions and withdrawal requests"""

    collection = "stokvels"
    contributions = "contributions"
    withdrawals = "withdrawals"

    def __init__(self, store: DocumentStore):
        self.store = store

    def create_stokvel(self, stokvel: Stokvel) -> Stokvel:
        stokvel_id = self.store.create(self.collection, documents.stokvel_to_document(stokvel))
        return replace(stokvel, id=stokvel_id)

    def get_stokvel_by_id(self, stokvel_id: str) -> Optional[Stokvel]:
        data = self.store.get_by_id(self.collection, stokvel_id)
        return documents.stokvel_from_document(data) if data else None

    def record_contribution(self, contribution: Contribution) -> Contribution:
        contribution_id = self.store.create(
            self.contributions, documents.contribution_to_document(contribution)
        )
        return replace(contribution, id=contribution_id)

    def get_contributions(self, stokvel_id: str, user_id: Optional[str] = None) -> List[Contribution]:
        predicates = [("stokvelId", "==", stokvel_id)]
        if user_id:
            predicates.append(("userId", "==", user_id))
        rows = self.store.query(self.contributions, predicates, order_by=("date", "desc"))
        return [documents.contribution_from_document(row) for row in rows]

    def create_withdrawal(self, request: WithdrawalRequest) -> WithdrawalRequest:
        request_id = self.store.create(self.withdrawals, documents.withdrawal_to_document(request))
        return replace(request, id=request_id)


class UserRepository:
    """Repository for member profiles (document id = auth uid)"""

    collection = "users"

    def __init__(self, store: DocumentStore):
        self.store = store

    def get_user_by_id(self, user_id: str) -> Optional[MemberProfile]:
        data = self.store.get_by_id(self.collection, user_id)
        return documents.profile_from_document(data) if data else None

    def save(self, profile: MemberProfile) -> MemberProfile:
        """
        Persist a profile, recomputing the store discount from its current
        savings total and cover status.
        """
        profile = replace(
            profile,
            store_discount=discount_percent(profile.savings_total, profile.funeral_cover),
        )
        self.store.set(self.collection, profile.uid, documents.profile_to_document(profile))
        return profile

    def add_stokvel(self, profile: MemberProfile, membership: StokvelMembership) -> MemberProfile:
        return self.save(replace(profile, stokvels=[*profile.stokvels, membership]))

    def replace_stokvel(self, profile: MemberProfile, membership: StokvelMembership) -> MemberProfile:
        stokvels = [
            membership if m.stokvel_id == membership.stokvel_id else m for m in profile.stokvels
        ]
        return self.save(replace(profile, stokvels=stokvels))


class FuneralCoverRepository:
    """Repository for funeral cover (one document per member) and claims"""

    collection = "funeral_covers"
    claims = "claims"

    def __init__(self, store: DocumentStore):
        self.store = store

    def get_cover(self, user_id: str) -> Optional[FuneralCoverMembership]:
        data = self.store.get_by_id(self.collection, user_id)
        return documents.funeral_cover_from_document(data) if data else None

    def save_cover(self, cover: FuneralCoverMembership) -> None:
        self.store.set(self.collection, cover.user_id, documents.funeral_cover_to_document(cover))

    def create_claim(self, claim: FuneralClaim) -> FuneralClaim:
        claim_id = self.store.create(self.claims, documents.claim_to_document(claim))
        return replace(claim, id=claim_id)


class ProductRepository:
    """Repository for store products"""

    collection = "products"

    def __init__(self, store: DocumentStore):
        self.store = store

    def create_product(self, product: Product) -> Product:
        product_id = self.store.create(
            self.collection, documents.product_to_document(product), doc_id=product.id
        )
        return replace(product, id=product_id)

    def get_product_by_id(self, product_id: str) -> Optional[Product]:
        data = self.store.get_by_id(self.collection, product_id)
        return documents.product_from_document(data) if data else None

    def get_products(self, category: Optional[str] = None) -> List[Product]:
        predicates = [("category", "==", category)] if category else []
        rows = self.store.query(self.collection, predicates, order_by=("name", "asc"))
        return [documents.product_from_document(row) for row in rows]

    def update_stock(self, product_id: str, quantity_delta: int) -> None:
        """Adjust stock, never below zero"""
        product = self.get_product_by_id(product_id)
        if product is None:
            logging.warning(
                f"Stock update skipped for unknown product {product_id}",
                extra={"product_id": product_id, "quantity_delta": quantity_delta},
            )
            return
        self.store.update(
            self.collection, product_id, {"stock": max(0, product.stock + quantity_delta)}
        )


class OrderRepository:
    """Repository for store orders"""

    collection = "orders"

    def __init__(self, store: DocumentStore):
        self.store = store

    def create_order(self, order: Order) -> Order:
        order_id = self.store.create(self.collection, documents.order_to_document(order))
        return replace(order, id=order_id)

    def get_order_by_id(self, order_id: str) -> Optional[Order]:
        data = self.store.get_by_id(self.collection, order_id)
        return documents.order_from_document(data) if data else None

    def get_orders_for_user(self, user_id: str) -> List[Order]:
        rows = self.store.query(
            self.collection,
            [("userId", "==", user_id)],
            order_by=("createdAt", "desc"),
        )
        return [documents.order_from_document(row) for row in rows]
