"""
Mapping between domain dataclasses and persisted document shapes.

Stored field names are camelCase. Currency is written as decimal strings and
read back from strings or legacy JSON numbers. Dates and datetimes are
ISO-8601 strings.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from vema_gateway.domain.models import (
    CartItem,
    ClaimStatus,
    Contribution,
    FamilyMember,
    FuneralClaim,
    FuneralCoverMembership,
    FuneralPlanId,
    LoanAccount,
    LoanQuote,
    LoanStatus,
    MemberProfile,
    MembershipStatus,
    Order,
    OrderStatus,
    OrderTotals,
    Product,
    Referral,
    ReferralStatus,
    Stokvel,
    StokvelMembership,
    StokvelType,
    WithdrawalRequest,
    WithdrawalStatus,
)
from vema_gateway.utils.money import to_decimal


def _money(value: Decimal) -> str:
    return str(value)


def _parse_money(value: Any, default: str = "0") -> Decimal:
    return to_decimal(default if value is None else value)


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    parsed = value if isinstance(value, datetime) else datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_date(value: Any) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    # Legacy records may hold a full timestamp
    return date.fromisoformat(value[:10])


# Loans


def quote_to_document(loan_quote: LoanQuote) -> Dict[str, Any]:
    return {
        "principal": _money(loan_quote.principal),
        "termMonths": loan_quote.term_months,
        "interestRate": _money(loan_quote.interest_rate),
        "interest": _money(loan_quote.interest),
        "serviceFee": _money(loan_quote.service_fee),
        "initiationFee": _money(loan_quote.initiation_fee),
        "totalRepayment": _money(loan_quote.total_repayment),
        "monthlyRepayment": _money(loan_quote.monthly_repayment),
    }


def quote_from_document(data: Dict[str, Any]) -> LoanQuote:
    return LoanQuote(
        principal=_parse_money(data.get("principal", data.get("amount"))),
        term_months=int(data.get("termMonths", data.get("term"))),
        interest_rate=_parse_money(data.get("interestRate")),
        interest=_parse_money(data.get("interest")),
        service_fee=_parse_money(data.get("serviceFee")),
        initiation_fee=_parse_money(data.get("initiationFee")),
        total_repayment=_parse_money(data.get("totalRepayment")),
        monthly_repayment=_parse_money(data.get("monthlyRepayment")),
    )


def loan_to_document(loan: LoanAccount) -> Dict[str, Any]:
    return {
        "userId": loan.user_id,
        "purpose": loan.purpose,
        "principal": _money(loan.principal),
        "termMonths": loan.term_months,
        "interestRate": _money(loan.interest_rate),
        "interest": _money(loan.interest),
        "serviceFee": _money(loan.service_fee),
        "initiationFee": _money(loan.initiation_fee),
        "totalRepayment": _money(loan.total_repayment),
        "monthlyRepayment": _money(loan.monthly_repayment),
        "amountPaid": _money(loan.amount_paid),
        "remainingBalance": _money(loan.remaining_balance),
        "status": loan.status.value,
        "applicationDate": _iso(loan.application_date),
        "approvalDate": _iso(loan.approval_date),
        "disbursementDate": _iso(loan.disbursement_date),
        "rejectionReason": loan.rejection_reason,
    }


def loan_from_document(data: Dict[str, Any]) -> LoanAccount:
    # Older records used amount/term for principal/termMonths
    principal = data.get("principal", data.get("amount"))
    term_months = data.get("termMonths", data.get("term"))

    return LoanAccount(
        id=data.get("id"),
        user_id=data["userId"],
        purpose=data.get("purpose", ""),
        principal=_parse_money(principal),
        term_months=int(term_months),
        interest_rate=_parse_money(data.get("interestRate")),
        interest=_parse_money(data.get("interest")),
        service_fee=_parse_money(data.get("serviceFee")),
        initiation_fee=_parse_money(data.get("initiationFee")),
        total_repayment=_parse_money(data.get("totalRepayment")),
        monthly_repayment=_parse_money(data.get("monthlyRepayment")),
        amount_paid=_parse_money(data.get("amountPaid")),
        remaining_balance=_parse_money(data.get("remainingBalance")),
        status=LoanStatus(data.get("status", LoanStatus.PENDING.value)),
        application_date=_parse_datetime(data.get("applicationDate")),
        approval_date=_parse_datetime(data.get("approvalDate")),
        disbursement_date=_parse_datetime(data.get("disbursementDate")),
        rejection_reason=data.get("rejectionReason"),
    )


def referral_to_document(referral: Referral) -> Dict[str, Any]:
    return {
        "referrerId": referral.referrer_id,
        "referredName": referral.referred_name,
        "referredEmail": referral.referred_email,
        "referredPhone": referral.referred_phone,
        "referredLoanAmount": _money(referral.loan_amount),
        "commission": _money(referral.commission),
        "status": referral.status.value,
        "code": referral.code,
        "date": _iso(referral.date),
    }


def referral_from_document(data: Dict[str, Any]) -> Referral:
    return Referral(
        id=data.get("id"),
        referrer_id=data["referrerId"],
        referred_name=data.get("referredName", ""),
        referred_email=data.get("referredEmail", ""),
        referred_phone=data.get("referredPhone", ""),
        loan_amount=_parse_money(data.get("referredLoanAmount", data.get("loanAmount"))),
        commission=_parse_money(data.get("commission")),
        status=ReferralStatus(data.get("status", ReferralStatus.PENDING.value)),
        code=data.get("code", ""),
        date=_parse_datetime(data.get("date")),
    )


# Stokvels


def stokvel_to_document(stokvel: Stokvel) -> Dict[str, Any]:
    return {
        "name": stokvel.name,
        "type": stokvel.type.value,
        "manager": stokvel.manager,
        "startDate": _iso(stokvel.start_date),
        "endDate": _iso(stokvel.end_date),
        "durationMonths": stokvel.duration_months,
        "monthlyContribution": _money(stokvel.monthly_contribution),
        "members": list(stokvel.members),
        "status": stokvel.status.value,
    }


def stokvel_from_document(data: Dict[str, Any]) -> Stokvel:
    return Stokvel(
        id=data.get("id"),
        name=data["name"],
        type=StokvelType(data["type"]),
        manager=data.get("manager", "To be assigned"),
        start_date=_parse_date(data["startDate"]),
        end_date=_parse_date(data["endDate"]),
        duration_months=int(data.get("durationMonths", 10)),
        monthly_contribution=_parse_money(data.get("monthlyContribution")),
        members=list(data.get("members", [])),
        status=MembershipStatus(data.get("status", MembershipStatus.PENDING.value)),
    )


def membership_to_document(membership: StokvelMembership) -> Dict[str, Any]:
    return {
        "stokvelId": membership.stokvel_id,
        "name": membership.name,
        "type": membership.stokvel_type.value,
        "balance": _money(membership.balance),
        "monthlyContribution": _money(membership.monthly_contribution),
        "contributionsCount": membership.contributions_count,
        "nextContributionDate": _iso(membership.next_contribution_date),
        "status": membership.status.value,
        "projectedPayout": _money(membership.projected_payout),
        "joinedAt": _iso(membership.joined_at),
    }


def membership_from_document(data: Dict[str, Any]) -> StokvelMembership:
    return StokvelMembership(
        stokvel_id=data.get("stokvelId", data.get("id")),
        name=data.get("name", ""),
        stokvel_type=StokvelType(data["type"]),
        balance=_parse_money(data.get("balance")),
        monthly_contribution=_parse_money(data.get("monthlyContribution")),
        contributions_count=int(data.get("contributionsCount", 0)),
        next_contribution_date=_parse_date(data.get("nextContributionDate")),
        status=MembershipStatus(data.get("status", MembershipStatus.PENDING.value)),
        projected_payout=_parse_money(data.get("projectedPayout")),
        joined_at=_parse_datetime(data.get("joinedAt")),
    )


def contribution_to_document(contribution: Contribution) -> Dict[str, Any]:
    return {
        "userId": contribution.user_id,
        "stokvelId": contribution.stokvel_id,
        "amount": _money(contribution.amount),
        "method": contribution.method,
        "date": _iso(contribution.date),
    }


def contribution_from_document(data: Dict[str, Any]) -> Contribution:
    return Contribution(
        id=data.get("id"),
        user_id=data["userId"],
        stokvel_id=data["stokvelId"],
        amount=_parse_money(data.get("amount")),
        method=data.get("method", ""),
        date=_parse_datetime(data.get("date")),
    )


def withdrawal_to_document(request: WithdrawalRequest) -> Dict[str, Any]:
    return {
        "userId": request.user_id,
        "stokvelId": request.stokvel_id,
        "amount": _money(request.amount),
        "reason": request.reason,
        "status": request.status.value,
        "requestedAt": _iso(request.requested_at),
    }


def withdrawal_from_document(data: Dict[str, Any]) -> WithdrawalRequest:
    return WithdrawalRequest(
        id=data.get("id"),
        user_id=data["userId"],
        stokvel_id=data["stokvelId"],
        amount=_parse_money(data.get("amount")),
        reason=data.get("reason", ""),
        status=WithdrawalStatus(data.get("status", WithdrawalStatus.PENDING.value)),
        requested_at=_parse_datetime(data.get("requestedAt")),
    )


# Funeral cover


def family_member_to_document(member: FamilyMember) -> Dict[str, Any]:
    return {
        "name": member.name,
        "idNumber": member.id_number,
        "relationship": member.relationship,
        "dateOfBirth": _iso(member.date_of_birth),
        "age": member.age,
    }


def family_member_from_document(data: Dict[str, Any]) -> FamilyMember:
    return FamilyMember(
        name=data.get("name", ""),
        id_number=data.get("idNumber", ""),
        relationship=data.get("relationship", ""),
        date_of_birth=_parse_date(data.get("dateOfBirth")),
        age=int(data.get("age", 0)),
    )


def funeral_cover_to_document(cover: FuneralCoverMembership) -> Dict[str, Any]:
    return {
        "userId": cover.user_id,
        "planId": cover.plan_id.value,
        "active": cover.active,
        "startDate": _iso(cover.start_date),
        "paymentMethod": cover.payment_method,
        "additionalBenefits": list(cover.additional_benefits),
        "familyDetails": (
            [family_member_to_document(m) for m in cover.family_details]
            if cover.family_details is not None
            else None
        ),
        "monthlyPremium": _money(cover.monthly_premium),
    }


def funeral_cover_from_document(data: Dict[str, Any]) -> FuneralCoverMembership:
    family = data.get("familyDetails")
    return FuneralCoverMembership(
        user_id=data["userId"],
        plan_id=FuneralPlanId(data["planId"]),
        active=bool(data.get("active", False)),
        start_date=_parse_datetime(data["startDate"]),
        payment_method=data.get("paymentMethod", ""),
        additional_benefits=tuple(data.get("additionalBenefits", [])),
        family_details=[family_member_from_document(m) for m in family] if family is not None else None,
        monthly_premium=_parse_money(data.get("monthlyPremium")),
    )


def claim_to_document(claim: FuneralClaim) -> Dict[str, Any]:
    return {
        "userId": claim.user_id,
        "planId": claim.plan_id.value,
        "causeOfDeath": claim.cause_of_death,
        "deceasedName": claim.deceased_name,
        "relationship": claim.relationship,
        "status": claim.status.value,
        "submittedAt": _iso(claim.submitted_at),
    }


def claim_from_document(data: Dict[str, Any]) -> FuneralClaim:
    return FuneralClaim(
        id=data.get("id"),
        user_id=data["userId"],
        plan_id=FuneralPlanId(data["planId"]),
        cause_of_death=data["causeOfDeath"],
        deceased_name=data.get("deceasedName", ""),
        relationship=data.get("relationship", ""),
        status=ClaimStatus(data.get("status", ClaimStatus.SUBMITTED.value)),
        submitted_at=_parse_datetime(data.get("submittedAt")),
    )


# Store


def cart_item_to_document(item: CartItem) -> Dict[str, Any]:
    return {
        "id": item.product_id,
        "name": item.name,
        "price": _money(item.unit_price),
        "quantity": item.quantity,
    }


def cart_item_from_document(data: Dict[str, Any]) -> CartItem:
    return CartItem(
        product_id=data.get("id", ""),
        name=data.get("name", ""),
        unit_price=_parse_money(data.get("price")),
        quantity=int(data.get("quantity", 1)),
    )


def totals_to_document(order_totals: OrderTotals) -> Dict[str, Any]:
    return {
        "subtotal": _money(order_totals.subtotal),
        "discountPercent": order_totals.discount_percent,
        "discount": _money(order_totals.discount),
        "total": _money(order_totals.total),
    }


def totals_from_document(data: Dict[str, Any]) -> OrderTotals:
    return OrderTotals(
        subtotal=_parse_money(data.get("subtotal")),
        discount_percent=int(data.get("discountPercent", 0)),
        discount=_parse_money(data.get("discount")),
        total=_parse_money(data.get("total")),
    )


def order_to_document(order: Order) -> Dict[str, Any]:
    # Line items are nested objects, so they keep their own "id" (the product id)
    return {
        "userId": order.user_id,
        "items": [cart_item_to_document(item) for item in order.items],
        "subtotal": _money(order.subtotal),
        "discount": _money(order.discount),
        "total": _money(order.total),
        "shippingAddress": order.shipping_address,
        "paymentMethod": order.payment_method,
        "status": order.status.value,
        "createdAt": _iso(order.created_at),
    }


def order_from_document(data: Dict[str, Any]) -> Order:
    return Order(
        id=data.get("id"),
        user_id=data["userId"],
        items=[cart_item_from_document(item) for item in data.get("items", [])],
        subtotal=_parse_money(data.get("subtotal")),
        discount=_parse_money(data.get("discount")),
        total=_parse_money(data.get("total")),
        shipping_address=data.get("shippingAddress", ""),
        payment_method=data.get("paymentMethod", ""),
        status=OrderStatus(data.get("status", OrderStatus.PROCESSING.value)),
        created_at=_parse_datetime(data.get("createdAt")),
    )


def product_to_document(product: Product) -> Dict[str, Any]:
    return {
        "name": product.name,
        "description": product.description,
        "price": _money(product.price),
        "category": product.category,
        "stock": product.stock,
        "featured": product.featured,
    }


def product_from_document(data: Dict[str, Any]) -> Product:
    return Product(
        id=data.get("id"),
        name=data["name"],
        description=data.get("description", ""),
        price=_parse_money(data.get("price")),
        category=data.get("category", ""),
        stock=int(data.get("stock", 0)),
        featured=bool(data.get("featured", False)),
    )


# Members


def profile_to_document(profile: MemberProfile) -> Dict[str, Any]:
    return {
        "uid": profile.uid,
        "email": profile.email,
        "displayName": profile.display_name,
        "phoneNumber": profile.phone_number,
        "savingsTotal": _money(profile.savings_total),
        "storeDiscount": profile.store_discount,
        "funeralCover": profile.funeral_cover,
        "funeralCoverType": profile.funeral_cover_type.value if profile.funeral_cover_type else None,
        "funeralCoverSince": _iso(profile.funeral_cover_since),
        "stokvels": [membership_to_document(m) for m in profile.stokvels],
        "role": profile.role,
    }


def profile_from_document(data: Dict[str, Any]) -> MemberProfile:
    cover_type = data.get("funeralCoverType")
    stokvels: List[StokvelMembership] = [
        membership_from_document(m) for m in data.get("stokvels", [])
    ]
    return MemberProfile(
        uid=data.get("uid", data.get("id")),
        email=data.get("email", ""),
        display_name=data.get("displayName", ""),
        phone_number=data.get("phoneNumber", ""),
        savings_total=_parse_money(data.get("savingsTotal")),
        store_discount=int(data.get("storeDiscount", 0)),
        funeral_cover=bool(data.get("funeralCover", False)),
        funeral_cover_type=FuneralPlanId(cover_type) if cover_type else None,
        funeral_cover_since=_parse_datetime(data.get("funeralCoverSince")),
        stokvels=stokvels,
        role=data.get("role", "member"),
    )
