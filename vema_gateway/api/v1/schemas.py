"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from vema_gateway.domain.models import (
    CartItem,
    FamilyMember,
    StokvelType,
)
from vema_gateway.utils.validators import (
    is_valid_email,
    is_valid_sa_id_number,
    is_valid_sa_phone_number,
    password_strength_error,
)


def resolve_stokvel_type(label: Any) -> StokvelType:
    """
    Map a free-text label ("January Stokvel", "planning ahead") to a stokvel type.

    Case-insensitive containment, checked in January, Grocery, Planning order.
    """
    if isinstance(label, StokvelType):
        return label
    normalized = str(label).lower()
    for stokvel_type in StokvelType:
        if stokvel_type.value.lower() in normalized:
            return stokvel_type
    raise ValueError("Invalid stokvel type")


# Loans


class LoanQuoteRequest(BaseModel):
    """Request body for POST /v1/loans/quote"""

    amount: Decimal = Field(..., gt=0, description="Loan principal in rands")
    term: int = Field(3, description="Repayment term in months")


class LoanQuoteResponse(BaseModel):
    principal: Decimal
    term_months: int
    interest_rate: Decimal
    interest: Decimal
    service_fee: Decimal
    initiation_fee: Decimal
    total_repayment: Decimal
    monthly_repayment: Decimal


class LoanApplicationRequest(BaseModel):
    """Request body for POST /v1/loans"""

    user_id: str = Field(..., min_length=1, description="Member identifier")
    amount: Decimal = Field(..., gt=0)
    term: int = 3
    purpose: str = ""


class LoanResponse(BaseModel):
    loan_id: str
    user_id: str
    status: str
    purpose: str
    principal: Decimal
    term_months: int
    interest_rate: Decimal
    interest: Decimal
    service_fee: Decimal
    initiation_fee: Decimal
    total_repayment: Decimal
    monthly_repayment: Decimal
    amount_paid: Decimal
    remaining_balance: Decimal
    application_date: Optional[datetime] = None
    approval_date: Optional[datetime] = None
    disbursement_date: Optional[datetime] = None
    rejection_reason: Optional[str] = None


class LoanListResponse(BaseModel):
    user_id: str
    loans: List[LoanResponse]


class LoanRejectionRequest(BaseModel):
    reason: str = ""


class LoanPaymentRequest(BaseModel):
    # Positivity is a domain rule (InvalidAmount), not a schema rule
    amount: Decimal


# Referrals


class ReferralRequest(BaseModel):
    """Request body for POST /v1/referrals"""

    referrer_id: str = Field(..., min_length=1)
    referred_name: str = Field(..., min_length=1)
    referred_email: str
    referred_phone: str

    @field_validator("referred_email")
    @classmethod
    def check_email(cls, value: str) -> str:
        if not is_valid_email(value):
            raise ValueError("must be a valid email")
        return value

    @field_validator("referred_phone")
    @classmethod
    def check_phone(cls, value: str) -> str:
        if not is_valid_sa_phone_number(value):
            raise ValueError("must be a valid South African phone number")
        return value


class ReferralActivationRequest(BaseModel):
    loan_amount: Decimal = Field(Decimal("0"), ge=0)


class ReferralResponse(BaseModel):
    referral_id: str
    referrer_id: str
    referred_name: str
    referred_email: str
    referred_phone: str
    code: str
    status: str
    loan_amount: Decimal
    commission: Decimal
    date: Optional[datetime] = None


class ReferralListResponse(BaseModel):
    user_id: str
    referrals: List[ReferralResponse]
    total_referrals: int
    active_referrals: int
    total_earnings: Decimal


# Stokvels


class StokvelTypeSchema(BaseModel):
    name: str
    type: str
    duration_months: int
    description: str
    payout_month: Optional[int] = None
    allows_early_withdrawal: bool


class JoinStokvelRequest(BaseModel):
    """Request body for POST /v1/stokvels/join"""

    user_id: str = Field(..., min_length=1)
    stokvel_type: StokvelType
    monthly_contribution: Decimal = Field(..., gt=0)
    payment_method: str = ""

    @field_validator("stokvel_type", mode="before")
    @classmethod
    def parse_stokvel_type(cls, value: Any) -> StokvelType:
        return resolve_stokvel_type(value)


class StokvelResponse(BaseModel):
    stokvel_id: str
    name: str
    type: str
    manager: str
    start_date: date
    end_date: date
    duration_months: int
    monthly_contribution: Decimal
    members: List[str]
    status: str
    days_until_payout: int
    active: bool


class MembershipSchema(BaseModel):
    stokvel_id: str
    name: str
    type: str
    balance: Decimal
    monthly_contribution: Decimal
    contributions_count: int
    next_contribution_date: Optional[date] = None
    status: str
    projected_payout: Decimal
    contribution_due: bool


class JoinStokvelResponse(BaseModel):
    stokvel: StokvelResponse
    membership: MembershipSchema


class MemberStokvelsResponse(BaseModel):
    user_id: str
    stokvels: List[MembershipSchema]
    total_savings: Decimal
    store_discount: int


class ContributionRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    amount: Decimal
    payment_method: str = ""


class ContributionResponse(BaseModel):
    membership: MembershipSchema
    new_balance: Decimal
    savings_total: Decimal
    store_discount: int


class ContributionSchema(BaseModel):
    contribution_id: str
    user_id: str
    amount: Decimal
    method: str
    date: Optional[datetime] = None


class ContributionHistoryResponse(BaseModel):
    stokvel_id: str
    contributions: List[ContributionSchema]


class WithdrawalRequestBody(BaseModel):
    user_id: str = Field(..., min_length=1)
    amount: Decimal
    reason: str = ""


class WithdrawalResponse(BaseModel):
    withdrawal_id: str
    stokvel_id: str
    amount: Decimal
    status: str
    message: str


# Funeral cover


class FuneralPlanSchema(BaseModel):
    id: str
    name: str
    price: Decimal
    coverage: dict
    max_children: int
    max_extended: int


class BenefitSchema(BaseModel):
    key: str
    name: str
    price: Decimal


class PremiumQuoteRequest(BaseModel):
    plan_id: str
    additional_benefits: List[str] = []


class PremiumQuoteResponse(BaseModel):
    plan_id: str
    monthly_premium: Decimal
    valid_plan: bool


class FamilyMemberSchema(BaseModel):
    name: str = Field(..., min_length=1)
    relationship: str = Field(..., pattern="^(spouse|child|extended)$")
    id_number: str = ""
    date_of_birth: Optional[date] = None
    age: int = Field(0, ge=0)

    @field_validator("id_number")
    @classmethod
    def check_id_number(cls, value: str) -> str:
        if value and not is_valid_sa_id_number(value):
            raise ValueError("must be a valid South African ID number")
        return value

    def to_domain(self) -> FamilyMember:
        return FamilyMember(
            name=self.name,
            relationship=self.relationship,
            id_number=self.id_number,
            date_of_birth=self.date_of_birth,
            age=self.age,
        )


class ActivateCoverRequest(BaseModel):
    """Request body for POST /v1/funeral/cover"""

    user_id: str = Field(..., min_length=1)
    plan_id: str
    payment_method: str = ""
    family_details: Optional[List[FamilyMemberSchema]] = None
    additional_benefits: List[str] = []


class CoverResponse(BaseModel):
    user_id: str
    plan_id: str
    plan_name: str
    active: bool
    start_date: datetime
    monthly_premium: Decimal
    additional_benefits: List[str]
    total_cover: Decimal
    store_discount: Optional[int] = None


class CancelCoverRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    reason: str = ""


class CancelCoverResponse(BaseModel):
    user_id: str
    active: bool
    store_discount: int


class ClaimRequest(BaseModel):
    """Request body for POST /v1/funeral/claims"""

    user_id: str = Field(..., min_length=1)
    cause_of_death: str = "NATURAL_DEATH"
    deceased_name: str = Field(..., min_length=1)
    relationship: str = "mainMember"


class ClaimResponse(BaseModel):
    claim_id: str
    status: str
    cause_of_death: str
    message: str


# Store


class CartItemSchema(BaseModel):
    id: str
    name: str = ""
    price: Decimal = Field(..., ge=0)
    quantity: int = Field(1, ge=1)

    def to_domain(self) -> CartItem:
        return CartItem(
            product_id=self.id,
            name=self.name,
            unit_price=self.price,
            quantity=self.quantity,
        )


class ProductSchema(BaseModel):
    id: str
    name: str
    description: str
    price: Decimal
    category: str
    stock: int
    featured: bool
    in_stock: bool


class ProductListResponse(BaseModel):
    products: List[ProductSchema]


class DiscountResponse(BaseModel):
    user_id: str
    discount: int
    savings_total: Decimal
    has_funeral_cover: bool


class CartTotalsRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    items: List[CartItemSchema]


class CartTotalsResponse(BaseModel):
    subtotal: Decimal
    discount_percent: int
    discount: Decimal
    total: Decimal


class OrderRequest(BaseModel):
    """Request body for POST /v1/store/orders"""

    user_id: str = Field(..., min_length=1)
    items: List[CartItemSchema]
    shipping_address: str = ""
    payment_method: str = ""


class OrderResponse(BaseModel):
    order_id: str
    user_id: str
    items: List[CartItemSchema]
    subtotal: Decimal
    discount: Decimal
    total: Decimal
    shipping_address: str
    payment_method: str
    status: str
    created_at: Optional[datetime] = None


class OrderListResponse(BaseModel):
    user_id: str
    orders: List[OrderResponse]


# Auth


class RegisterRequest(BaseModel):
    email: str
    password: str
    display_name: str = Field(..., min_length=1)
    phone_number: str = ""

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        if not is_valid_email(value):
            raise ValueError("must be a valid email")
        return value

    @field_validator("password")
    @classmethod
    def check_password(cls, value: str) -> str:
        error = password_strength_error(value)
        if error:
            raise ValueError(error)
        return value

    @field_validator("phone_number")
    @classmethod
    def check_phone(cls, value: str) -> str:
        if value and not is_valid_sa_phone_number(value):
            raise ValueError("must be a valid South African phone number")
        return value


class SignInRequest(BaseModel):
    email: str
    password: str


class PasswordResetRequest(BaseModel):
    email: str


class AuthResponse(BaseModel):
    uid: str
    email: str
    display_name: str
    id_token: str
    refresh_token: str


class MessageResponse(BaseModel):
    message: str
