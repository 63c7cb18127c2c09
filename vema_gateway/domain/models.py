"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Mapping, Optional, Tuple


class LoanStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    PAID = "paid"


class StokvelType(str, Enum):
    JANUARY = "January"
    GROCERY = "Grocery"
    PLANNING = "Planning"


class MembershipStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"


class WithdrawalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class FuneralPlanId(str, Enum):
    BASIC = "basic"
    FAMILY = "family"
    EXTENDED = "extended"


class CauseOfDeath(str, Enum):
    NATURAL_DEATH = "NATURAL_DEATH"
    ACCIDENTAL_DEATH = "ACCIDENTAL_DEATH"
    SUICIDE = "SUICIDE"


class ClaimStatus(str, Enum):
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


class ReferralStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    PAID = "paid"


class OrderStatus(str, Enum):
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# Loans


@dataclass(frozen=True)
class LoanQuote:
    """Fee and repayment breakdown for a principal and term"""

    principal: Decimal
    term_months: int
    interest_rate: Decimal  # percent of principal, flat
    interest: Decimal
    service_fee: Decimal
    initiation_fee: Decimal
    total_repayment: Decimal
    monthly_repayment: Decimal


@dataclass
class LoanAccount:
    """Loan application and repayment state"""

    user_id: str
    principal: Decimal
    term_months: int
    interest_rate: Decimal
    interest: Decimal
    service_fee: Decimal
    initiation_fee: Decimal
    total_repayment: Decimal
    monthly_repayment: Decimal
    amount_paid: Decimal = Decimal("0")
    remaining_balance: Decimal = Decimal("0")
    status: LoanStatus = LoanStatus.PENDING
    purpose: str = ""
    application_date: Optional[datetime] = None
    approval_date: Optional[datetime] = None
    disbursement_date: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    id: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status == LoanStatus.APPROVED and self.remaining_balance > 0


# Stokvels


@dataclass(frozen=True)
class StokvelTypeConfig:
    """Static configuration for a stokvel type"""

    name: str
    type: StokvelType
    duration_months: int
    description: str
    payout_month: Optional[int]
    allows_early_withdrawal: bool = False


@dataclass(frozen=True)
class StokvelDates:
    start_date: date
    end_date: date


@dataclass
class Stokvel:
    """Savings group record"""

    name: str
    type: StokvelType
    start_date: date
    end_date: date
    duration_months: int
    monthly_contribution: Decimal
    manager: str = "To be assigned"
    members: List[str] = field(default_factory=list)
    status: MembershipStatus = MembershipStatus.PENDING
    id: Optional[str] = None


@dataclass
class StokvelMembership:
    """A member's position in one stokvel"""

    stokvel_id: str
    name: str
    stokvel_type: StokvelType
    monthly_contribution: Decimal
    projected_payout: Decimal
    balance: Decimal = Decimal("0")
    contributions_count: int = 0
    next_contribution_date: Optional[date] = None
    status: MembershipStatus = MembershipStatus.PENDING
    joined_at: Optional[datetime] = None


@dataclass
class Contribution:
    user_id: str
    stokvel_id: str
    amount: Decimal
    method: str
    date: datetime
    id: Optional[str] = None


@dataclass
class WithdrawalRequest:
    """Early withdrawal awaiting approval"""

    user_id: str
    stokvel_id: str
    amount: Decimal
    reason: str
    requested_at: datetime
    status: WithdrawalStatus = WithdrawalStatus.PENDING
    id: Optional[str] = None


# Funeral cover


@dataclass(frozen=True)
class FuneralPlan:
    """Funeral cover plan with coverage table"""

    id: FuneralPlanId
    name: str
    price: Decimal
    coverage: Mapping[str, Decimal]  # mainMember | spouse | children | extended
    max_children: int
    max_extended: int


@dataclass(frozen=True)
class AdditionalBenefit:
    key: str
    name: str
    price: Decimal


@dataclass
class FamilyMember:
    name: str
    relationship: str  # "spouse" | "child" | "extended"
    id_number: str = ""
    date_of_birth: Optional[date] = None
    age: int = 0


@dataclass
class FuneralCoverMembership:
    """A member's active funeral cover"""

    user_id: str
    plan_id: FuneralPlanId
    start_date: datetime
    monthly_premium: Decimal
    additional_benefits: Tuple[str, ...] = ()
    family_details: Optional[List[FamilyMember]] = None
    payment_method: str = ""
    active: bool = True


@dataclass
class FuneralClaim:
    user_id: str
    plan_id: FuneralPlanId
    cause_of_death: str
    deceased_name: str
    relationship: str
    submitted_at: datetime
    status: ClaimStatus = ClaimStatus.SUBMITTED
    id: Optional[str] = None


# Store


@dataclass(frozen=True)
class CartItem:
    """Line in a shopping cart"""

    product_id: str
    name: str
    unit_price: Decimal
    quantity: int = 1

    @property
    def total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    discount_percent: int
    discount: Decimal
    total: Decimal


@dataclass
class Order:
    user_id: str
    items: List[CartItem]
    subtotal: Decimal
    discount: Decimal
    total: Decimal
    shipping_address: str
    payment_method: str
    created_at: datetime
    status: OrderStatus = OrderStatus.PROCESSING
    id: Optional[str] = None


@dataclass
class Product:
    name: str
    price: Decimal
    category: str
    description: str = ""
    stock: int = 0
    featured: bool = False
    id: Optional[str] = None

    @property
    def in_stock(self) -> bool:
        return self.stock > 0


# Referrals


@dataclass
class Referral:
    """Friend referred for a loan, earning commission once active"""

    referrer_id: str
    referred_name: str
    referred_email: str
    referred_phone: str
    code: str
    date: datetime
    loan_amount: Decimal = Decimal("0")
    commission: Decimal = Decimal("0")
    status: ReferralStatus = ReferralStatus.PENDING
    id: Optional[str] = None


# Members


@dataclass
class MemberProfile:
    """Platform member with savings, cover and discount state"""

    uid: str
    email: str
    display_name: str = ""
    phone_number: str = ""
    savings_total: Decimal = Decimal("0")
    store_discount: int = 0
    funeral_cover: bool = False
    funeral_cover_type: Optional[FuneralPlanId] = None
    funeral_cover_since: Optional[datetime] = None
    stokvels: List[StokvelMembership] = field(default_factory=list)
    role: str = "member"
