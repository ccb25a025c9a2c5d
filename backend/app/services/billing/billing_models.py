"""
Billing model classes.

All money amounts are integers in minor currency units (paise).
"""
import enum
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional


class SubscriptionPlan(str, enum.Enum):
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    YEARLY = "YEARLY"


class ProjectStatus(str, enum.Enum):
    REVIEW = "REVIEW"
    PENDING = "PENDING"
    TRAINING = "TRAINING"
    COMPLETE = "COMPLETE"


class DiscountType(str, enum.Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED_AMOUNT = "FIXED_AMOUNT"


class TicketStatus(str, enum.Enum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    CLOSED = "CLOSED"


class NotificationType(str, enum.Enum):
    NEW_TICKET = "NEW_TICKET"
    TASK_DUE_SOON = "TASK_DUE_SOON"
    TASK_OVERDUE = "TASK_OVERDUE"


class PaymentStatus(str, enum.Enum):
    PAID = "PAID"
    UNPAID = "UNPAID"
    OVERDUE = "OVERDUE"


@dataclass
class Software:
    """Price catalog entry for one software product."""
    id: str
    name: str
    price_monthly: int
    price_quarterly: int
    price_yearly: int
    setup_fee: int

    def price_for(self, plan: SubscriptionPlan) -> int:
        """Catalog price of a plan."""
        return {
            SubscriptionPlan.MONTHLY: self.price_monthly,
            SubscriptionPlan.QUARTERLY: self.price_quarterly,
            SubscriptionPlan.YEARLY: self.price_yearly,
        }[SubscriptionPlan(plan)]

    @classmethod
    def from_db_row(cls, row) -> "Software":
        """Create Software from database row."""
        return cls(
            id=row.id,
            name=row.name,
            price_monthly=row.price_monthly,
            price_quarterly=row.price_quarterly,
            price_yearly=row.price_yearly,
            setup_fee=row.setup_fee or 0,
        )


@dataclass
class Customer:
    """The slice of a customer the billing engine needs."""
    id: str
    name: str
    email: str
    referred_by_user_id: Optional[str] = None

    @classmethod
    def from_db_row(cls, row) -> "Customer":
        return cls(
            id=row.id,
            name=row.name,
            email=row.email,
            referred_by_user_id=row.referred_by_user_id,
        )


@dataclass
class UserContact:
    """Name and address of a platform user (admin or sales)."""
    id: str
    name: str
    email: str

    @classmethod
    def from_db_row(cls, row) -> "UserContact":
        return cls(id=row.id, name=row.name, email=row.email)


@dataclass
class Subscription:
    """Subscription data class."""
    id: str
    customer_id: str
    software_id: str
    plan: SubscriptionPlan
    start_date: date
    next_renewal_date: date
    next_billing_date: date
    renewal_amount: int
    status: ProjectStatus
    onboarding_date: date
    training_date: date
    next_action_date: Optional[date] = None
    remarks: Optional[str] = None
    version: int = 1

    @classmethod
    def from_db_row(cls, row) -> "Subscription":
        """Create Subscription from database row."""
        return cls(
            id=row.id,
            customer_id=row.customer_id,
            software_id=row.software_id,
            plan=SubscriptionPlan(row.plan),
            start_date=row.start_date,
            next_renewal_date=row.next_renewal_date,
            next_billing_date=row.next_billing_date,
            renewal_amount=row.renewal_amount,
            status=ProjectStatus(row.status),
            onboarding_date=row.onboarding_date,
            training_date=row.training_date,
            next_action_date=row.next_action_date,
            remarks=row.remarks,
            version=row.version,
        )


@dataclass
class Invoice:
    """Invoice data class. payment_date of None means unpaid."""
    id: str
    subscription_id: str
    customer_id: str
    amount: int
    issue_date: date
    period_start: date
    payment_date: Optional[date] = None

    @property
    def is_paid(self) -> bool:
        return self.payment_date is not None

    @classmethod
    def from_db_row(cls, row) -> "Invoice":
        return cls(
            id=row.id,
            subscription_id=row.subscription_id,
            customer_id=row.customer_id,
            amount=row.amount,
            issue_date=row.issue_date,
            period_start=row.period_start,
            payment_date=row.payment_date,
        )


@dataclass
class Commission:
    """Referral payout owed to a sales user."""
    id: str
    user_id: str
    customer_id: str
    invoice_id: str
    amount: int
    date: date

    @classmethod
    def from_db_row(cls, row) -> "Commission":
        return cls(
            id=row.id,
            user_id=row.user_id,
            customer_id=row.customer_id,
            invoice_id=row.invoice_id,
            amount=row.amount,
            date=row.date,
        )


@dataclass
class DiscountCoupon:
    """Promotional rule. discount_value is percentage points or minor units."""
    id: str
    code: str
    discount_type: DiscountType
    discount_value: Decimal
    valid_from: date
    valid_until: date
    is_active: bool = True
    applicable_software_ids: List[str] = field(default_factory=list)  # empty = all

    @classmethod
    def from_db_row(cls, row) -> "DiscountCoupon":
        return cls(
            id=row.id,
            code=row.code,
            discount_type=DiscountType(row.discount_type),
            discount_value=Decimal(row.discount_value),
            valid_from=row.valid_from,
            valid_until=row.valid_until,
            is_active=bool(row.is_active),
            applicable_software_ids=list(row.applicable_software_ids or []),
        )


@dataclass
class SupportTicket:
    """The slice of a support ticket the reminder scheduler and admin notices read."""
    id: str
    subject: str
    status: TicketStatus
    assigned_to_id: Optional[str] = None
    due_date: Optional[date] = None
    creator_id: Optional[str] = None

    @classmethod
    def from_db_row(cls, row) -> "SupportTicket":
        return cls(
            id=row.id,
            subject=row.subject,
            status=TicketStatus(row.status),
            assigned_to_id=row.assigned_to_id,
            due_date=row.due_date,
            creator_id=row.creator_id,
        )


@dataclass
class Notification:
    """In-app notification data class."""
    id: str
    user_id: str
    ticket_id: str
    title: str
    message: str
    type: NotificationType
    created_at: datetime
    is_read: bool = False

    @property
    def reminder_key(self) -> Optional[str]:
        """Uniqueness key for task reminders; None for other notification types."""
        if self.type in (NotificationType.TASK_DUE_SOON, NotificationType.TASK_OVERDUE):
            return f"{self.ticket_id}:{NotificationType(self.type).value}"
        return None

    @classmethod
    def from_db_row(cls, row) -> "Notification":
        return cls(
            id=row.id,
            user_id=row.user_id,
            ticket_id=row.ticket_id,
            title=row.title,
            message=row.message,
            type=NotificationType(row.type),
            created_at=row.created_at,
            is_read=bool(row.is_read),
        )


@dataclass
class BillingCycleResult:
    """Outcome of one recurring-billing run."""
    run_date: date
    invoices: List[Invoice] = field(default_factory=list)
    processed_subscription_ids: List[str] = field(default_factory=list)
    skipped_subscription_ids: List[str] = field(default_factory=list)
    failed_subscription_ids: List[str] = field(default_factory=list)

    @property
    def invoice_count(self) -> int:
        return len(self.invoices)


@dataclass
class RenewalPaymentResult:
    """Outcome of an explicit renewal payment."""
    invoice: Invoice
    subscription: Subscription
    commission: Optional[Commission] = None


@dataclass
class PurchaseResult:
    """Outcome of buying a new subscription."""
    subscription: Subscription
    invoice: Invoice
    commission: Optional[Commission] = None
    coupon_code: Optional[str] = None
    discount_amount: int = 0
