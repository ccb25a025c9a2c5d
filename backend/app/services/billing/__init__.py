"""
Billing engine: interval math, coupons, subscription ledger, commissions and the
recurring billing job.

Only dependency-free modules are re-exported here; import the ledger, job and
checkout services from their modules.
"""
from app.services.billing.billing_models import (
    SubscriptionPlan,
    ProjectStatus,
    DiscountType,
    TicketStatus,
    NotificationType,
    PaymentStatus,
    Software,
    Customer,
    Subscription,
    Invoice,
    Commission,
    DiscountCoupon,
    SupportTicket,
    Notification,
    BillingCycleResult,
    RenewalPaymentResult,
    PurchaseResult,
)
from app.services.billing.intervals import advance, parse_plan

__all__ = [
    "SubscriptionPlan",
    "ProjectStatus",
    "DiscountType",
    "TicketStatus",
    "NotificationType",
    "PaymentStatus",
    "Software",
    "Customer",
    "Subscription",
    "Invoice",
    "Commission",
    "DiscountCoupon",
    "SupportTicket",
    "Notification",
    "BillingCycleResult",
    "RenewalPaymentResult",
    "PurchaseResult",
    "advance",
    "parse_plan",
]
