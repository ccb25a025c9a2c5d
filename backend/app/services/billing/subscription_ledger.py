"""
Subscription ledger: owns subscriptions and invoices and their state transitions.

Every mutating function runs inside store.transaction(); callers may wrap several
calls in an outer transaction to make them atomic together.
"""
import logging
import uuid
from dataclasses import replace
from datetime import date
from typing import Optional, Tuple

from app.repositories.base import BillingStore
from app.services.billing import commission_service
from app.services.billing.billing_models import (
    Commission,
    DiscountCoupon,
    Invoice,
    PaymentStatus,
    ProjectStatus,
    Subscription,
)
from app.services.billing.coupon_service import evaluate
from app.services.billing.errors import (
    BillingNotDueError,
    CustomerNotFoundError,
    DuplicateCommissionError,
    PaymentDeclinedError,
    SamePlanError,
    SoftwareNotFoundError,
    SubscriptionNotFoundError,
)
from app.services.billing.intervals import advance, parse_plan
from app.services.billing.payment_gateway import ChargeResult, PaymentGateway

logger = logging.getLogger(__name__)


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def get_subscription(store: BillingStore, subscription_id: str) -> Subscription:
    """Get subscription by ID, raising SubscriptionNotFoundError."""
    subscription = store.subscriptions.get(subscription_id)
    if not subscription:
        raise SubscriptionNotFoundError(subscription_id)
    return subscription


def create(
    store: BillingStore,
    customer_id: str,
    software_id: str,
    plan,
    today: date,
    coupon: Optional[DiscountCoupon] = None,
) -> Tuple[Subscription, Invoice]:
    """
    Create a subscription and its first, already paid, invoice.

    Args:
        store: Billing store
        customer_id: Customer ID
        software_id: Software ID (looked up in the price catalog)
        plan: SubscriptionPlan or plan name
        today: Purchase date
        coupon: Optional coupon applied to the first invoice only

    Returns:
        (Subscription, Invoice) tuple

    Raises:
        InvalidPlanError, SoftwareNotFoundError
    """
    plan = parse_plan(plan)
    software = store.catalog.get_software(software_id)
    if not software:
        raise SoftwareNotFoundError(software_id)

    plan_price = software.price_for(plan)
    next_renewal = advance(today, plan)

    subscription = Subscription(
        id=_new_id("sub"),
        customer_id=customer_id,
        software_id=software_id,
        plan=plan,
        start_date=today,
        next_renewal_date=next_renewal,
        next_billing_date=next_renewal,
        renewal_amount=plan_price,
        status=ProjectStatus.PENDING,
        onboarding_date=today,
        training_date=today,
    )

    amount = evaluate(coupon, software_id, plan_price + software.setup_fee, today)
    invoice = Invoice(
        id=_new_id("inv"),
        subscription_id=subscription.id,
        customer_id=customer_id,
        amount=amount,
        issue_date=today,
        period_start=today,
        payment_date=today,  # first invoice is paid at checkout
    )

    with store.transaction():
        subscription = store.subscriptions.add(subscription)
        invoice = store.invoices.add(invoice)

    logger.info(
        f"Created subscription {subscription.id} for customer {customer_id} "
        f"({software_id}, {plan.value}), first invoice {invoice.id} amount {invoice.amount}"
    )
    return subscription, invoice


def change_plan(store: BillingStore, subscription_id: str, new_plan) -> Subscription:
    """
    Switch a subscription to another plan from the next cycle on.

    Only plan and renewal_amount change; no invoice is issued and nothing is prorated.

    Raises:
        InvalidPlanError, SubscriptionNotFoundError, SoftwareNotFoundError, SamePlanError
    """
    new_plan = parse_plan(new_plan)
    with store.transaction(), store.subscription_lock(subscription_id):
        subscription = get_subscription(store, subscription_id)
        software = store.catalog.get_software(subscription.software_id)
        if not software:
            raise SoftwareNotFoundError(subscription.software_id)
        if subscription.plan == new_plan:
            raise SamePlanError(new_plan.value)

        updated = store.subscriptions.update(replace(
            subscription,
            plan=new_plan,
            renewal_amount=software.price_for(new_plan),
        ))

    logger.info(
        f"Plan for subscription {subscription_id} changed to {new_plan.value}. "
        f"New renewal amount: {updated.renewal_amount}"
    )
    return updated


def update_details(
    store: BillingStore,
    subscription_id: str,
    status: Optional[ProjectStatus] = None,
    next_action_date: Optional[date] = None,
    remarks: Optional[str] = None,
) -> Subscription:
    """Update CRM metadata (delivery status, next action, remarks). Billing fields are untouched."""
    with store.transaction(), store.subscription_lock(subscription_id):
        subscription = get_subscription(store, subscription_id)
        changes = {}
        if status is not None:
            changes["status"] = ProjectStatus(status)
        if next_action_date is not None:
            changes["next_action_date"] = next_action_date
        if remarks is not None:
            changes["remarks"] = remarks
        if not changes:
            return subscription
        return store.subscriptions.update(replace(subscription, **changes))


def generate_recurring_invoice(
    store: BillingStore,
    subscription: Subscription,
    today: date,
) -> Tuple[Invoice, Subscription]:
    """
    Issue one unpaid invoice for the cycle starting at next_billing_date.

    Dates advance one interval from the current next_renewal_date (not from today),
    so repeated calls walk through every missed cycle.

    Raises:
        BillingNotDueError: If next_billing_date is not before today
        ConcurrentUpdateError: If the subscription changed since it was read
        DuplicateInvoiceError: If the cycle was already invoiced
    """
    if not subscription.next_billing_date < today:
        raise BillingNotDueError(subscription.id, subscription.next_billing_date, today)

    invoice = Invoice(
        id=_new_id("inv"),
        subscription_id=subscription.id,
        customer_id=subscription.customer_id,
        amount=subscription.renewal_amount,
        issue_date=today,
        period_start=subscription.next_billing_date,
    )
    next_date = advance(subscription.next_renewal_date, subscription.plan)

    with store.transaction():
        invoice = store.invoices.add(invoice)
        updated = store.subscriptions.update(replace(
            subscription,
            next_renewal_date=next_date,
            next_billing_date=next_date,
        ))

    logger.info(
        f"Generated recurring invoice {invoice.id} for subscription {subscription.id} "
        f"(period {invoice.period_start}, amount {invoice.amount}), next billing {next_date}"
    )
    return invoice, updated


def record_payment(
    store: BillingStore,
    gateway: PaymentGateway,
    subscription_id: str,
    today: date,
) -> Tuple[Invoice, Subscription]:
    """
    Take an on-demand renewal payment.

    Charges renewal_amount and, on approval, stores a paid invoice and moves the
    dates one interval past max(next_renewal_date, today). An overdue subscription
    therefore restarts from today instead of settling every missed cycle.

    Raises:
        SubscriptionNotFoundError
        PaymentDeclinedError: The gateway declined; nothing was written
    """
    with store.transaction(), store.subscription_lock(subscription_id):
        subscription = get_subscription(store, subscription_id)

        result = gateway.charge(subscription.renewal_amount, subscription.id)
        if result != ChargeResult.APPROVED:
            logger.info(f"Renewal payment for subscription {subscription_id} declined")
            raise PaymentDeclinedError(subscription_id, subscription.renewal_amount)

        base = max(subscription.next_renewal_date, today)
        next_date = advance(base, subscription.plan)

        invoice = store.invoices.add(Invoice(
            id=_new_id("inv"),
            subscription_id=subscription.id,
            customer_id=subscription.customer_id,
            amount=subscription.renewal_amount,
            issue_date=today,
            period_start=base,
            payment_date=today,
        ))
        updated = store.subscriptions.update(replace(
            subscription,
            next_renewal_date=next_date,
            next_billing_date=next_date,
        ))

    logger.info(
        f"Payment processed for {subscription_id}. Invoice {invoice.id}, "
        f"new renewal date: {next_date}"
    )
    return invoice, updated


def settle_commission(store: BillingStore, invoice: Invoice) -> Optional[Commission]:
    """
    Attribute and store the referral commission for a paid invoice, at most once.

    Raises:
        CustomerNotFoundError
        DuplicateCommissionError: The invoice already carries a commission
    """
    with store.transaction():
        if store.commissions.get_by_invoice(invoice.id):
            logger.critical(f"Refusing second commission for invoice {invoice.id}")
            raise DuplicateCommissionError(invoice.id)

        customer = store.customers.get_customer(invoice.customer_id)
        if not customer:
            raise CustomerNotFoundError(invoice.customer_id)

        commission = commission_service.attribute(invoice, customer)
        if commission is None:
            return None
        commission = store.commissions.add(commission)

    logger.info(
        f"Generated commission {commission.id} of {commission.amount} for user "
        f"{commission.user_id} on invoice {invoice.id}"
    )
    return commission


def is_invoice_overdue(invoice: Invoice, subscription: Subscription, today: date) -> bool:
    """An invoice is overdue iff unpaid and its subscription's next billing date has passed."""
    return not invoice.is_paid and subscription.next_billing_date < today


def get_payment_status(store: BillingStore, subscription_id: str, today: date) -> PaymentStatus:
    """PAID if nothing is outstanding, otherwise UNPAID or OVERDUE."""
    subscription = get_subscription(store, subscription_id)
    unpaid = [i for i in store.invoices.list_for_subscription(subscription_id) if not i.is_paid]
    if not unpaid:
        return PaymentStatus.PAID
    if any(is_invoice_overdue(i, subscription, today) for i in unpaid):
        return PaymentStatus.OVERDUE
    return PaymentStatus.UNPAID
