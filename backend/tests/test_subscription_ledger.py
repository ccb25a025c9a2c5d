from dataclasses import replace
from datetime import date

import pytest

from app.services.billing.billing_models import PaymentStatus, ProjectStatus, SubscriptionPlan
from app.services.billing.errors import (
    BillingNotDueError,
    ConcurrentUpdateError,
    DuplicateCommissionError,
    DuplicateInvoiceError,
    InvalidPlanError,
    PaymentDeclinedError,
    SamePlanError,
    SoftwareNotFoundError,
    SubscriptionNotFoundError,
)
from app.services.billing import subscription_ledger as ledger


def test_create_issues_paid_first_invoice_with_setup_fee(store):
    subscription, invoice = ledger.create(store, "cust-referred", "sw-crm", "MONTHLY", date(2024, 1, 10))

    assert subscription.start_date == date(2024, 1, 10)
    assert subscription.next_renewal_date == date(2024, 2, 10)
    assert subscription.next_billing_date == date(2024, 2, 10)
    assert subscription.renewal_amount == 100000
    assert subscription.status == ProjectStatus.PENDING
    assert subscription.onboarding_date == date(2024, 1, 10)
    assert subscription.training_date == date(2024, 1, 10)

    assert invoice.amount == 150000
    assert invoice.is_paid
    assert invoice.payment_date == date(2024, 1, 10)
    assert store.invoices.list_for_subscription(subscription.id) == [invoice]


def test_create_with_coupon_discounts_first_invoice_only(store):
    coupon = store.coupons.get_by_code("SUMMER20")
    subscription, invoice = ledger.create(
        store, "cust-direct", "sw-crm", SubscriptionPlan.MONTHLY, date(2024, 6, 10), coupon=coupon
    )
    assert invoice.amount == 120000
    assert subscription.renewal_amount == 100000


def test_create_with_unknown_software_fails(store):
    with pytest.raises(SoftwareNotFoundError):
        ledger.create(store, "cust-direct", "sw-missing", "MONTHLY", date(2024, 1, 10))


def test_create_with_unknown_plan_fails(store):
    with pytest.raises(InvalidPlanError):
        ledger.create(store, "cust-direct", "sw-crm", "WEEKLY", date(2024, 1, 10))


def test_recurring_invoice_advances_from_previous_renewal(store):
    subscription, _ = ledger.create(store, "cust-referred", "sw-crm", "MONTHLY", date(2024, 1, 10))

    invoice, updated = ledger.generate_recurring_invoice(store, subscription, date(2024, 2, 15))

    assert invoice.amount == 100000
    assert not invoice.is_paid
    assert invoice.issue_date == date(2024, 2, 15)
    assert invoice.period_start == date(2024, 2, 10)
    assert updated.next_renewal_date == date(2024, 3, 10)
    assert updated.next_billing_date == date(2024, 3, 10)
    assert store.commissions.count_for_invoice(invoice.id) == 0


def test_recurring_invoice_not_issued_before_billing_date(store):
    subscription, _ = ledger.create(store, "cust-referred", "sw-crm", "MONTHLY", date(2024, 1, 10))

    with pytest.raises(BillingNotDueError):
        ledger.generate_recurring_invoice(store, subscription, date(2024, 2, 10))
    assert len(store.invoices.list_for_subscription(subscription.id)) == 1


def test_stale_subscription_cannot_be_billed_twice(store):
    subscription, _ = ledger.create(store, "cust-referred", "sw-crm", "MONTHLY", date(2024, 1, 10))
    ledger.generate_recurring_invoice(store, subscription, date(2024, 2, 15))

    # Same cycle again from the stale copy
    with pytest.raises(DuplicateInvoiceError):
        ledger.generate_recurring_invoice(store, subscription, date(2024, 2, 15))
    assert len(store.invoices.list_for_subscription(subscription.id)) == 2


def test_stale_version_is_rejected_and_rolled_back(store, make_subscription):
    store.subscriptions.add(make_subscription(next_billing=date(2024, 1, 1)))
    stale = store.subscriptions.get("sub-1")
    ledger.update_details(store, "sub-1", remarks="called customer")

    with pytest.raises(ConcurrentUpdateError):
        ledger.generate_recurring_invoice(store, stale, date(2024, 1, 5))
    # The invoice added before the failed update is rolled back with it
    assert store.invoices.list_for_subscription("sub-1") == []


def test_change_plan_updates_price_only(store):
    subscription, _ = ledger.create(store, "cust-referred", "sw-crm", "MONTHLY", date(2024, 1, 10))

    updated = ledger.change_plan(store, subscription.id, "YEARLY")

    assert updated.plan == SubscriptionPlan.YEARLY
    assert updated.renewal_amount == 1000000
    assert updated.next_renewal_date == subscription.next_renewal_date
    assert updated.next_billing_date == subscription.next_billing_date
    assert len(store.invoices.list_for_subscription(subscription.id)) == 1


def test_change_to_same_plan_fails(store):
    subscription, _ = ledger.create(store, "cust-referred", "sw-crm", "MONTHLY", date(2024, 1, 10))
    with pytest.raises(SamePlanError):
        ledger.change_plan(store, subscription.id, SubscriptionPlan.MONTHLY)


def test_change_plan_for_unknown_subscription_fails(store):
    with pytest.raises(SubscriptionNotFoundError):
        ledger.change_plan(store, "sub-missing", "YEARLY")


def test_update_details_leaves_billing_fields_alone(store):
    subscription, _ = ledger.create(store, "cust-referred", "sw-crm", "MONTHLY", date(2024, 1, 10))

    updated = ledger.update_details(
        store, subscription.id,
        status=ProjectStatus.TRAINING,
        next_action_date=date(2024, 1, 20),
        remarks="Training booked",
    )

    assert updated.status == ProjectStatus.TRAINING
    assert updated.next_action_date == date(2024, 1, 20)
    assert updated.remarks == "Training booked"
    assert updated.next_billing_date == subscription.next_billing_date
    assert updated.renewal_amount == subscription.renewal_amount


def test_record_payment_before_renewal_extends_from_renewal_date(store, approving_gateway):
    subscription, _ = ledger.create(store, "cust-referred", "sw-crm", "MONTHLY", date(2024, 1, 10))

    invoice, updated = ledger.record_payment(store, approving_gateway, subscription.id, date(2024, 2, 1))

    assert invoice.is_paid
    assert invoice.amount == 100000
    assert invoice.period_start == date(2024, 2, 10)
    assert updated.next_renewal_date == date(2024, 3, 10)
    assert updated.next_billing_date == date(2024, 3, 10)


def test_record_payment_when_overdue_restarts_from_today(store, approving_gateway):
    subscription, _ = ledger.create(store, "cust-referred", "sw-crm", "MONTHLY", date(2024, 1, 10))

    invoice, updated = ledger.record_payment(store, approving_gateway, subscription.id, date(2024, 4, 5))

    assert invoice.period_start == date(2024, 4, 5)
    assert updated.next_renewal_date == date(2024, 5, 5)
    assert updated.next_billing_date == date(2024, 5, 5)


def test_declined_payment_changes_nothing(store, declining_gateway):
    subscription, _ = ledger.create(store, "cust-referred", "sw-crm", "MONTHLY", date(2024, 1, 10))

    with pytest.raises(PaymentDeclinedError):
        ledger.record_payment(store, declining_gateway, subscription.id, date(2024, 2, 1))

    assert store.subscriptions.get(subscription.id) == subscription
    assert len(store.invoices.list_for_subscription(subscription.id)) == 1


def test_settle_commission_at_most_once(store):
    subscription, invoice = ledger.create(store, "cust-referred", "sw-crm", "MONTHLY", date(2024, 1, 10))

    commission = ledger.settle_commission(store, invoice)
    assert commission.amount == 30000

    with pytest.raises(DuplicateCommissionError):
        ledger.settle_commission(store, invoice)
    assert store.commissions.count_for_invoice(invoice.id) == 1


def test_settle_commission_without_referral(store):
    _, invoice = ledger.create(store, "cust-direct", "sw-crm", "MONTHLY", date(2024, 1, 10))
    assert ledger.settle_commission(store, invoice) is None
    assert store.commissions.count_for_invoice(invoice.id) == 0


def test_payment_status(store):
    subscription, _ = ledger.create(store, "cust-referred", "sw-crm", "MONTHLY", date(2024, 1, 10))
    assert ledger.get_payment_status(store, subscription.id, date(2024, 2, 1)) == PaymentStatus.PAID

    invoice, updated = ledger.generate_recurring_invoice(store, subscription, date(2024, 2, 15))
    assert ledger.get_payment_status(store, subscription.id, date(2024, 2, 15)) == PaymentStatus.UNPAID
    assert ledger.get_payment_status(store, subscription.id, date(2024, 3, 11)) == PaymentStatus.OVERDUE
    assert ledger.is_invoice_overdue(invoice, updated, date(2024, 3, 11))
    assert not ledger.is_invoice_overdue(replace(invoice, payment_date=date(2024, 3, 1)), updated, date(2024, 3, 11))
