from datetime import date

import pytest

from app.services.billing.checkout_service import pay_renewal, purchase_subscription
from app.services.billing.errors import (
    CouponNotFoundError,
    CustomerNotFoundError,
    PaymentDeclinedError,
)
from app.services.billing.payment_gateway import ChargeResult, PaymentGateway


def test_purchase_credits_referrer(store):
    result = purchase_subscription(store, "cust-referred", "sw-crm", "MONTHLY", date(2024, 1, 10))

    assert result.invoice.amount == 150000
    assert result.invoice.is_paid
    assert result.commission.user_id == "user-sales-1"
    assert result.commission.amount == 30000
    assert result.discount_amount == 0
    assert store.commissions.list_for_user("user-sales-1") == [result.commission]


def test_purchase_without_referral_has_no_commission(store):
    result = purchase_subscription(store, "cust-direct", "sw-crm", "MONTHLY", date(2024, 1, 10))
    assert result.commission is None
    assert store.commissions.count_for_invoice(result.invoice.id) == 0


def test_purchase_with_coupon(store):
    result = purchase_subscription(
        store, "cust-referred", "sw-crm", "MONTHLY", date(2024, 6, 10), coupon_code="summer20"
    )
    assert result.invoice.amount == 120000
    assert result.discount_amount == 30000
    assert result.coupon_code == "SUMMER20"
    assert result.commission.amount == 24000
    assert result.subscription.renewal_amount == 100000


def test_purchase_with_inapplicable_coupon_charges_full_price(store):
    result = purchase_subscription(
        store, "cust-direct", "sw-crm", "MONTHLY", date(2024, 1, 10), coupon_code="SUMMER20"
    )
    assert result.invoice.amount == 150000
    assert result.discount_amount == 0


def test_purchase_with_unknown_coupon_fails_without_writes(store):
    with pytest.raises(CouponNotFoundError):
        purchase_subscription(store, "cust-direct", "sw-crm", "MONTHLY", date(2024, 1, 10), coupon_code="BOGUS")
    assert store.subscriptions.list_for_customer("cust-direct") == []


def test_purchase_for_unknown_customer_fails(store):
    with pytest.raises(CustomerNotFoundError):
        purchase_subscription(store, "cust-missing", "sw-crm", "MONTHLY", date(2024, 1, 10))


def test_pay_renewal_on_overdue_subscription(store, approving_gateway):
    purchase = purchase_subscription(store, "cust-referred", "sw-crm", "MONTHLY", date(2024, 1, 10))

    result = pay_renewal(store, approving_gateway, purchase.subscription.id, date(2024, 4, 5))

    assert result.invoice.is_paid
    assert result.invoice.amount == 100000
    assert result.subscription.next_renewal_date == date(2024, 5, 5)
    assert result.subscription.next_billing_date == date(2024, 5, 5)
    assert result.commission.amount == 20000
    assert result.commission.invoice_id == result.invoice.id
    assert len(store.commissions.list_for_user("user-sales-1")) == 2


def test_declined_renewal_leaves_no_trace(store, declining_gateway):
    purchase = purchase_subscription(store, "cust-referred", "sw-crm", "MONTHLY", date(2024, 1, 10))
    before = store.subscriptions.get(purchase.subscription.id)

    with pytest.raises(PaymentDeclinedError):
        pay_renewal(store, declining_gateway, purchase.subscription.id, date(2024, 2, 1))

    assert store.subscriptions.get(purchase.subscription.id) == before
    assert len(store.invoices.list_for_subscription(before.id)) == 1
    assert len(store.commissions.list_for_user("user-sales-1")) == 1


def test_each_paid_invoice_has_at_most_one_commission(store, approving_gateway):
    purchase = purchase_subscription(store, "cust-referred", "sw-crm", "MONTHLY", date(2024, 1, 10))
    pay_renewal(store, approving_gateway, purchase.subscription.id, date(2024, 2, 1))
    pay_renewal(store, approving_gateway, purchase.subscription.id, date(2024, 2, 2))

    for invoice in store.invoices.list_for_customer("cust-referred"):
        assert store.commissions.count_for_invoice(invoice.id) == 1


class CountingGateway(PaymentGateway):

    def __init__(self):
        self.charges = []

    def charge(self, amount, reference):
        self.charges.append((amount, reference))
        return ChargeResult.APPROVED


def test_renewal_for_missing_customer_is_not_charged(store, make_subscription):
    subscription = store.subscriptions.add(make_subscription(customer_id="cust-deleted"))
    gateway = CountingGateway()

    with pytest.raises(CustomerNotFoundError):
        pay_renewal(store, gateway, subscription.id, date(2024, 1, 5))

    assert gateway.charges == []
    assert store.invoices.list_for_subscription(subscription.id) == []
