"""
Checkout and renewal payment: the explicit-payment paths that pair a paid
invoice with its referral commission.
"""
import logging
from datetime import date
from typing import Optional

from app.repositories.base import BillingStore
from app.services.billing import subscription_ledger
from app.services.billing.billing_models import PurchaseResult, RenewalPaymentResult
from app.services.billing.coupon_service import find_coupon
from app.services.billing.errors import CustomerNotFoundError, SoftwareNotFoundError
from app.services.billing.payment_gateway import PaymentGateway

logger = logging.getLogger(__name__)


def purchase_subscription(
    store: BillingStore,
    customer_id: str,
    software_id: str,
    plan,
    today: date,
    coupon_code: Optional[str] = None,
) -> PurchaseResult:
    """
    Subscribe a customer and pay the first invoice (plan price + setup fee).

    A coupon, if given, discounts the first invoice only; renewals stay at the
    catalog plan price. The referrer, if any, is credited on the first payment.

    Raises:
        CustomerNotFoundError, SoftwareNotFoundError, CouponNotFoundError, InvalidPlanError
    """
    customer = store.customers.get_customer(customer_id)
    if not customer:
        raise CustomerNotFoundError(customer_id)
    software = store.catalog.get_software(software_id)
    if not software:
        raise SoftwareNotFoundError(software_id)
    coupon = find_coupon(store, coupon_code) if coupon_code else None

    with store.transaction():
        subscription, invoice = subscription_ledger.create(
            store, customer_id, software_id, plan, today, coupon=coupon
        )
        commission = subscription_ledger.settle_commission(store, invoice)

    full_price = subscription.renewal_amount + software.setup_fee
    return PurchaseResult(
        subscription=subscription,
        invoice=invoice,
        commission=commission,
        coupon_code=coupon.code if coupon else None,
        discount_amount=full_price - invoice.amount,
    )


def pay_renewal(
    store: BillingStore,
    gateway: PaymentGateway,
    subscription_id: str,
    today: date,
) -> RenewalPaymentResult:
    """
    Take a renewal payment and credit the referrer, atomically.

    Either the paid invoice, the date change and the commission are all stored,
    or none of them is.

    Raises:
        SubscriptionNotFoundError, PaymentDeclinedError, CustomerNotFoundError
    """
    # Resolve the customer before charging; crediting the referrer needs it
    subscription = subscription_ledger.get_subscription(store, subscription_id)
    if not store.customers.get_customer(subscription.customer_id):
        raise CustomerNotFoundError(subscription.customer_id)

    with store.transaction():
        invoice, subscription = subscription_ledger.record_payment(
            store, gateway, subscription_id, today
        )
        commission = subscription_ledger.settle_commission(store, invoice)

    logger.info(
        f"Renewal payment for subscription {subscription_id} settled "
        f"(invoice {invoice.id}, commission {commission.id if commission else 'none'})"
    )
    return RenewalPaymentResult(invoice=invoice, subscription=subscription, commission=commission)
