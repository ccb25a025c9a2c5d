"""
Referral commission attribution.
"""
import logging
import uuid
from typing import Optional

from app.core.config import COMMISSION_RATE_PERCENT
from app.services.billing.billing_models import Commission, Customer, Invoice

logger = logging.getLogger(__name__)


def commission_amount(invoice_amount: int, rate_percent: int = COMMISSION_RATE_PERCENT) -> int:
    """Commission on an amount in minor units, truncated toward zero."""
    return invoice_amount * rate_percent // 100


def attribute(
    invoice: Invoice,
    paying_customer: Customer,
    rate_percent: int = COMMISSION_RATE_PERCENT
) -> Optional[Commission]:
    """
    Build the commission owed for a paid invoice.

    Returns None when the customer was not referred. Does not persist anything
    and does not guard against repeated calls; the ledger owns that.
    """
    if not paying_customer.referred_by_user_id:
        return None
    if not invoice.is_paid:
        raise ValueError(f"Invoice {invoice.id} is unpaid; commissions accrue on payment only")

    commission = Commission(
        id=f"com-{uuid.uuid4().hex[:12]}",
        user_id=paying_customer.referred_by_user_id,
        customer_id=paying_customer.id,
        invoice_id=invoice.id,
        amount=commission_amount(invoice.amount, rate_percent),
        date=invoice.payment_date,
    )
    logger.debug(
        f"Commission {commission.amount} for user {commission.user_id} on invoice {invoice.id}"
    )
    return commission
