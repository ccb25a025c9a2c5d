"""
Recurring billing job.

Finds subscriptions whose billing date has passed and issues an unpaid invoice for
every missed cycle. Recurring invoices are unpaid, so no commission is attributed
here; commissions accrue on explicit payment (see checkout_service.pay_renewal).
"""
import logging
from datetime import date

from app.repositories.base import BillingStore
from app.services.billing.billing_models import BillingCycleResult
from app.services.billing.errors import (
    ConcurrentUpdateError,
    InvariantViolationError,
    SubscriptionNotFoundError,
)
from app.services.billing.subscription_ledger import generate_recurring_invoice

logger = logging.getLogger(__name__)


def run_billing_cycle(store: BillingStore, today: date) -> BillingCycleResult:
    """
    Generate recurring invoices for all subscriptions with next_billing_date < today.

    Each subscription is processed once per run, under its lock and in its own
    transaction; a failure on one subscription does not undo the others.

    Args:
        store: Billing store
        today: Run date

    Returns:
        BillingCycleResult with the invoices created

    Raises:
        InvariantViolationError: A cycle was about to be invoiced twice
    """
    result = BillingCycleResult(run_date=today)
    processed = set()

    due = store.subscriptions.list_due_for_billing(today)
    logger.info(f"Billing cycle for {today}: {len(due)} subscription(s) due")

    for candidate in due:
        if candidate.id in processed:
            continue
        processed.add(candidate.id)

        try:
            with store.transaction(), store.subscription_lock(candidate.id):
                # Re-read under the lock; another run may have advanced it already
                subscription = store.subscriptions.get(candidate.id)
                if subscription is None:
                    raise SubscriptionNotFoundError(candidate.id)
                if not subscription.next_billing_date < today:
                    result.skipped_subscription_ids.append(subscription.id)
                    continue

                invoices = []
                while subscription.next_billing_date < today:
                    invoice, subscription = generate_recurring_invoice(store, subscription, today)
                    invoices.append(invoice)

            result.invoices.extend(invoices)
            result.processed_subscription_ids.append(subscription.id)

        except InvariantViolationError as e:
            logger.critical(f"Billing invariant violated for subscription {candidate.id}: {e}")
            raise
        except ConcurrentUpdateError as e:
            logger.warning(f"Skipping subscription {candidate.id}: {e}")
            result.skipped_subscription_ids.append(candidate.id)
        except Exception as e:
            logger.error(f"Error billing subscription {candidate.id}: {e}", exc_info=True)
            result.failed_subscription_ids.append(candidate.id)

    logger.info(
        f"Billing cycle completed: {result.invoice_count} invoice(s) for "
        f"{len(result.processed_subscription_ids)} subscription(s), "
        f"{len(result.skipped_subscription_ids)} skipped, {len(result.failed_subscription_ids)} failed"
    )
    return result
