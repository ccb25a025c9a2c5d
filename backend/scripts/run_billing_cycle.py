"""
Run the recurring billing job once.

Usage: python scripts/run_billing_cycle.py [YYYY-MM-DD]

Without a date the job runs for today (UTC).
"""
import sys
from datetime import date, datetime, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from app.core.database import SessionLocal
from app.repositories.sql import SqlBillingStore
from app.services.billing.billing_job import run_billing_cycle


def main(run_date: date):
    db = SessionLocal()
    try:
        result = run_billing_cycle(SqlBillingStore(db), run_date)
        print(f"✅ Billing cycle for {result.run_date}: {result.invoice_count} invoice(s)")
        for invoice in result.invoices:
            print(f"   {invoice.id}: subscription {invoice.subscription_id}, "
                  f"period {invoice.period_start}, amount {invoice.amount}")
        if result.failed_subscription_ids:
            print(f"❌ Failed: {', '.join(result.failed_subscription_ids)}")
            sys.exit(1)
    finally:
        db.close()


if __name__ == '__main__':
    if len(sys.argv) > 1:
        run_date = date.fromisoformat(sys.argv[1])
    else:
        run_date = datetime.now(timezone.utc).date()
    main(run_date)
