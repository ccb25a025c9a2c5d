"""
Periodic billing jobs.

- billing_cycle: daily, issues recurring invoices for subscriptions past their billing date
- task_reminders: every N minutes, creates due-soon/overdue task reminders

Each run opens its own database session. max_instances=1 keeps runs of the same
job from overlapping in this process; the per-subscription version check and the
(subscription, period) unique key cover overlapping runs across processes.
"""
import logging
from datetime import datetime, timezone
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from app.core.config import BILLING_JOB_SCHEDULE, REMINDER_JOB_INTERVAL_MINUTES, parse_schedule_time
from app.core.database import SessionLocal
from app.repositories.sql import SqlBillingStore
from app.services.billing.billing_job import run_billing_cycle
from app.services.notifications.notifier import EmailNotifier
from app.services.reminders.reminder_scheduler import run_reminder_pass
from app.services.scheduler.scheduler_service import get_scheduler

logger = logging.getLogger(__name__)

BILLING_JOB_ID = "billing_cycle"
REMINDER_JOB_ID = "task_reminders"


def run_scheduled_billing_cycle():
    """Run the recurring billing job for today (UTC)."""
    db = SessionLocal()
    try:
        today = datetime.now(timezone.utc).date()
        result = run_billing_cycle(SqlBillingStore(db), today)
        return {
            "invoices": result.invoice_count,
            "processed": len(result.processed_subscription_ids),
            "failed": len(result.failed_subscription_ids),
        }
    except Exception as e:
        logger.error(f"Error in billing cycle job: {e}", exc_info=True)
        db.rollback()
        raise
    finally:
        db.close()


def run_scheduled_reminder_pass():
    """Run one task reminder pass for today (UTC)."""
    db = SessionLocal()
    try:
        today = datetime.now(timezone.utc).date()
        store = SqlBillingStore(db)
        created = run_reminder_pass(store, today, notifier=EmailNotifier(store))
        return {"created": len(created)}
    except Exception as e:
        logger.error(f"Error in task reminder job: {e}", exc_info=True)
        db.rollback()
        raise
    finally:
        db.close()


def add_billing_job():
    """Add the daily billing job (BILLING_JOB_SCHEDULE, UTC)."""
    scheduler = get_scheduler()
    hour, minute = parse_schedule_time(BILLING_JOB_SCHEDULE)

    scheduler.add_job(
        run_scheduled_billing_cycle,
        trigger=CronTrigger(hour=hour, minute=minute, timezone="UTC"),
        id=BILLING_JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    logger.info(f"Added billing cycle job (daily at {hour:02d}:{minute:02d} UTC)")


def add_reminder_job():
    """Add the task reminder job (every REMINDER_JOB_INTERVAL_MINUTES)."""
    scheduler = get_scheduler()

    scheduler.add_job(
        run_scheduled_reminder_pass,
        trigger=IntervalTrigger(minutes=REMINDER_JOB_INTERVAL_MINUTES),
        id=REMINDER_JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    logger.info(f"Added task reminder job (every {REMINDER_JOB_INTERVAL_MINUTES} min)")
