from datetime import date

from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from app.core.config import parse_schedule_time
from app.services.scheduler import billing_jobs
from app.services.scheduler import (
    add_billing_job,
    add_reminder_job,
    get_scheduler,
    stop_scheduler,
)


def test_parse_schedule_time():
    assert parse_schedule_time("00:15") == (0, 15)
    assert parse_schedule_time("23:59") == (23, 59)


def test_jobs_are_registered_with_overlap_guard():
    try:
        add_billing_job()
        add_reminder_job()

        scheduler = get_scheduler()
        billing = scheduler.get_job(billing_jobs.BILLING_JOB_ID)
        reminders = scheduler.get_job(billing_jobs.REMINDER_JOB_ID)

        assert isinstance(billing.trigger, CronTrigger)
        assert isinstance(reminders.trigger, IntervalTrigger)
        assert billing.max_instances == 1
        assert billing.coalesce is True
        assert len(scheduler.get_jobs()) == 2
    finally:
        stop_scheduler()


def test_scheduled_run_uses_its_own_session(db_session, monkeypatch, make_subscription):
    from app.repositories.sql import SqlBillingStore

    store = SqlBillingStore(db_session)
    store.subscriptions.add(make_subscription(next_billing=date(2020, 1, 1)))
    db_session.commit()
    monkeypatch.setattr(billing_jobs, "SessionLocal", lambda: db_session)

    summary = billing_jobs.run_scheduled_billing_cycle()

    assert summary["processed"] == 1
    assert summary["failed"] == 0
    assert summary["invoices"] > 0
    assert store.subscriptions.get("sub-1").next_billing_date > date(2020, 1, 1)
