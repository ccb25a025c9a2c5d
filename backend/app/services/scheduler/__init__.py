"""
Scheduler service for periodic billing and reminder jobs.
"""
from app.services.scheduler.scheduler_service import (
    get_scheduler,
    start_scheduler,
    stop_scheduler,
)
from app.services.scheduler.billing_jobs import (
    run_scheduled_billing_cycle,
    run_scheduled_reminder_pass,
    add_billing_job,
    add_reminder_job,
)

__all__ = [
    "get_scheduler",
    "start_scheduler",
    "stop_scheduler",
    "run_scheduled_billing_cycle",
    "run_scheduled_reminder_pass",
    "add_billing_job",
    "add_reminder_job",
]
