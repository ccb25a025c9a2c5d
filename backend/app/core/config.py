"""
Configuration management.
Loads from config_local.py (gitignored) for secrets, with defaults.
"""
from typing import List, Optional

# Try to import local config (gitignored)
try:
    from app.config_local import (
        DATABASE_DSN,
        COMMISSION_RATE_PERCENT,
        PAYMENT_DECLINE_RATE,
        CURRENCY_CODE,
        CURRENCY_MINOR_UNITS,
        ENABLE_SCHEDULER,
        BILLING_JOB_SCHEDULE,
        REMINDER_JOB_INTERVAL_MINUTES,
        EMAIL_FROM_NAME,
        EMAIL_FROM_ADDRESS,
    )
    # CORS origins are optional in older local configs
    try:
        from app.config_local import CORS_ORIGINS
    except ImportError:
        CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]
except ImportError:
    # Fallback defaults (SQLite file database, scheduler off)
    DATABASE_DSN: str = "sqlite:///./reseller_billing.db"
    COMMISSION_RATE_PERCENT: int = 20
    PAYMENT_DECLINE_RATE: float = 0.25  # Simulated gateway decline probability
    CURRENCY_CODE: str = "INR"
    CURRENCY_MINOR_UNITS: int = 100  # paise per rupee
    ENABLE_SCHEDULER: bool = False
    BILLING_JOB_SCHEDULE: str = "00:15"  # UTC HH:MM
    REMINDER_JOB_INTERVAL_MINUTES: int = 60
    EMAIL_FROM_NAME: str = "Inflow Billing"
    EMAIL_FROM_ADDRESS: str = "billing@inflow.co.in"
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]


def get_settings():
    """Return settings object (for FastAPI dependency injection if needed)."""
    return type("Settings", (), {
        "database_dsn": DATABASE_DSN,
        "commission_rate_percent": COMMISSION_RATE_PERCENT,
        "payment_decline_rate": PAYMENT_DECLINE_RATE,
        "currency_code": CURRENCY_CODE,
        "currency_minor_units": CURRENCY_MINOR_UNITS,
        "enable_scheduler": ENABLE_SCHEDULER,
        "billing_job_schedule": BILLING_JOB_SCHEDULE,
        "reminder_job_interval_minutes": REMINDER_JOB_INTERVAL_MINUTES,
        "email_from_name": EMAIL_FROM_NAME,
        "email_from_address": EMAIL_FROM_ADDRESS,
        "cors_origins": CORS_ORIGINS,
    })()


def parse_schedule_time(value: Optional[str]) -> tuple:
    """Parse an 'HH:MM' schedule string into (hour, minute)."""
    hour, minute = map(int, (value or "00:00").split(":"))
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(f"Invalid schedule time: {value}")
    return hour, minute
