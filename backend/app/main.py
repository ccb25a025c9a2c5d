"""
FastAPI application entry point.
"""
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.api import health, subscriptions, billing, notifications
from app.core.config import get_settings

logger = logging.getLogger(__name__)

app_settings = get_settings()

app = FastAPI(
    title="Reseller Billing API",
    description="Subscription billing, referral commissions and task reminders",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, tags=["health"])
app.include_router(subscriptions.router, prefix="/api/subscriptions", tags=["subscriptions"])
app.include_router(billing.router, prefix="/api", tags=["billing"])
app.include_router(notifications.router, prefix="/api", tags=["notifications"])


@app.on_event("startup")
async def startup_event():
    """Start the billing and reminder jobs if enabled."""
    if not app_settings.enable_scheduler:
        logger.info("Scheduler disabled (ENABLE_SCHEDULER is off)")
        return

    from app.services.scheduler import start_scheduler
    try:
        start_scheduler()
    except Exception as e:
        logger.error(f"Could not start scheduler: {e}", exc_info=True)


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    from app.services.scheduler import stop_scheduler
    stop_scheduler()
