"""
FastAPI dependencies shared by the API routers.
"""
from datetime import date, datetime, timezone
from typing import Optional

from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.repositories.base import BillingStore
from app.repositories.sql import SqlBillingStore
from app.services.billing.errors import BillingError
from app.services.billing.payment_gateway import PaymentGateway, get_payment_gateway


def get_billing_store(db: Session = Depends(get_db)) -> BillingStore:
    """Billing store bound to the request's database session."""
    return SqlBillingStore(db)


def get_gateway() -> PaymentGateway:
    """Payment gateway used for renewal charges."""
    return get_payment_gateway()


def utc_today(today: Optional[date] = None) -> date:
    """Use the given date or fall back to the current UTC date."""
    return today or datetime.now(timezone.utc).date()


def http_error(e: BillingError) -> HTTPException:
    """Map a billing error onto its HTTP status."""
    return HTTPException(status_code=e.http_status, detail=e.message)
