"""
Billing API endpoints: on-demand job triggers, invoice and commission listings,
coupon catalog and evaluation.
"""
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import Optional, List
from datetime import date
from decimal import Decimal

from app.api.subscriptions import (
    CommissionResponse,
    InvoiceResponse,
    commission_response,
    invoice_response,
)
from app.core.config import CURRENCY_CODE
from app.dependencies import get_billing_store, http_error, utc_today
from app.repositories.base import BillingStore
from app.services.billing.billing_job import run_billing_cycle
from app.services.billing.billing_models import DiscountCoupon, DiscountType
from app.services.billing.coupon_service import (
    create_coupon,
    evaluate,
    find_coupon,
    list_coupons,
    update_coupon,
)
from app.services.billing.errors import BillingError
from app.services.notifications.notifier import EmailNotifier
from app.services.reminders.reminder_scheduler import run_reminder_pass

router = APIRouter()


class RunRequest(BaseModel):
    today: Optional[date] = None


class BillingRunResponse(BaseModel):
    run_date: date
    invoice_count: int
    invoices: List[InvoiceResponse]
    processed_subscription_ids: List[str]
    skipped_subscription_ids: List[str]
    failed_subscription_ids: List[str]


class ReminderRunResponse(BaseModel):
    run_date: date
    created: int
    notification_ids: List[str]


class CouponEvaluateRequest(BaseModel):
    code: str
    software_id: str
    amount: int  # minor units
    today: Optional[date] = None


class CouponEvaluateResponse(BaseModel):
    code: str
    original_amount: int
    final_amount: int
    discount_amount: int
    applied: bool
    currency: str = CURRENCY_CODE


@router.post("/billing/run", response_model=BillingRunResponse)
async def trigger_billing_cycle(
    request: Optional[RunRequest] = None,
    store: BillingStore = Depends(get_billing_store),
):
    """Run the recurring billing job now."""
    today = utc_today(request.today if request else None)
    try:
        result = run_billing_cycle(store, today)
    except BillingError as e:
        raise http_error(e)

    return BillingRunResponse(
        run_date=result.run_date,
        invoice_count=result.invoice_count,
        invoices=[invoice_response(i) for i in result.invoices],
        processed_subscription_ids=result.processed_subscription_ids,
        skipped_subscription_ids=result.skipped_subscription_ids,
        failed_subscription_ids=result.failed_subscription_ids,
    )


@router.post("/reminders/run", response_model=ReminderRunResponse)
async def trigger_reminder_pass(
    request: Optional[RunRequest] = None,
    store: BillingStore = Depends(get_billing_store),
):
    """Run one task reminder pass now."""
    today = utc_today(request.today if request else None)
    created = run_reminder_pass(store, today, notifier=EmailNotifier(store))
    return ReminderRunResponse(
        run_date=today,
        created=len(created),
        notification_ids=[n.id for n in created],
    )


@router.get("/customers/{customer_id}/invoices", response_model=List[InvoiceResponse])
async def list_customer_invoices(
    customer_id: str,
    store: BillingStore = Depends(get_billing_store),
):
    """Invoices of a customer, newest first."""
    return [invoice_response(i) for i in store.invoices.list_for_customer(customer_id)]


@router.get("/users/{user_id}/commissions", response_model=List[CommissionResponse])
async def list_user_commissions(
    user_id: str,
    store: BillingStore = Depends(get_billing_store),
):
    """Commissions earned by a sales user, newest first."""
    return [commission_response(c) for c in store.commissions.list_for_user(user_id)]


@router.post("/coupons/evaluate", response_model=CouponEvaluateResponse)
async def evaluate_coupon(
    request: CouponEvaluateRequest,
    store: BillingStore = Depends(get_billing_store),
):
    """Price an amount with a coupon code. Inapplicable coupons leave the amount unchanged."""
    today = utc_today(request.today)
    try:
        coupon = find_coupon(store, request.code)
    except BillingError as e:
        raise http_error(e)

    final_amount = evaluate(coupon, request.software_id, request.amount, today)
    return CouponEvaluateResponse(
        code=coupon.code,
        original_amount=request.amount,
        final_amount=final_amount,
        discount_amount=request.amount - final_amount,
        applied=final_amount != request.amount,
    )


class CouponCreateRequest(BaseModel):
    code: str
    discount_type: DiscountType
    discount_value: Decimal  # percentage points, or minor units for FIXED_AMOUNT
    valid_from: date
    valid_until: date
    applicable_software_ids: List[str] = []
    is_active: bool = True


class CouponUpdateRequest(BaseModel):
    code: Optional[str] = None
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[Decimal] = None
    valid_from: Optional[date] = None
    valid_until: Optional[date] = None
    applicable_software_ids: Optional[List[str]] = None
    is_active: Optional[bool] = None


class CouponResponse(BaseModel):
    id: str
    code: str
    discount_type: str
    discount_value: Decimal
    valid_from: date
    valid_until: date
    is_active: bool
    applicable_software_ids: List[str]


def coupon_response(coupon: DiscountCoupon) -> CouponResponse:
    return CouponResponse(
        id=coupon.id,
        code=coupon.code,
        discount_type=coupon.discount_type.value,
        discount_value=coupon.discount_value,
        valid_from=coupon.valid_from,
        valid_until=coupon.valid_until,
        is_active=coupon.is_active,
        applicable_software_ids=coupon.applicable_software_ids,
    )


@router.get("/coupons", response_model=List[CouponResponse])
async def list_coupon_catalog(store: BillingStore = Depends(get_billing_store)):
    """All coupons, active or not, ordered by code."""
    return [coupon_response(c) for c in list_coupons(store)]


@router.post("/coupons", response_model=CouponResponse, status_code=201)
async def add_coupon(
    request: CouponCreateRequest,
    store: BillingStore = Depends(get_billing_store),
):
    """Add a coupon. Codes are unique ignoring case."""
    try:
        coupon = create_coupon(
            store,
            code=request.code,
            discount_type=request.discount_type,
            discount_value=request.discount_value,
            valid_from=request.valid_from,
            valid_until=request.valid_until,
            applicable_software_ids=request.applicable_software_ids,
            is_active=request.is_active,
        )
    except BillingError as e:
        raise http_error(e)
    return coupon_response(coupon)


@router.patch("/coupons/{coupon_id}", response_model=CouponResponse)
async def edit_coupon(
    coupon_id: str,
    request: CouponUpdateRequest,
    store: BillingStore = Depends(get_billing_store),
):
    """
    Edit a coupon: toggle is_active, move the validity window, change the
    software list or the discount. Coupons are never deleted.
    """
    changes = {}
    for field_name in (
        "code",
        "discount_type",
        "discount_value",
        "valid_from",
        "valid_until",
        "applicable_software_ids",
        "is_active",
    ):
        value = getattr(request, field_name)
        if value is not None:
            changes[field_name] = value

    try:
        coupon = update_coupon(store, coupon_id, **changes)
    except BillingError as e:
        raise http_error(e)
    return coupon_response(coupon)
