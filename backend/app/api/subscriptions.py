"""
Subscription management API endpoints.
"""
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import Optional
from datetime import date

from app.core.config import CURRENCY_CODE
from app.dependencies import get_billing_store, get_gateway, http_error, utc_today
from app.repositories.base import BillingStore
from app.services.billing import PaymentStatus, ProjectStatus, SubscriptionPlan
from app.services.billing.billing_models import Commission, Invoice, Subscription
from app.services.billing.checkout_service import pay_renewal, purchase_subscription
from app.services.billing.errors import BillingError
from app.services.billing.payment_gateway import PaymentGateway
from app.services.billing.subscription_ledger import (
    change_plan,
    get_payment_status,
    get_subscription,
    update_details,
)

router = APIRouter()


# Request Models
class PurchaseRequest(BaseModel):
    customer_id: str
    software_id: str
    plan: SubscriptionPlan
    coupon_code: Optional[str] = None
    today: Optional[date] = None


class ChangePlanRequest(BaseModel):
    plan: SubscriptionPlan


class UpdateDetailsRequest(BaseModel):
    """CRM fields only; billing fields cannot be edited here."""
    status: Optional[ProjectStatus] = None
    next_action_date: Optional[date] = None
    remarks: Optional[str] = None


class PayRenewalRequest(BaseModel):
    today: Optional[date] = None


# Response Models
class SubscriptionResponse(BaseModel):
    id: str
    customer_id: str
    software_id: str
    plan: str
    start_date: date
    next_renewal_date: date
    next_billing_date: date
    renewal_amount: int
    status: str
    onboarding_date: date
    training_date: date
    next_action_date: Optional[date]
    remarks: Optional[str]
    version: int


class InvoiceResponse(BaseModel):
    id: str
    subscription_id: str
    customer_id: str
    amount: int
    currency: str = CURRENCY_CODE
    issue_date: date
    period_start: date
    payment_date: Optional[date]
    is_paid: bool


class CommissionResponse(BaseModel):
    id: str
    user_id: str
    customer_id: str
    invoice_id: str
    amount: int
    currency: str = CURRENCY_CODE
    date: date


class PurchaseResponse(BaseModel):
    subscription: SubscriptionResponse
    invoice: InvoiceResponse
    commission: Optional[CommissionResponse]
    coupon_code: Optional[str]
    discount_amount: int


class RenewalPaymentResponse(BaseModel):
    subscription: SubscriptionResponse
    invoice: InvoiceResponse
    commission: Optional[CommissionResponse]


class PaymentStatusResponse(BaseModel):
    subscription_id: str
    payment_status: PaymentStatus
    as_of: date


def subscription_response(subscription: Subscription) -> SubscriptionResponse:
    return SubscriptionResponse(
        id=subscription.id,
        customer_id=subscription.customer_id,
        software_id=subscription.software_id,
        plan=subscription.plan.value,
        start_date=subscription.start_date,
        next_renewal_date=subscription.next_renewal_date,
        next_billing_date=subscription.next_billing_date,
        renewal_amount=subscription.renewal_amount,
        status=subscription.status.value,
        onboarding_date=subscription.onboarding_date,
        training_date=subscription.training_date,
        next_action_date=subscription.next_action_date,
        remarks=subscription.remarks,
        version=subscription.version,
    )


def invoice_response(invoice: Invoice) -> InvoiceResponse:
    return InvoiceResponse(
        id=invoice.id,
        subscription_id=invoice.subscription_id,
        customer_id=invoice.customer_id,
        amount=invoice.amount,
        issue_date=invoice.issue_date,
        period_start=invoice.period_start,
        payment_date=invoice.payment_date,
        is_paid=invoice.is_paid,
    )


def commission_response(commission: Optional[Commission]) -> Optional[CommissionResponse]:
    if commission is None:
        return None
    return CommissionResponse(
        id=commission.id,
        user_id=commission.user_id,
        customer_id=commission.customer_id,
        invoice_id=commission.invoice_id,
        amount=commission.amount,
        date=commission.date,
    )


@router.post("", response_model=PurchaseResponse, status_code=201)
async def create_subscription(
    request: PurchaseRequest,
    store: BillingStore = Depends(get_billing_store),
):
    """Buy a subscription; the first invoice (plan price + setup fee) is paid at checkout."""
    try:
        result = purchase_subscription(
            store,
            request.customer_id,
            request.software_id,
            request.plan,
            utc_today(request.today),
            coupon_code=request.coupon_code,
        )
    except BillingError as e:
        raise http_error(e)

    return PurchaseResponse(
        subscription=subscription_response(result.subscription),
        invoice=invoice_response(result.invoice),
        commission=commission_response(result.commission),
        coupon_code=result.coupon_code,
        discount_amount=result.discount_amount,
    )


@router.get("/{subscription_id}", response_model=SubscriptionResponse)
async def read_subscription(
    subscription_id: str,
    store: BillingStore = Depends(get_billing_store),
):
    """Get a subscription by ID."""
    try:
        return subscription_response(get_subscription(store, subscription_id))
    except BillingError as e:
        raise http_error(e)


@router.patch("/{subscription_id}", response_model=SubscriptionResponse)
async def update_subscription(
    subscription_id: str,
    request: UpdateDetailsRequest,
    store: BillingStore = Depends(get_billing_store),
):
    """Update delivery status, next action date and remarks."""
    try:
        subscription = update_details(
            store,
            subscription_id,
            status=request.status,
            next_action_date=request.next_action_date,
            remarks=request.remarks,
        )
    except BillingError as e:
        raise http_error(e)
    return subscription_response(subscription)


@router.post("/{subscription_id}/change-plan", response_model=SubscriptionResponse)
async def change_subscription_plan(
    subscription_id: str,
    request: ChangePlanRequest,
    store: BillingStore = Depends(get_billing_store),
):
    """Switch plan from the next cycle on. No invoice is issued."""
    try:
        subscription = change_plan(store, subscription_id, request.plan)
    except BillingError as e:
        raise http_error(e)
    return subscription_response(subscription)


@router.post("/{subscription_id}/pay", response_model=RenewalPaymentResponse)
async def pay_subscription_renewal(
    subscription_id: str,
    request: Optional[PayRenewalRequest] = None,
    store: BillingStore = Depends(get_billing_store),
    gateway: PaymentGateway = Depends(get_gateway),
):
    """Charge the renewal amount and extend the subscription by one interval."""
    today = utc_today(request.today if request else None)
    try:
        result = pay_renewal(store, gateway, subscription_id, today)
    except BillingError as e:
        raise http_error(e)

    return RenewalPaymentResponse(
        subscription=subscription_response(result.subscription),
        invoice=invoice_response(result.invoice),
        commission=commission_response(result.commission),
    )


@router.get("/{subscription_id}/payment-status", response_model=PaymentStatusResponse)
async def read_payment_status(
    subscription_id: str,
    today: Optional[date] = None,
    store: BillingStore = Depends(get_billing_store),
):
    """PAID, UNPAID or OVERDUE, derived from the subscription's invoices."""
    as_of = utc_today(today)
    try:
        status = get_payment_status(store, subscription_id, as_of)
    except BillingError as e:
        raise http_error(e)
    return PaymentStatusResponse(subscription_id=subscription_id, payment_status=status, as_of=as_of)
