"""
Notification inbox and new-ticket notice API endpoints.
"""
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime

from app.dependencies import get_billing_store, http_error
from app.repositories.base import BillingStore
from app.services.billing.billing_models import Notification
from app.services.billing.errors import BillingError
from app.services.notifications.notifier import EmailNotifier
from app.services.reminders.reminder_scheduler import announce_ticket, list_notifications, mark_notification_read

router = APIRouter()


class NotificationResponse(BaseModel):
    id: str
    user_id: str
    ticket_id: Optional[str]
    title: str
    message: str
    type: str
    is_read: bool
    created_at: datetime


def notification_response(notification: Notification) -> NotificationResponse:
    return NotificationResponse(
        id=notification.id,
        user_id=notification.user_id,
        ticket_id=notification.ticket_id,
        title=notification.title,
        message=notification.message,
        type=notification.type.value,
        is_read=notification.is_read,
        created_at=notification.created_at,
    )


@router.get("/users/{user_id}/notifications", response_model=List[NotificationResponse])
async def list_user_notifications(
    user_id: str,
    store: BillingStore = Depends(get_billing_store),
):
    """Notifications for a user, newest first."""
    return [notification_response(n) for n in list_notifications(store, user_id)]


@router.post("/notifications/{notification_id}/read", response_model=NotificationResponse)
async def read_notification(
    notification_id: str,
    store: BillingStore = Depends(get_billing_store),
):
    """Mark a notification as read."""
    try:
        notification = mark_notification_read(store, notification_id)
    except BillingError as e:
        raise http_error(e)
    return notification_response(notification)


@router.post("/tickets/{ticket_id}/opened", response_model=List[NotificationResponse])
async def ticket_opened(
    ticket_id: str,
    store: BillingStore = Depends(get_billing_store),
):
    """Notify every admin that a ticket was opened. Repeated calls notify nobody."""
    try:
        created = announce_ticket(store, ticket_id, notifier=EmailNotifier(store))
    except BillingError as e:
        raise http_error(e)
    return [notification_response(n) for n in created]
