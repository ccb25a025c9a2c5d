"""
Task reminder pass.

For every open, assigned ticket with a due date, ensure at most one reminder of
each type exists:
- due date before today           -> TASK_OVERDUE
- due date today or tomorrow      -> TASK_DUE_SOON

Reminders are only ever added. A ticket that was DUE_SOON and is now overdue
keeps its DUE_SOON reminder next to the new OVERDUE one. Running the pass again
with unchanged tickets creates nothing. The store keeps one reminder per
(ticket, type), so overlapping passes in other workers cannot duplicate one.
"""
import logging
import uuid
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional

from app.repositories.base import BillingStore
from app.services.billing.billing_models import (
    Notification,
    NotificationType,
    SupportTicket,
    TicketStatus,
)
from app.services.billing.errors import DuplicateReminderError, NotificationNotFoundError, TicketNotFoundError
from app.services.notifications.notifier import Notifier, deliver

logger = logging.getLogger(__name__)


def _shorten(text: str, length: int) -> str:
    return f"{text[:length]}..."


def reminder_type_for(ticket: SupportTicket, today: date) -> Optional[NotificationType]:
    """Which reminder a ticket calls for on `today`, if any."""
    if not ticket.due_date or ticket.status == TicketStatus.CLOSED or not ticket.assigned_to_id:
        return None
    if ticket.due_date < today:
        return NotificationType.TASK_OVERDUE
    if today <= ticket.due_date <= today + timedelta(days=1):
        return NotificationType.TASK_DUE_SOON
    return None


def build_reminder(ticket: SupportTicket, notification_type: NotificationType, now: datetime) -> Notification:
    due = ticket.due_date.isoformat()
    if notification_type == NotificationType.TASK_OVERDUE:
        title = f"🔥 OVERDUE: {_shorten(ticket.subject, 20)}"
        message = f"This task was due on {due}."
    else:
        title = f"⏰ Due Soon: {_shorten(ticket.subject, 20)}"
        message = f"This task is due on {due}."

    return Notification(
        id=f"notif-{uuid.uuid4().hex[:12]}",
        user_id=ticket.assigned_to_id,
        ticket_id=ticket.id,
        title=title,
        message=message,
        type=notification_type,
        created_at=now,
    )


def run_reminder_pass(
    store: BillingStore,
    today: date,
    notifier: Optional[Notifier] = None,
    now: Optional[datetime] = None,
) -> List[Notification]:
    """
    Create missing due-soon/overdue reminders.

    Args:
        store: Billing store
        today: Pass date
        notifier: Sink that receives newly created reminders (optional)
        now: Creation timestamp (defaults to current UTC time)

    Returns:
        Reminders created by this pass
    """
    now = now or datetime.now(timezone.utc)
    created = []

    candidates = store.tickets.list_reminder_candidates(today + timedelta(days=1))
    for ticket in candidates:
        notification_type = reminder_type_for(ticket, today)
        if notification_type is None:
            continue
        try:
            # One transaction per reminder so a lost race discards only that row
            with store.transaction():
                if store.notifications.exists_for_ticket(ticket.id, notification_type):
                    continue
                created.append(store.notifications.add(build_reminder(ticket, notification_type, now)))
        except DuplicateReminderError:
            logger.info(f"{notification_type.value} reminder for ticket {ticket.id} was stored by a concurrent pass")

    logger.info(f"Reminder pass for {today}: {len(candidates)} candidate ticket(s), {len(created)} reminder(s) created")

    if notifier and created:
        deliver(notifier, created)
    return created


def notify_new_ticket(
    store: BillingStore,
    ticket: SupportTicket,
    creator_name: str,
    notifier: Optional[Notifier] = None,
    now: Optional[datetime] = None,
) -> List[Notification]:
    """Tell every admin that a ticket was opened."""
    now = now or datetime.now(timezone.utc)
    created = []

    with store.transaction():
        for admin_id in store.customers.list_admin_user_ids():
            created.append(store.notifications.add(Notification(
                id=f"notif-{uuid.uuid4().hex[:12]}",
                user_id=admin_id,
                ticket_id=ticket.id,
                title=f"New Ticket: {_shorten(ticket.subject, 30)}",
                message=f"A new support ticket was created by {creator_name}.",
                type=NotificationType.NEW_TICKET,
                created_at=now,
            )))

    if notifier and created:
        deliver(notifier, created)
    return created


def announce_ticket(
    store: BillingStore,
    ticket_id: str,
    notifier: Optional[Notifier] = None,
    now: Optional[datetime] = None,
) -> List[Notification]:
    """
    Send the new-ticket notice for a ticket the help desk just opened.

    The creator is named by their user record when one exists. A ticket that
    already has NEW_TICKET notifications is not announced again.

    Raises:
        TicketNotFoundError
    """
    ticket = store.tickets.get(ticket_id)
    if not ticket:
        raise TicketNotFoundError(ticket_id)
    if store.notifications.exists_for_ticket(ticket.id, NotificationType.NEW_TICKET):
        logger.info(f"Ticket {ticket.id} was already announced")
        return []

    creator = store.customers.get_user(ticket.creator_id) if ticket.creator_id else None
    creator_name = creator.name if creator else (ticket.creator_id or "unknown user")
    return notify_new_ticket(store, ticket, creator_name, notifier=notifier, now=now)


def list_notifications(store: BillingStore, user_id: str) -> List[Notification]:
    return store.notifications.list_for_user(user_id)


def mark_notification_read(store: BillingStore, notification_id: str) -> Notification:
    with store.transaction():
        notification = store.notifications.mark_read(notification_id)
    if not notification:
        raise NotificationNotFoundError(notification_id)
    return notification
