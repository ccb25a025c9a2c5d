"""
Task reminders and ticket notifications.
"""
from app.services.reminders.reminder_scheduler import (
    run_reminder_pass,
    reminder_type_for,
    notify_new_ticket,
    announce_ticket,
    list_notifications,
    mark_notification_read,
)

__all__ = [
    "run_reminder_pass",
    "reminder_type_for",
    "notify_new_ticket",
    "announce_ticket",
    "list_notifications",
    "mark_notification_read",
]
