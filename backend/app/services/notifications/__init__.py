"""
Notification delivery (simulated email).
"""
from app.services.notifications.email import send_email
from app.services.notifications.notifier import (
    Notifier,
    EmailNotifier,
    RecordingNotifier,
    deliver,
)

__all__ = [
    "send_email",
    "Notifier",
    "EmailNotifier",
    "RecordingNotifier",
    "deliver",
]
