"""
Notification sink.

The engine hands notifications to a Notifier after they are stored. Delivery is
fire-and-forget: a failing sink is logged and never undoes engine state.
"""
import logging
from abc import ABC, abstractmethod
from typing import List, Tuple

from app.services.notifications.email import send_email

logger = logging.getLogger(__name__)


class Notifier(ABC):

    @abstractmethod
    def notify(self, user_id: str, title: str, message: str) -> None:
        pass


class EmailNotifier(Notifier):
    """Sends each notification as a (simulated) email to the user's address on file."""

    def __init__(self, store):
        self.store = store

    def notify(self, user_id, title, message):
        user = self.store.customers.get_user(user_id)
        if not user or not user.email:
            logger.warning(f"No email address for user {user_id}, skipping '{title}'")
            return
        send_email(to_email=user.email, subject=title, text_body=message)


class RecordingNotifier(Notifier):
    """Keeps delivered notifications in memory; used by tests and dry runs."""

    def __init__(self):
        self.sent: List[Tuple[str, str, str]] = []

    def notify(self, user_id, title, message):
        self.sent.append((user_id, title, message))


def deliver(notifier: Notifier, notifications) -> int:
    """Hand stored notifications to the sink. Returns how many were accepted."""
    delivered = 0
    for notification in notifications:
        try:
            notifier.notify(notification.user_id, notification.title, notification.message)
            delivered += 1
        except Exception as e:
            logger.error(f"Failed to deliver notification {notification.id} to {notification.user_id}: {e}", exc_info=True)
    return delivered
