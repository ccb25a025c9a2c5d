"""
Repository interfaces for billing records.

Records are created, read and updated, never deleted.
"""
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import date
from typing import Iterator, List, Optional

from app.services.billing.billing_models import (
    Commission,
    Customer,
    DiscountCoupon,
    Invoice,
    Notification,
    NotificationType,
    Software,
    Subscription,
    SupportTicket,
    UserContact,
)


class SubscriptionRepository(ABC):

    @abstractmethod
    def get(self, subscription_id: str) -> Optional[Subscription]:
        pass

    @abstractmethod
    def add(self, subscription: Subscription) -> Subscription:
        pass

    @abstractmethod
    def update(self, subscription: Subscription) -> Subscription:
        """
        Persist changes with an optimistic version check.

        `subscription.version` must be the version that was read. The stored
        version is bumped and the returned copy carries the new one.

        Raises:
            ConcurrentUpdateError: If the stored version differs
        """
        pass

    @abstractmethod
    def list_due_for_billing(self, before: date) -> List[Subscription]:
        """Subscriptions whose next_billing_date is strictly before `before`."""
        pass

    @abstractmethod
    def list_for_customer(self, customer_id: str) -> List[Subscription]:
        pass


class InvoiceRepository(ABC):

    @abstractmethod
    def get(self, invoice_id: str) -> Optional[Invoice]:
        pass

    @abstractmethod
    def add(self, invoice: Invoice) -> Invoice:
        """
        Raises:
            DuplicateInvoiceError: If the subscription already has an invoice for the period
        """
        pass

    @abstractmethod
    def list_for_subscription(self, subscription_id: str) -> List[Invoice]:
        pass

    @abstractmethod
    def list_for_customer(self, customer_id: str) -> List[Invoice]:
        pass


class CommissionRepository(ABC):

    @abstractmethod
    def add(self, commission: Commission) -> Commission:
        """
        Raises:
            DuplicateCommissionError: If the invoice already has a commission
        """
        pass

    @abstractmethod
    def get_by_invoice(self, invoice_id: str) -> Optional[Commission]:
        pass

    @abstractmethod
    def count_for_invoice(self, invoice_id: str) -> int:
        pass

    @abstractmethod
    def list_for_user(self, user_id: str) -> List[Commission]:
        pass


class CouponRepository(ABC):

    @abstractmethod
    def get_by_code(self, code: str) -> Optional[DiscountCoupon]:
        """Case-insensitive lookup."""
        pass

    @abstractmethod
    def get(self, coupon_id: str) -> Optional[DiscountCoupon]:
        pass

    @abstractmethod
    def add(self, coupon: DiscountCoupon) -> DiscountCoupon:
        """
        Raises:
            DuplicateCouponError: If another coupon has the same code, ignoring case
        """
        pass

    @abstractmethod
    def update(self, coupon: DiscountCoupon) -> DiscountCoupon:
        """
        Raises:
            DuplicateCouponError: If another coupon has the same code, ignoring case
        """
        pass

    @abstractmethod
    def list_all(self) -> List[DiscountCoupon]:
        pass


class NotificationRepository(ABC):

    @abstractmethod
    def get(self, notification_id: str) -> Optional[Notification]:
        pass

    @abstractmethod
    def add(self, notification: Notification) -> Notification:
        """
        Raises:
            DuplicateReminderError: If the ticket already has a task reminder of this type
        """
        pass

    @abstractmethod
    def exists_for_ticket(self, ticket_id: str, notification_type: NotificationType) -> bool:
        """True if any notification (read or unread) of this type exists for the ticket."""
        pass

    @abstractmethod
    def list_for_ticket(self, ticket_id: str) -> List[Notification]:
        pass

    @abstractmethod
    def list_for_user(self, user_id: str) -> List[Notification]:
        """Newest first."""
        pass

    @abstractmethod
    def mark_read(self, notification_id: str) -> Optional[Notification]:
        pass


class CatalogRepository(ABC):
    """Read-only price catalog."""

    @abstractmethod
    def get_software(self, software_id: str) -> Optional[Software]:
        pass


class CustomerRepository(ABC):
    """Read-only customer and user lookups."""

    @abstractmethod
    def get_customer(self, customer_id: str) -> Optional[Customer]:
        pass

    @abstractmethod
    def list_admin_user_ids(self) -> List[str]:
        pass

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[UserContact]:
        pass


class TicketRepository(ABC):
    """Read-only ticket queries for the reminder scheduler."""

    @abstractmethod
    def get(self, ticket_id: str) -> Optional[SupportTicket]:
        pass

    @abstractmethod
    def list_reminder_candidates(self, due_on_or_before: date) -> List[SupportTicket]:
        """Tickets with a due date on or before the given day, not CLOSED, and assigned."""
        pass


class BillingStore(ABC):
    """
    Bundle of repositories sharing one unit of work.

    transaction() blocks nest; only the outermost block commits, and any
    exception rolls back everything written since it opened.
    """
    subscriptions: SubscriptionRepository
    invoices: InvoiceRepository
    commissions: CommissionRepository
    coupons: CouponRepository
    notifications: NotificationRepository
    catalog: CatalogRepository
    customers: CustomerRepository
    tickets: TicketRepository

    @abstractmethod
    @contextmanager
    def transaction(self) -> Iterator["BillingStore"]:
        pass

    @abstractmethod
    @contextmanager
    def subscription_lock(self, subscription_id: str) -> Iterator[None]:
        """Hold mutual exclusion over one subscription for the duration of the block."""
        pass
