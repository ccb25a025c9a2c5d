"""
In-memory billing store, used by tests and local demos.
"""
import copy
import threading
from contextlib import contextmanager
from dataclasses import replace
from datetime import date
from typing import Dict, List, Optional

from app.repositories.base import (
    BillingStore,
    CatalogRepository,
    CommissionRepository,
    CouponRepository,
    CustomerRepository,
    InvoiceRepository,
    NotificationRepository,
    SubscriptionRepository,
    TicketRepository,
)
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
    TicketStatus,
    UserContact,
)
from app.services.billing.errors import (
    ConcurrentUpdateError,
    CouponNotFoundByIdError,
    DuplicateCommissionError,
    DuplicateCouponError,
    DuplicateInvoiceError,
    DuplicateReminderError,
    SubscriptionNotFoundError,
)


class _Tables:
    """Plain dict tables keyed by record id."""

    def __init__(self):
        self.subscriptions: Dict[str, Subscription] = {}
        self.invoices: Dict[str, Invoice] = {}
        self.commissions: Dict[str, Commission] = {}
        self.coupons: Dict[str, DiscountCoupon] = {}
        self.notifications: Dict[str, Notification] = {}
        self.software: Dict[str, Software] = {}
        self.customers: Dict[str, Customer] = {}
        self.tickets: Dict[str, SupportTicket] = {}
        self.admin_user_ids: List[str] = []
        self.users: Dict[str, UserContact] = {}


class InMemorySubscriptionRepository(SubscriptionRepository):

    def __init__(self, tables: _Tables):
        self._tables = tables

    def get(self, subscription_id):
        row = self._tables.subscriptions.get(subscription_id)
        return replace(row) if row else None

    def add(self, subscription):
        self._tables.subscriptions[subscription.id] = replace(subscription)
        return replace(subscription)

    def update(self, subscription):
        stored = self._tables.subscriptions.get(subscription.id)
        if stored is None:
            raise SubscriptionNotFoundError(subscription.id)
        if stored.version != subscription.version:
            raise ConcurrentUpdateError(subscription.id, subscription.version)
        updated = replace(subscription, version=subscription.version + 1)
        self._tables.subscriptions[subscription.id] = updated
        return replace(updated)

    def list_due_for_billing(self, before):
        rows = [s for s in self._tables.subscriptions.values() if s.next_billing_date < before]
        return [replace(s) for s in sorted(rows, key=lambda s: (s.next_billing_date, s.id))]

    def list_for_customer(self, customer_id):
        return [replace(s) for s in self._tables.subscriptions.values() if s.customer_id == customer_id]


class InMemoryInvoiceRepository(InvoiceRepository):

    def __init__(self, tables: _Tables):
        self._tables = tables

    def get(self, invoice_id):
        row = self._tables.invoices.get(invoice_id)
        return replace(row) if row else None

    def add(self, invoice):
        for existing in self._tables.invoices.values():
            if (existing.subscription_id == invoice.subscription_id
                    and existing.period_start == invoice.period_start):
                raise DuplicateInvoiceError(invoice.subscription_id, invoice.period_start)
        self._tables.invoices[invoice.id] = replace(invoice)
        return replace(invoice)

    def list_for_subscription(self, subscription_id):
        rows = [i for i in self._tables.invoices.values() if i.subscription_id == subscription_id]
        return [replace(i) for i in sorted(rows, key=lambda i: (i.issue_date, i.period_start))]

    def list_for_customer(self, customer_id):
        rows = [i for i in self._tables.invoices.values() if i.customer_id == customer_id]
        return [replace(i) for i in sorted(rows, key=lambda i: (i.issue_date, i.period_start), reverse=True)]


class InMemoryCommissionRepository(CommissionRepository):

    def __init__(self, tables: _Tables):
        self._tables = tables

    def add(self, commission):
        if self.get_by_invoice(commission.invoice_id):
            raise DuplicateCommissionError(commission.invoice_id)
        self._tables.commissions[commission.id] = replace(commission)
        return replace(commission)

    def get_by_invoice(self, invoice_id):
        for row in self._tables.commissions.values():
            if row.invoice_id == invoice_id:
                return replace(row)
        return None

    def count_for_invoice(self, invoice_id):
        return sum(1 for c in self._tables.commissions.values() if c.invoice_id == invoice_id)

    def list_for_user(self, user_id):
        rows = [c for c in self._tables.commissions.values() if c.user_id == user_id]
        return [replace(c) for c in sorted(rows, key=lambda c: c.date, reverse=True)]


class InMemoryCouponRepository(CouponRepository):

    def __init__(self, tables: _Tables):
        self._tables = tables

    def get_by_code(self, code):
        wanted = (code or "").strip().lower()
        for row in self._tables.coupons.values():
            if row.code.strip().lower() == wanted:
                return copy.deepcopy(row)
        return None

    def get(self, coupon_id):
        row = self._tables.coupons.get(coupon_id)
        return copy.deepcopy(row) if row else None

    def _check_code_free(self, coupon):
        taken = self.get_by_code(coupon.code)
        if taken and taken.id != coupon.id:
            raise DuplicateCouponError(coupon.code)

    def add(self, coupon):
        self._check_code_free(coupon)
        self._tables.coupons[coupon.id] = copy.deepcopy(coupon)
        return copy.deepcopy(coupon)

    def update(self, coupon):
        if coupon.id not in self._tables.coupons:
            raise CouponNotFoundByIdError(coupon.id)
        self._check_code_free(coupon)
        self._tables.coupons[coupon.id] = copy.deepcopy(coupon)
        return copy.deepcopy(coupon)

    def list_all(self):
        rows = sorted(self._tables.coupons.values(), key=lambda c: c.code.lower())
        return [copy.deepcopy(c) for c in rows]


class InMemoryNotificationRepository(NotificationRepository):

    def __init__(self, tables: _Tables):
        self._tables = tables

    def get(self, notification_id):
        row = self._tables.notifications.get(notification_id)
        return replace(row) if row else None

    def add(self, notification):
        key = notification.reminder_key
        if key and any(n.reminder_key == key for n in self._tables.notifications.values()):
            raise DuplicateReminderError(notification.ticket_id, notification.type)
        self._tables.notifications[notification.id] = replace(notification)
        return replace(notification)

    def exists_for_ticket(self, ticket_id, notification_type: NotificationType):
        return any(
            n.ticket_id == ticket_id and n.type == notification_type
            for n in self._tables.notifications.values()
        )

    def list_for_ticket(self, ticket_id):
        rows = [n for n in self._tables.notifications.values() if n.ticket_id == ticket_id]
        return [replace(n) for n in sorted(rows, key=lambda n: n.created_at)]

    def list_for_user(self, user_id):
        rows = [n for n in self._tables.notifications.values() if n.user_id == user_id]
        return [replace(n) for n in sorted(rows, key=lambda n: n.created_at, reverse=True)]

    def mark_read(self, notification_id):
        row = self._tables.notifications.get(notification_id)
        if row is None:
            return None
        row.is_read = True
        return replace(row)


class InMemoryCatalogRepository(CatalogRepository):

    def __init__(self, tables: _Tables):
        self._tables = tables

    def get_software(self, software_id):
        row = self._tables.software.get(software_id)
        return replace(row) if row else None


class InMemoryCustomerRepository(CustomerRepository):

    def __init__(self, tables: _Tables):
        self._tables = tables

    def get_customer(self, customer_id):
        row = self._tables.customers.get(customer_id)
        return replace(row) if row else None

    def list_admin_user_ids(self):
        return list(self._tables.admin_user_ids)

    def get_user(self, user_id):
        row = self._tables.users.get(user_id)
        return replace(row) if row else None


class InMemoryTicketRepository(TicketRepository):

    def __init__(self, tables: _Tables):
        self._tables = tables

    def get(self, ticket_id):
        row = self._tables.tickets.get(ticket_id)
        return replace(row) if row else None

    def list_reminder_candidates(self, due_on_or_before: date):
        rows = [
            t for t in self._tables.tickets.values()
            if t.due_date is not None
            and t.due_date <= due_on_or_before
            and t.status != TicketStatus.CLOSED
            and t.assigned_to_id
        ]
        return [replace(t) for t in sorted(rows, key=lambda t: (t.due_date, t.id))]


class InMemoryBillingStore(BillingStore):
    """
    Dict-backed store.

    A transaction holds the store-wide lock and snapshots every table on entry;
    an exception restores the snapshot.
    """

    def __init__(self):
        self._tables = _Tables()
        self._lock = threading.RLock()
        self._depth = 0
        self._subscription_locks: Dict[str, threading.Lock] = {}
        self._subscription_locks_guard = threading.Lock()
        self._bind()

    def _bind(self):
        self.subscriptions = InMemorySubscriptionRepository(self._tables)
        self.invoices = InMemoryInvoiceRepository(self._tables)
        self.commissions = InMemoryCommissionRepository(self._tables)
        self.coupons = InMemoryCouponRepository(self._tables)
        self.notifications = InMemoryNotificationRepository(self._tables)
        self.catalog = InMemoryCatalogRepository(self._tables)
        self.customers = InMemoryCustomerRepository(self._tables)
        self.tickets = InMemoryTicketRepository(self._tables)

    @contextmanager
    def transaction(self):
        with self._lock:
            if self._depth > 0:
                self._depth += 1
                try:
                    yield self
                finally:
                    self._depth -= 1
                return

            snapshot = copy.deepcopy(self._tables.__dict__)
            self._depth = 1
            try:
                yield self
            except BaseException:
                self._tables.__dict__.clear()
                self._tables.__dict__.update(snapshot)
                raise
            finally:
                self._depth = 0

    @contextmanager
    def subscription_lock(self, subscription_id):
        with self._subscription_locks_guard:
            lock = self._subscription_locks.setdefault(subscription_id, threading.Lock())
        with lock:
            yield

    # Seeding helpers for collaborator data the engine only reads

    def add_software(self, software: Software) -> Software:
        self._tables.software[software.id] = replace(software)
        return software

    def add_customer(self, customer: Customer) -> Customer:
        self._tables.customers[customer.id] = replace(customer)
        return customer

    def add_ticket(self, ticket: SupportTicket) -> SupportTicket:
        self._tables.tickets[ticket.id] = replace(ticket)
        return ticket

    def add_user(self, user: UserContact) -> UserContact:
        self._tables.users[user.id] = replace(user)
        return user

    def add_admin_user(self, user_id: str) -> None:
        if user_id not in self._tables.admin_user_ids:
            self._tables.admin_user_ids.append(user_id)
