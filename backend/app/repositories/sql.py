"""
SQLAlchemy-backed billing store.
"""
import logging
from contextlib import contextmanager
from datetime import date

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.commission import Commission as CommissionRow
from app.models.customer import Customer as CustomerRow
from app.models.discount_coupon import DiscountCoupon as DiscountCouponRow
from app.models.invoice import Invoice as InvoiceRow
from app.models.notification import Notification as NotificationRow
from app.models.software import Software as SoftwareRow
from app.models.subscription import Subscription as SubscriptionRow
from app.models.support_ticket import SupportTicket as SupportTicketRow
from app.models.user import User as UserRow
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
)

logger = logging.getLogger(__name__)


class SqlSubscriptionRepository(SubscriptionRepository):

    def __init__(self, db: Session):
        self.db = db

    def get(self, subscription_id):
        row = self.db.get(SubscriptionRow, subscription_id)
        return Subscription.from_db_row(row) if row else None

    def add(self, subscription):
        self.db.add(SubscriptionRow(
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
        ))
        self.db.flush()
        return subscription

    def update(self, subscription):
        # Compare-and-set on version
        result = self.db.execute(
            update(SubscriptionRow)
            .where(
                SubscriptionRow.id == subscription.id,
                SubscriptionRow.version == subscription.version,
            )
            .values(
                plan=subscription.plan.value,
                next_renewal_date=subscription.next_renewal_date,
                next_billing_date=subscription.next_billing_date,
                renewal_amount=subscription.renewal_amount,
                status=subscription.status.value,
                next_action_date=subscription.next_action_date,
                remarks=subscription.remarks,
                version=SubscriptionRow.version + 1,
                updated_at=func.now(),
            )
            .execution_options(synchronize_session=False)
        )

        if result.rowcount != 1:
            logger.warning(f"Version check failed for subscription {subscription.id} (version {subscription.version})")
            raise ConcurrentUpdateError(subscription.id, subscription.version)

        self.db.expire_all()
        updated = self.get(subscription.id)
        if not updated:
            raise Exception("Failed to retrieve updated subscription")
        return updated

    def list_due_for_billing(self, before):
        rows = (
            self.db.query(SubscriptionRow)
            .filter(SubscriptionRow.next_billing_date < before)
            .order_by(SubscriptionRow.next_billing_date, SubscriptionRow.id)
            .all()
        )
        return [Subscription.from_db_row(row) for row in rows]

    def list_for_customer(self, customer_id):
        rows = self.db.query(SubscriptionRow).filter(SubscriptionRow.customer_id == customer_id).all()
        return [Subscription.from_db_row(row) for row in rows]

    def lock_row(self, subscription_id):
        """Take a row lock until the transaction ends (no-op on SQLite)."""
        self.db.query(SubscriptionRow.id).filter(
            SubscriptionRow.id == subscription_id
        ).with_for_update().first()


class SqlInvoiceRepository(InvoiceRepository):

    def __init__(self, db: Session):
        self.db = db

    def get(self, invoice_id):
        row = self.db.get(InvoiceRow, invoice_id)
        return Invoice.from_db_row(row) if row else None

    def add(self, invoice):
        row = InvoiceRow(
            id=invoice.id,
            subscription_id=invoice.subscription_id,
            customer_id=invoice.customer_id,
            amount=invoice.amount,
            issue_date=invoice.issue_date,
            payment_date=invoice.payment_date,
            period_start=invoice.period_start,
        )
        existing = self.db.query(InvoiceRow.id).filter(
            InvoiceRow.subscription_id == invoice.subscription_id,
            InvoiceRow.period_start == invoice.period_start,
        ).first()
        if existing:
            raise DuplicateInvoiceError(invoice.subscription_id, invoice.period_start)
        self.db.add(row)
        try:
            self.db.flush()
        except IntegrityError:
            # Lost a race with a concurrent writer; the caller's transaction rolls back
            raise DuplicateInvoiceError(invoice.subscription_id, invoice.period_start) from None
        return invoice

    def list_for_subscription(self, subscription_id):
        rows = (
            self.db.query(InvoiceRow)
            .filter(InvoiceRow.subscription_id == subscription_id)
            .order_by(InvoiceRow.issue_date, InvoiceRow.period_start)
            .all()
        )
        return [Invoice.from_db_row(row) for row in rows]

    def list_for_customer(self, customer_id):
        rows = (
            self.db.query(InvoiceRow)
            .filter(InvoiceRow.customer_id == customer_id)
            .order_by(InvoiceRow.issue_date.desc(), InvoiceRow.period_start.desc())
            .all()
        )
        return [Invoice.from_db_row(row) for row in rows]


class SqlCommissionRepository(CommissionRepository):

    def __init__(self, db: Session):
        self.db = db

    def add(self, commission):
        row = CommissionRow(
            id=commission.id,
            user_id=commission.user_id,
            customer_id=commission.customer_id,
            invoice_id=commission.invoice_id,
            amount=commission.amount,
            date=commission.date,
        )
        if self.get_by_invoice(commission.invoice_id):
            raise DuplicateCommissionError(commission.invoice_id)
        self.db.add(row)
        try:
            self.db.flush()
        except IntegrityError:
            raise DuplicateCommissionError(commission.invoice_id) from None
        return commission

    def get_by_invoice(self, invoice_id):
        row = self.db.query(CommissionRow).filter(CommissionRow.invoice_id == invoice_id).first()
        return Commission.from_db_row(row) if row else None

    def count_for_invoice(self, invoice_id):
        return self.db.query(func.count(CommissionRow.id)).filter(
            CommissionRow.invoice_id == invoice_id
        ).scalar()

    def list_for_user(self, user_id):
        rows = (
            self.db.query(CommissionRow)
            .filter(CommissionRow.user_id == user_id)
            .order_by(CommissionRow.date.desc())
            .all()
        )
        return [Commission.from_db_row(row) for row in rows]


class SqlCouponRepository(CouponRepository):

    def __init__(self, db: Session):
        self.db = db

    def get_by_code(self, code):
        row = self.db.query(DiscountCouponRow).filter(
            DiscountCouponRow.code == (code or "").strip().lower()
        ).first()
        return DiscountCoupon.from_db_row(row) if row else None

    def get(self, coupon_id):
        row = self.db.get(DiscountCouponRow, coupon_id)
        return DiscountCoupon.from_db_row(row) if row else None

    def _check_code_free(self, coupon):
        taken = self.get_by_code(coupon.code)
        if taken and taken.id != coupon.id:
            raise DuplicateCouponError(coupon.code)

    def add(self, coupon):
        self._check_code_free(coupon)
        self.db.add(DiscountCouponRow(
            id=coupon.id,
            code=coupon.code.strip().lower(),
            discount_type=coupon.discount_type.value,
            discount_value=coupon.discount_value,
            valid_from=coupon.valid_from,
            valid_until=coupon.valid_until,
            is_active=coupon.is_active,
            applicable_software_ids=list(coupon.applicable_software_ids),
        ))
        try:
            self.db.flush()
        except IntegrityError:
            raise DuplicateCouponError(coupon.code) from None
        return self.get(coupon.id)

    def update(self, coupon):
        row = self.db.get(DiscountCouponRow, coupon.id)
        if row is None:
            raise CouponNotFoundByIdError(coupon.id)
        self._check_code_free(coupon)
        row.code = coupon.code.strip().lower()
        row.discount_type = coupon.discount_type.value
        row.discount_value = coupon.discount_value
        row.valid_from = coupon.valid_from
        row.valid_until = coupon.valid_until
        row.is_active = coupon.is_active
        row.applicable_software_ids = list(coupon.applicable_software_ids)
        try:
            self.db.flush()
        except IntegrityError:
            raise DuplicateCouponError(coupon.code) from None
        return DiscountCoupon.from_db_row(row)

    def list_all(self):
        rows = self.db.query(DiscountCouponRow).order_by(DiscountCouponRow.code).all()
        return [DiscountCoupon.from_db_row(row) for row in rows]


class SqlNotificationRepository(NotificationRepository):

    def __init__(self, db: Session):
        self.db = db

    def get(self, notification_id):
        row = self.db.get(NotificationRow, notification_id)
        return Notification.from_db_row(row) if row else None

    def add(self, notification):
        self.db.add(NotificationRow(
            id=notification.id,
            user_id=notification.user_id,
            ticket_id=notification.ticket_id,
            title=notification.title,
            message=notification.message,
            type=notification.type.value,
            reminder_key=notification.reminder_key,
            is_read=notification.is_read,
            created_at=notification.created_at,
        ))
        try:
            self.db.flush()
        except IntegrityError:
            # Another pass stored the same reminder first; the caller's transaction rolls back
            raise DuplicateReminderError(notification.ticket_id, notification.type) from None
        return notification

    def exists_for_ticket(self, ticket_id, notification_type: NotificationType):
        return self.db.query(NotificationRow.id).filter(
            NotificationRow.ticket_id == ticket_id,
            NotificationRow.type == NotificationType(notification_type).value,
        ).first() is not None

    def list_for_ticket(self, ticket_id):
        rows = (
            self.db.query(NotificationRow)
            .filter(NotificationRow.ticket_id == ticket_id)
            .order_by(NotificationRow.created_at)
            .all()
        )
        return [Notification.from_db_row(row) for row in rows]

    def list_for_user(self, user_id):
        rows = (
            self.db.query(NotificationRow)
            .filter(NotificationRow.user_id == user_id)
            .order_by(NotificationRow.created_at.desc())
            .all()
        )
        return [Notification.from_db_row(row) for row in rows]

    def mark_read(self, notification_id):
        row = self.db.get(NotificationRow, notification_id)
        if row is None:
            return None
        row.is_read = True
        self.db.flush()
        return Notification.from_db_row(row)


class SqlCatalogRepository(CatalogRepository):

    def __init__(self, db: Session):
        self.db = db

    def get_software(self, software_id):
        row = self.db.get(SoftwareRow, software_id)
        return Software.from_db_row(row) if row else None


class SqlCustomerRepository(CustomerRepository):

    def __init__(self, db: Session):
        self.db = db

    def get_customer(self, customer_id):
        row = self.db.get(CustomerRow, customer_id)
        return Customer.from_db_row(row) if row else None

    def list_admin_user_ids(self):
        rows = self.db.query(UserRow.id).filter(
            UserRow.role == 'ADMIN',
            UserRow.is_active == True,  # noqa: E712
        ).all()
        return [row.id for row in rows]

    def get_user(self, user_id):
        row = self.db.get(UserRow, user_id)
        return UserContact.from_db_row(row) if row else None


class SqlTicketRepository(TicketRepository):

    def __init__(self, db: Session):
        self.db = db

    def get(self, ticket_id):
        row = self.db.get(SupportTicketRow, ticket_id)
        return SupportTicket.from_db_row(row) if row else None

    def list_reminder_candidates(self, due_on_or_before: date):
        rows = (
            self.db.query(SupportTicketRow)
            .filter(
                SupportTicketRow.due_date.isnot(None),
                SupportTicketRow.due_date <= due_on_or_before,
                SupportTicketRow.status != TicketStatus.CLOSED.value,
                SupportTicketRow.assigned_to_id.isnot(None),
            )
            .order_by(SupportTicketRow.due_date, SupportTicketRow.id)
            .all()
        )
        return [SupportTicket.from_db_row(row) for row in rows]


class SqlBillingStore(BillingStore):
    """Store over one SQLAlchemy session; the outermost transaction commits."""

    def __init__(self, db: Session):
        self.db = db
        self._depth = 0
        self.subscriptions = SqlSubscriptionRepository(db)
        self.invoices = SqlInvoiceRepository(db)
        self.commissions = SqlCommissionRepository(db)
        self.coupons = SqlCouponRepository(db)
        self.notifications = SqlNotificationRepository(db)
        self.catalog = SqlCatalogRepository(db)
        self.customers = SqlCustomerRepository(db)
        self.tickets = SqlTicketRepository(db)

    @contextmanager
    def transaction(self):
        if self._depth > 0:
            self._depth += 1
            try:
                yield self
            finally:
                self._depth -= 1
            return

        self._depth = 1
        try:
            yield self
            self.db.commit()
        except BaseException:
            self.db.rollback()
            raise
        finally:
            self._depth = 0

    @contextmanager
    def subscription_lock(self, subscription_id):
        self.subscriptions.lock_row(subscription_id)
        yield
