"""
Billing error hierarchy.

NotFound and InvalidState are caller errors, PaymentDeclined is transient and
leaves state untouched, InvariantViolation means at-most-once billing or payout
guarantees were broken and must never be swallowed.
"""


class BillingError(Exception):
    """Base class for billing engine errors."""
    http_status = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(BillingError):
    http_status = 404


class SubscriptionNotFoundError(NotFoundError):
    def __init__(self, subscription_id: str):
        super().__init__(f"Subscription {subscription_id} not found")
        self.subscription_id = subscription_id


class SoftwareNotFoundError(NotFoundError):
    def __init__(self, software_id: str):
        super().__init__(f"Software {software_id} not found")
        self.software_id = software_id


class CustomerNotFoundError(NotFoundError):
    def __init__(self, customer_id: str):
        super().__init__(f"Customer {customer_id} not found")
        self.customer_id = customer_id


class CouponNotFoundError(NotFoundError):
    def __init__(self, code: str):
        super().__init__(f"Coupon {code} not found")
        self.code = code


class NotificationNotFoundError(NotFoundError):
    def __init__(self, notification_id: str):
        super().__init__(f"Notification {notification_id} not found")
        self.notification_id = notification_id


class TicketNotFoundError(NotFoundError):
    def __init__(self, ticket_id: str):
        super().__init__(f"Ticket {ticket_id} not found")
        self.ticket_id = ticket_id


class InvalidStateError(BillingError):
    http_status = 409


class SamePlanError(InvalidStateError):
    def __init__(self, plan):
        super().__init__(f"Cannot change to the same plan ({plan})")
        self.plan = plan


class InvalidPlanError(InvalidStateError):
    http_status = 422

    def __init__(self, plan):
        super().__init__(f"Invalid subscription plan: {plan!r}")
        self.plan = plan


class BillingNotDueError(InvalidStateError):
    def __init__(self, subscription_id: str, next_billing_date, today):
        super().__init__(
            f"Subscription {subscription_id} is not due for billing "
            f"(next billing date {next_billing_date}, today {today})"
        )
        self.subscription_id = subscription_id


class ConcurrentUpdateError(InvalidStateError):
    """Optimistic version check failed: someone else updated the record first."""

    def __init__(self, subscription_id: str, expected_version: int):
        super().__init__(
            f"Subscription {subscription_id} was modified concurrently "
            f"(expected version {expected_version})"
        )
        self.subscription_id = subscription_id
        self.expected_version = expected_version


class PaymentDeclinedError(BillingError):
    http_status = 402

    def __init__(self, subscription_id: str, amount: int):
        super().__init__(
            "The payment gateway declined the transaction. "
            "Please check your details or try another method."
        )
        self.subscription_id = subscription_id
        self.amount = amount


class InvariantViolationError(BillingError):
    http_status = 500


class DuplicateInvoiceError(InvariantViolationError):
    def __init__(self, subscription_id: str, period_start):
        super().__init__(
            f"Invoice for subscription {subscription_id} and period {period_start} already exists"
        )
        self.subscription_id = subscription_id
        self.period_start = period_start


class DuplicateCommissionError(InvariantViolationError):
    def __init__(self, invoice_id: str):
        super().__init__(f"Commission for invoice {invoice_id} already exists")
        self.invoice_id = invoice_id


class DuplicateReminderError(InvalidStateError):
    def __init__(self, ticket_id: str, notification_type):
        super().__init__(f"Reminder {notification_type} for ticket {ticket_id} already exists")
        self.ticket_id = ticket_id
        self.notification_type = notification_type


class CouponNotFoundByIdError(NotFoundError):
    def __init__(self, coupon_id: str):
        super().__init__(f"Coupon {coupon_id} not found")
        self.coupon_id = coupon_id


class DuplicateCouponError(InvalidStateError):
    def __init__(self, code: str):
        super().__init__(f"Coupon code {code} is already in use")
        self.code = code


class InvalidCouponError(BillingError):
    http_status = 422
