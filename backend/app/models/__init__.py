"""
Database models.
"""
from app.models.user import User
from app.models.customer import Customer
from app.models.software import Software
from app.models.subscription import Subscription
from app.models.invoice import Invoice
from app.models.commission import Commission
from app.models.discount_coupon import DiscountCoupon
from app.models.support_ticket import SupportTicket
from app.models.notification import Notification

__all__ = [
    "User",
    "Customer",
    "Software",
    "Subscription",
    "Invoice",
    "Commission",
    "DiscountCoupon",
    "SupportTicket",
    "Notification",
]
