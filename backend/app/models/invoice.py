"""
Invoice model. Invoices are append-only: never deleted or amended.
"""
from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, UniqueConstraint, func
from app.core.database import Base


class Invoice(Base):
    __tablename__ = "invoices"
    __table_args__ = (
        # One invoice per subscription per billing cycle
        UniqueConstraint('subscription_id', 'period_start', name='uq_invoice_subscription_period'),
    )

    id = Column(String(64), primary_key=True, index=True)
    subscription_id = Column(String(64), ForeignKey('subscriptions.id'), nullable=False, index=True)
    customer_id = Column(String(64), ForeignKey('customers.id'), nullable=False, index=True)
    amount = Column(Integer, nullable=False)  # minor units, fixed at issue time
    issue_date = Column(Date, nullable=False)
    payment_date = Column(Date, nullable=True)  # NULL = unpaid
    period_start = Column(Date, nullable=False)  # billing date the invoice covers
    created_at = Column(DateTime(timezone=True), server_default=func.now())
