"""
Subscription model for a customer's enrollment in one software product.
"""
from sqlalchemy import Column, Integer, String, Text, Date, DateTime, ForeignKey, func
from app.core.database import Base


class Subscription(Base):
    __tablename__ = "subscriptions"

    id = Column(String(64), primary_key=True, index=True)
    customer_id = Column(String(64), ForeignKey('customers.id'), nullable=False, index=True)
    software_id = Column(String(64), ForeignKey('software.id'), nullable=False, index=True)
    plan = Column(String(20), nullable=False)  # MONTHLY, QUARTERLY, YEARLY

    # Billing dates, advanced only by renewals
    start_date = Column(Date, nullable=False)
    next_renewal_date = Column(Date, nullable=False)
    next_billing_date = Column(Date, nullable=False, index=True)
    renewal_amount = Column(Integer, nullable=False)  # minor units

    # Project delivery (CRM), independent of billing
    status = Column(String(20), nullable=False, default='PENDING')  # REVIEW, PENDING, TRAINING, COMPLETE
    onboarding_date = Column(Date, nullable=False)
    training_date = Column(Date, nullable=False)
    next_action_date = Column(Date, nullable=True)
    remarks = Column(Text, nullable=True)

    # Optimistic concurrency token, bumped on every update
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
