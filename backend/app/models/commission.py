"""
Referral commission model.
"""
from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, func
from app.core.database import Base


class Commission(Base):
    __tablename__ = "commissions"

    id = Column(String(64), primary_key=True, index=True)
    user_id = Column(String(64), ForeignKey('users.id'), nullable=False, index=True)  # Recipient
    customer_id = Column(String(64), ForeignKey('customers.id'), nullable=False, index=True)
    invoice_id = Column(String(64), ForeignKey('invoices.id'), nullable=False, unique=True)  # At most one per invoice
    amount = Column(Integer, nullable=False)  # minor units
    date = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
