"""
Customer model. Owned by the CRM; the billing engine only reads it.
"""
from sqlalchemy import Column, String, Date, ForeignKey
from app.core.database import Base


class Customer(Base):
    __tablename__ = "customers"

    id = Column(String(64), primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    company = Column(String(255), nullable=True)
    signup_date = Column(Date, nullable=False)
    assigned_to_user_id = Column(String(64), ForeignKey('users.id'), nullable=True, index=True)
    # Sales user whose referral link brought the customer in; drives commissions
    referred_by_user_id = Column(String(64), ForeignKey('users.id'), nullable=True, index=True)
