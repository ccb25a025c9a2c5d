"""
Discount coupon model.
"""
from sqlalchemy import Column, String, Boolean, Date, Numeric, JSON
from app.core.database import Base


class DiscountCoupon(Base):
    __tablename__ = "discount_coupons"

    id = Column(String(64), primary_key=True, index=True)
    # Stored lower-cased; lookups are case-insensitive
    code = Column(String(50), nullable=False, unique=True, index=True)
    discount_type = Column(String(20), nullable=False)  # PERCENTAGE or FIXED_AMOUNT
    # Percentage points for PERCENTAGE, minor units for FIXED_AMOUNT
    discount_value = Column(Numeric(precision=12, scale=2), nullable=False)
    valid_from = Column(Date, nullable=False)
    valid_until = Column(Date, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    applicable_software_ids = Column(JSON, nullable=False, default=list)  # [] = all software
