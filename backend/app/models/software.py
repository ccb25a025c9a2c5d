"""
Software catalog model. Prices are stored in minor currency units.
"""
from sqlalchemy import Column, String, Text, Integer, JSON
from app.core.database import Base


class Software(Base):
    """A resellable software product and its plan price list."""

    __tablename__ = "software"

    id = Column(String(64), primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=True)
    features = Column(JSON, nullable=True)

    price_monthly = Column(Integer, nullable=False)
    price_quarterly = Column(Integer, nullable=False)
    price_yearly = Column(Integer, nullable=False)
    setup_fee = Column(Integer, nullable=False, default=0)
