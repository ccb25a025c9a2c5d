"""
User model (admins, sales users and customer logins).
"""
from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.sql import func
from app.core.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(64), primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    role = Column(String(20), nullable=False, default='CUSTOMER', index=True)  # 'ADMIN', 'USER' (sales) or 'CUSTOMER'
    referral_code = Column(String(100), unique=True, nullable=True)  # Sales users only
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def is_admin(self) -> bool:
        """Check if user is a platform admin."""
        return self.role == 'ADMIN'
