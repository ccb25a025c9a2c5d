"""
Support ticket model. Only the due date and assignment feed billing reminders.
"""
from sqlalchemy import Column, String, Text, Date, DateTime, ForeignKey, func
from app.core.database import Base


class SupportTicket(Base):
    __tablename__ = "support_tickets"

    id = Column(String(64), primary_key=True, index=True)
    creator_id = Column(String(64), ForeignKey('users.id'), nullable=False, index=True)
    related_customer_id = Column(String(64), ForeignKey('customers.id'), nullable=True)
    subject = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default='OPEN', index=True)  # OPEN, IN_PROGRESS, CLOSED
    priority = Column(String(20), nullable=False, default='MEDIUM')  # LOW, MEDIUM, HIGH
    assigned_to_id = Column(String(64), ForeignKey('users.id'), nullable=True, index=True)
    due_date = Column(Date, nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
