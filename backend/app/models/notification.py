"""
Notification model for in-app alerts (new tickets and task reminders).
"""
from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey
from app.core.database import Base


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String(64), primary_key=True, index=True)
    user_id = Column(String(64), ForeignKey('users.id'), nullable=False, index=True)  # Recipient
    ticket_id = Column(String(64), ForeignKey('support_tickets.id'), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(20), nullable=False, index=True)  # NEW_TICKET, TASK_DUE_SOON, TASK_OVERDUE
    # "<ticket_id>:<type>" for task reminders, NULL otherwise; one reminder of each type per ticket
    reminder_key = Column(String(100), nullable=True, unique=True)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
