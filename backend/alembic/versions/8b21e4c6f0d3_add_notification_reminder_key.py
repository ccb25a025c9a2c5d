"""add_notification_reminder_key

Revision ID: 8b21e4c6f0d3
Revises: 3f9c2a7d1b40
Create Date: 2024-07-12 09:30:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '8b21e4c6f0d3'
down_revision = '3f9c2a7d1b40'
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column('notifications', sa.Column('reminder_key', sa.String(length=100), nullable=True))

    # Backfill task reminders; where duplicates already exist only one row per (ticket, type) gets the key
    op.execute("""
        UPDATE notifications
        SET reminder_key = CONCAT(ticket_id, ':', type)
        WHERE type IN ('TASK_DUE_SOON', 'TASK_OVERDUE')
        AND id IN (
            SELECT id FROM (
                SELECT MIN(id) AS id FROM notifications
                WHERE type IN ('TASK_DUE_SOON', 'TASK_OVERDUE')
                GROUP BY ticket_id, type
            ) AS first_reminders
        )
    """)

    op.create_unique_constraint('uq_notifications_reminder_key', 'notifications', ['reminder_key'])


def downgrade() -> None:
    op.drop_constraint('uq_notifications_reminder_key', 'notifications', type_='unique')
    op.drop_column('notifications', 'reminder_key')
