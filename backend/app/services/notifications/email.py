"""
Email service.

Delivery is simulated: messages are rendered and written to the log, never sent.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from app.core.config import EMAIL_FROM_NAME, EMAIL_FROM_ADDRESS

logger = logging.getLogger(__name__)


def send_email(
    to_email: str,
    subject: str,
    text_body: str,
    html_body: Optional[str] = None
) -> bool:
    """
    Log an outgoing email.

    Args:
        to_email: Recipient address
        subject: Email subject
        text_body: Plain text body
        html_body: HTML body (optional, logged by length only)

    Returns:
        True if the message was accepted, False otherwise
    """
    if not to_email:
        logger.error(f"Cannot send email '{subject}': no recipient")
        return False

    logger.info(
        f"--- [SIMULATED EMAIL {datetime.now(timezone.utc).isoformat()}] ---\n"
        f"From: \"{EMAIL_FROM_NAME}\" <{EMAIL_FROM_ADDRESS}>\n"
        f"To: {to_email}\n"
        f"Subject: {subject}\n"
        f"Body: {text_body}"
        + (f"\n(HTML part: {len(html_body)} chars)" if html_body else "")
    )
    return True
