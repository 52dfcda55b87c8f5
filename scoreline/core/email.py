"""
Transactional email through the Brevo HTTP API.
When no API key is configured the message is logged and skipped.
"""

import logging
from typing import Optional

import requests

from scoreline.config import settings

logger = logging.getLogger(__name__)

BREVO_SEND_URL = "https://api.brevo.com/v3/smtp/email"


def send_email(to_email: str, subject: str, body: str, to_name: Optional[str] = None) -> bool:
    """Send a plain-text email. Returns True when Brevo accepted the message."""
    if not settings.brevo_api_key:
        logger.info(f"Email to {to_email} skipped (BREVO_API_KEY not set): {subject}")
        return False

    recipient = {"email": to_email}
    if to_name:
        recipient["name"] = to_name
    payload = {
        "sender": {"email": settings.brevo_sender_email, "name": settings.brevo_sender_name},
        "to": [recipient],
        "subject": subject,
        "textContent": body,
    }
    headers = {
        "api-key": settings.brevo_api_key,
        "accept": "application/json",
        "content-type": "application/json",
    }
    try:
        response = requests.post(BREVO_SEND_URL, json=payload, headers=headers, timeout=10)
    except requests.RequestException as e:
        logger.error(f"Email request to Brevo failed: {type(e).__name__}")
        return False

    if response.status_code >= 300:
        logger.error(f"Brevo rejected email to {to_email}: {response.status_code}")
        return False
    return True
