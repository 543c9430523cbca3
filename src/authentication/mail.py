"""Outgoing email for account verification."""

import logging
import smtplib
from urllib.parse import urlencode

from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger(__name__)

VERIFICATION_SUBJECT = "Confirm your email address"


def _redact_email(email: str) -> str:
    if "@" not in email:
        return "redacted"
    local, domain = email.split("@", 1)
    return f"{local[:2]}***@{domain}"


def verification_url(token: str) -> str:
    return f"{settings.APP_BASE_URL}/auth/verify?{urlencode({'token': token})}"


def send_verification_email(email: str, token: str) -> bool:
    """Send the verification link; returns False when delivery failed.

    Delivery failures are logged and reported to the caller, who decides
    whether they matter.
    """
    url = verification_url(token)
    text_body = (
        "Open the link below to confirm your email address.\n\n"
        f"{url}\n\n"
        "The link is valid for 24 hours. If you did not sign up, ignore this message."
    )
    html_body = (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
        "<h2>Confirm your email address</h2>"
        "<p>Open the link below to confirm your email address.</p>"
        f'<a href="{url}">Confirm email address</a>'
        "<p>The link is valid for 24 hours.</p>"
        "<p>If you did not sign up, ignore this message.</p>"
        "</div>"
    )
    try:
        send_mail(
            VERIFICATION_SUBJECT,
            text_body,
            settings.DEFAULT_FROM_EMAIL,
            [email],
            html_message=html_body,
        )
    except (smtplib.SMTPException, OSError):
        logger.exception("Failed to send verification email to %s", _redact_email(email))
        return False
    logger.info("Sent verification email to %s", _redact_email(email))
    return True


__all__ = ["send_verification_email", "verification_url"]
