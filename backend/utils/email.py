# utils/email.py
import logging
import smtplib
from email.message import EmailMessage
from urllib.parse import urljoin

from config import settings

logger = logging.getLogger(__name__)


def _send(to: str, subject: str, html: str) -> None:
    # Delivery is fire-and-forget: failures are logged and never reach the caller
    if not settings.SMTP_HOST:
        logger.info("Email service not configured. Skipping '%s' for %s", subject, to)
        return

    message = EmailMessage()
    message["From"] = settings.EMAIL_FROM
    message["To"] = to
    message["Subject"] = subject
    message.set_content("This message requires an HTML capable mail client.")
    message.add_alternative(html, subtype="html")

    try:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=10) as smtp:
            smtp.starttls()
            if settings.SMTP_USER:
                smtp.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
            smtp.send_message(message)
        logger.info("Email '%s' sent to %s", subject, to)
    except (smtplib.SMTPException, OSError) as e:
        logger.error("Failed to send '%s' to %s: %s", subject, to, e)


def send_verification_email(email: str, token: str) -> None:
    url = urljoin(settings.FRONTEND_URL, f"/verify-email?token={token}")
    _send(
        email,
        "Email Verification",
        f"""
        <h2>Welcome! Please verify your email</h2>
        <p>Click the link below to verify your email address:</p>
        <a href="{url}">Verify Email</a>
        <p>This link will expire in 10 minutes.</p>
        """,
    )


def send_password_reset_email(email: str, token: str) -> None:
    url = urljoin(settings.FRONTEND_URL, f"/reset-password?token={token}")
    _send(
        email,
        "Password Reset",
        f"""
        <h2>Password Reset Request</h2>
        <p>You requested a password reset. Click the link below to reset your password:</p>
        <a href="{url}">Reset Password</a>
        <p>This link will expire in 10 minutes.</p>
        <p>If you didn't request this, please ignore this email.</p>
        """,
    )
