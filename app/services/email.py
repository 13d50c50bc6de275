import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import aiosmtplib

from app.core.config import settings

logger = logging.getLogger(__name__)


def smtp_configured() -> bool:
    return all([
        settings.smtp_host,
        settings.smtp_port,
        settings.smtp_user,
        settings.smtp_password,
        settings.smtp_from_email,
    ])


def build_reset_url(reset_token: str) -> str:
    return f"{settings.frontend_url.rstrip('/')}/reset-password?token={reset_token}"


def _build_password_reset_message(email: str, reset_url: str) -> MIMEMultipart:
    minutes = settings.password_reset_token_expire_minutes
    message = MIMEMultipart("alternative")
    message["Subject"] = "Password Reset Request"
    message["From"] = settings.smtp_from_email
    message["To"] = email

    text = f"""
You requested a password reset for your account.

Please click the following link to reset your password:
{reset_url}

This link will expire in {minutes} minutes and can only be used once.

If you did not request this, please ignore this email.
    """
    html = f"""
<html>
  <body>
    <p>You requested a password reset for your account.</p>
    <p>Please click the following link to reset your password:</p>
    <p><a href="{reset_url}">{reset_url}</a></p>
    <p>This link will expire in {minutes} minutes and can only be used once.</p>
    <p>If you did not request this, please ignore this email.</p>
  </body>
</html>
    """

    message.attach(MIMEText(text, "plain"))
    message.attach(MIMEText(html, "html"))
    return message


async def send_password_reset_email(email: str, reset_url: str) -> None:
    """
    Send password reset email to user.

    Args:
        email: User's email address
        reset_url: Link to the client's reset page, token included

    Raises:
        ValueError: If SMTP is not configured.
        aiosmtplib.SMTPException: If delivery fails.
    """
    if not smtp_configured():
        logger.warning("SMTP not configured - cannot send password reset email to %s", email)
        raise ValueError("SMTP is not configured. Please configure SMTP settings in .env file.")

    message = _build_password_reset_message(email, reset_url)

    send_kwargs = {
        "hostname": settings.smtp_host,
        "port": settings.smtp_port,
        "username": settings.smtp_user,
        "password": settings.smtp_password,
    }

    # Port 465 uses direct TLS, everything else STARTTLS
    if settings.smtp_use_tls:
        if settings.smtp_port == 465:
            send_kwargs["use_tls"] = True
        else:
            send_kwargs["start_tls"] = True

    await aiosmtplib.send(message, **send_kwargs)
