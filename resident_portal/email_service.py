"""
Outbound e-mail for the portal
Messages are written in MJML, delivered over SMTP when SMTP_HOST is set and
through Resend otherwise (or when SMTP fails).
"""

import logging
import smtplib
import ssl
from datetime import datetime, timezone
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional, Union
from urllib.parse import urlencode

import resend
from mjml import mjml_to_html

from .config import (
    EMAIL_FROM_ADDRESS,
    PORTAL_BASE_URL,
    RESEND_API_KEY,
    SMTP_HOST,
    SMTP_PASSWORD,
    SMTP_PORT,
    SMTP_USE_TLS,
    SMTP_USER,
)
from .email_templates import chat_notification_template, chat_notification_text

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


class EmailDeliveryError(Exception):
    """Raised when no configured provider could deliver a message"""


def compile_mjml_to_html(mjml_content: str) -> str:
    """Render MJML markup to e-mail safe HTML"""
    result = mjml_to_html(mjml_content)
    # mjml_to_html returns a dict-like result with 'html' and 'errors' keys
    errors = result.get("errors") if hasattr(result, "get") else None
    if errors:
        logger.warning(f"MJML compilation warnings: {errors}")
    return result["html"] if hasattr(result, "get") else str(result)


def send_via_smtp(
    to: list[str],
    subject: str,
    html_content: str,
    from_address: str,
    text_content: Optional[str] = None,
) -> dict:
    """Send email via the configured SMTP server"""
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = from_address
    msg["To"] = ", ".join(to)

    if text_content:
        msg.attach(MIMEText(text_content, "plain"))
    msg.attach(MIMEText(html_content, "html"))

    try:
        if SMTP_PORT == 465:
            context = ssl.create_default_context()
            server = smtplib.SMTP_SSL(SMTP_HOST, SMTP_PORT, context=context, timeout=30)
        else:
            server = smtplib.SMTP(SMTP_HOST, SMTP_PORT, timeout=30)
            if SMTP_USE_TLS:
                server.starttls(context=ssl.create_default_context())

        with server:
            if SMTP_USER:
                server.login(SMTP_USER, SMTP_PASSWORD or "")
            server.sendmail(from_address.split("<")[-1].rstrip(">"), to, msg.as_string())
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"❌ SMTP send failed via {SMTP_HOST}: {e}")
        raise EmailDeliveryError(f"SMTP failed: {e}") from e

    logger.info(f"✅ SMTP email sent successfully via {SMTP_HOST}")
    return {"id": f"smtp-{datetime.now(timezone.utc).timestamp()}", "success": True}


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    text_content: Optional[str] = None,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email using SMTP (if configured) or Resend (fallback)

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)
        text_content: Optional plain-text alternative
        from_address: Optional custom from address

    Returns:
        Send response dict; {"success": False} when no provider is configured
    """
    html_content = compile_mjml_to_html(mjml_content)

    recipients = [to] if isinstance(to, str) else to
    sender = from_address or EMAIL_FROM_ADDRESS

    if SMTP_HOST:
        try:
            logger.info(f"📧 Sending email via SMTP: {SMTP_HOST}")
            return send_via_smtp(recipients, subject, html_content, sender, text_content)
        except EmailDeliveryError as e:
            if not RESEND_API_KEY:
                raise
            logger.warning(f"⚠️ SMTP failed, falling back to Resend: {e}")

    if not RESEND_API_KEY:
        logger.warning("⚠️ No email service configured - set SMTP_HOST or RESEND_API_KEY")
        return {"success": False}

    email_data = {
        "from": sender,
        "to": recipients,
        "subject": subject,
        "html": html_content,
    }
    if text_content:
        email_data["text"] = text_content

    try:
        logger.info(f"📧 Sending email via Resend to: {recipients}")
        response = resend.Emails.send(email_data)
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise EmailDeliveryError(f"Failed to send email: {e}") from e

    logger.info(f"✅ Email sent successfully via Resend: {response}")
    return response


def build_chat_url(sender_id: str, sender_name: str) -> str:
    """Link that opens the private conversation with the sender"""
    query = urlencode({"recipientId": sender_id, "recipientName": sender_name})
    return f"{PORTAL_BASE_URL}/messages?{query}"


async def send_chat_notification(
    to: str, recipient_name: str, sender_id: str, sender_name: str, message: str
) -> dict:
    """
    Tell a user about a new private chat message.

    Runs as a background task after the message is stored, so delivery
    problems are logged and reported in the result instead of raised.
    """
    chat_url = build_chat_url(sender_id, sender_name)
    try:
        return await send_email(
            to=to,
            subject=f"New message from {sender_name}",
            mjml_content=chat_notification_template(recipient_name, sender_name, message, chat_url),
            text_content=chat_notification_text(recipient_name, sender_name, message, chat_url),
        )
    except Exception as e:
        logger.error(f"❌ Chat notification to {to} failed: {e}")
        return {"success": False, "error": str(e)}
