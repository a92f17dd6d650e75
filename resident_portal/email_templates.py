"""
MJML e-mail templates for portal notifications

Every user-supplied value is HTML-escaped before it lands in the markup.
"""

import html
from typing import Optional

from .config import PORTAL_BASE_URL

THEME = {
    "accent": "#2563eb",
    "accent_soft": "#dbeafe",
    "page": "#f1f5f9",
    "card": "#ffffff",
    "heading": "#0f172a",
    "body": "#334155",
    "muted": "#64748b",
}

FONT_STACK = "'Segoe UI', Helvetica, Arial, sans-serif"


def _button(url: str, label: str) -> str:
    return f"""
      <mj-button href="{html.escape(url, quote=True)}" background-color="{THEME['accent']}"
                 color="#ffffff" border-radius="6px" font-size="15px" padding="24px 0 0 0">
        {html.escape(label)}
      </mj-button>"""


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
) -> str:
    """Wrap content sections in the portal card layout"""
    button = _button(cta_url, cta_label) if cta_url and cta_label else ""

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="{FONT_STACK}" />
          <mj-text font-size="15px" line-height="1.5" color="{THEME['body']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['page']}">
        <mj-section background-color="{THEME['card']}" padding="32px 28px" border-radius="8px">
          <mj-column>
            <mj-text font-size="22px" font-weight="600" color="{THEME['heading']}">{title}</mj-text>
            {content_sections}
            {button}
          </mj-column>
        </mj-section>
        <mj-section padding="16px 0">
          <mj-column>
            <mj-text align="center" font-size="12px" color="{THEME['muted']}">
              Sent by your <a href="{PORTAL_BASE_URL}" style="color: {THEME['muted']};">resident portal</a>.
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def chat_notification_template(recipient_name: str, sender_name: str, message: str, chat_url: str) -> str:
    """New private chat message"""
    sender = html.escape(sender_name)
    quoted = html.escape(message).replace("\n", "<br/>")

    content = f"""
            <mj-text>Hi {html.escape(recipient_name or "there")},</mj-text>
            <mj-text><strong>{sender}</strong> sent you a message:</mj-text>
            <mj-text container-background-color="{THEME['accent_soft']}" padding="14px 18px">{quoted}</mj-text>
            <mj-text color="{THEME['muted']}" font-size="13px">Reply in the portal to continue the conversation.</mj-text>
    """

    return get_base_template(
        title=f"New message from {sender}",
        preview_text=f"{sender} sent you a message",
        content_sections=content,
        cta_url=chat_url,
        cta_label="Reply",
    )


def chat_notification_text(recipient_name: str, sender_name: str, message: str, chat_url: str) -> str:
    """Plain-text alternative for the chat notification"""
    return (
        f"Hi {recipient_name or 'there'},\n\n"
        f"{sender_name} sent you a message:\n\n"
        f'"{message}"\n\n'
        f"Reply here: {chat_url}\n"
    )
