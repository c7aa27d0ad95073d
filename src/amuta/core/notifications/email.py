"""Email client using Resend API."""

import html
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from datetime import datetime

import resend

from src.amuta.core.config import get_settings
from src.amuta.core.logging import get_logger

logger = get_logger(__name__)

# Thread pool for email sending with timeout support
_email_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="email_sender")

# Shared email styles
_BODY_STYLE = (
    "font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; "
    "line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;"
)
_BUTTON_STYLE = (
    "background-color: #2563eb; color: white; padding: 12px 24px; "
    "text-decoration: none; border-radius: 6px; display: inline-block; font-weight: 500;"
)
_LINK_STYLE = "color: #2563eb; word-break: break-all;"
_MUTED_STYLE = "color: #666; font-size: 14px;"


def send_email(to: str, subject: str, html_body: str, email_type: str = "generic") -> bool:
    """Send a single email.

    Returns:
        True if email was sent (or logged in dev mode), False on error or timeout.
    """
    settings = get_settings()

    if not settings.resend_api_key:
        # Dev mode: log instead of sending
        logger.warning(
            "RESEND_API_KEY not set - email not sent",
            to=to,
            email_type=email_type,
        )
        return True

    resend.api_key = settings.resend_api_key

    def _send() -> None:
        resend.Emails.send(
            {
                "from": f"{settings.app_name} <{settings.email_from}>",
                "to": [to],
                "subject": subject,
                "html": html_body,
            }
        )

    try:
        # Use thread pool with timeout to prevent hanging on slow API responses
        future = _email_executor.submit(_send)
        future.result(timeout=settings.email_send_timeout_seconds)
        logger.info("Email sent", to=to, email_type=email_type)
        return True
    except FuturesTimeoutError:
        logger.error("Email send timed out", to=to, timeout=settings.email_send_timeout_seconds)
        return False
    except Exception as e:
        logger.error("Failed to send email", to=to, email_type=email_type, error=str(e))
        return False


def build_invite_url(token: str) -> str:
    settings = get_settings()
    return f"{settings.app_url}/invite/accept?token={token}"


def send_invite_email(
    to: str,
    token: str,
    organization_name: str,
    role_name: str,
    expires_at: datetime,
    reminder: bool = False,
) -> bool:
    """Send organization invite email.

    Args:
        to: Recipient email address
        token: Signed invite token (included in URL)
        organization_name: Name of the organization being joined
        role_name: Role granted on acceptance
        expires_at: Invite row expiry, shown to the recipient
        reminder: True when resending an outstanding invite

    Returns:
        True if email was sent, False on error
    """
    invite_url = build_invite_url(token)
    if reminder:
        subject = f"Reminder: Invitation to join {organization_name}"
    else:
        subject = f"Invitation to join {organization_name}"

    return send_email(
        to=to,
        subject=subject,
        html_body=_get_invite_email_html(
            organization_name, role_name, invite_url, expires_at, reminder
        ),
        email_type="invite_reminder" if reminder else "invite",
    )


def _get_invite_email_html(
    organization_name: str,
    role_name: str,
    invite_url: str,
    expires_at: datetime,
    reminder: bool,
) -> str:
    """Generate HTML content for invite email."""
    settings = get_settings()
    safe_org_name = html.escape(organization_name)
    safe_role = html.escape(role_name)
    safe_app_name = html.escape(settings.app_name)
    heading = "A reminder: you're invited!" if reminder else "You're invited!"
    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="{_BODY_STYLE}">
    <h1 style="color: #2563eb; margin-bottom: 24px;">{heading}</h1>
    <p>You were invited to join <strong>{safe_org_name}</strong> on {safe_app_name}.</p>
    <p>Assigned role: <strong>{safe_role}</strong></p>
    <p style="margin: 32px 0;">
        <a href="{invite_url}" style="{_BUTTON_STYLE}">Accept Invitation</a>
    </p>
    <p style="{_MUTED_STYLE}">
        Or copy and paste this link into your browser:<br>
        <a href="{invite_url}" style="{_LINK_STYLE}">{invite_url}</a>
    </p>
    <p style="{_MUTED_STYLE} margin-top: 32px;">
        This invitation will expire on {expires_at:%Y-%m-%d} (UTC). If you didn't expect
        this invitation, you can safely ignore this email.
    </p>
</body>
</html>"""
