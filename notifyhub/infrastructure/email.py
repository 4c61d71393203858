"""Utility helpers for sending notification emails via SendGrid."""

from __future__ import annotations

import html
import json
import logging
from typing import Any

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from notifyhub.config import get_settings
from notifyhub.domain.entities import Notification

logger = logging.getLogger(__name__)

_PRIORITY_SUBJECT_PREFIX = {"high": "[Important] ", "urgent": "[Urgent] "}


def describe_sendgrid_error(body: Any) -> str | None:
    """Return a readable summary of a SendGrid error payload."""

    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    if isinstance(body, str):
        body = body.strip()
        if not body:
            return None
        try:
            body = json.loads(body)
        except json.JSONDecodeError:
            return body
    if not isinstance(body, dict):
        return None

    messages = []
    for item in body.get("errors") or []:
        if not isinstance(item, dict) or not item.get("message"):
            continue
        if item.get("help"):
            messages.append(f"{item['message']} (help: {item['help']})")
        else:
            messages.append(str(item["message"]))
    return "; ".join(messages) or json.dumps(body)


def _log_failure(status_code: int | None, body: Any) -> None:
    details = describe_sendgrid_error(body)
    if status_code and details:
        logger.error("SendGrid request failed with status %s: %s", status_code, details)
    elif status_code:
        logger.error("SendGrid request failed with status %s", status_code)
    else:
        logger.error("SendGrid request failed: %s", details or "no details")


def send_email(subject: str, html_content: str, recipient: str) -> bool:
    """Send an email using the configured SendGrid credentials."""

    settings = get_settings()
    if not (settings.sendgrid_api_key and settings.sendgrid_sender):
        logger.info("SendGrid configuration incomplete; skipping email delivery")
        return False

    message = Mail(
        from_email=settings.sendgrid_sender,
        to_emails=recipient,
        subject=subject,
        html_content=html_content,
    )

    try:
        client = SendGridAPIClient(settings.sendgrid_api_key)
        response = client.send(message)
    except Exception as exc:  # pragma: no cover - network failures depend on environment
        _log_failure(getattr(exc, "status_code", None), getattr(exc, "body", None))
        return False

    status_code = getattr(response, "status_code", None)
    if not isinstance(status_code, int) or not 200 <= status_code < 300:
        _log_failure(status_code, getattr(response, "body", None))
        return False

    return True


def render_notification_email(
    notification: Notification, *, recipient_name: str | None = None
) -> tuple[str, str]:
    """Return the subject and HTML body used to email ``notification``."""

    subject = _PRIORITY_SUBJECT_PREFIX.get(notification.priority, "") + notification.title
    greeting = f"Hi {recipient_name}," if recipient_name else "Hi,"
    parts = [
        f"<p>{html.escape(greeting)}</p>",
        f"<h2>{html.escape(notification.title)}</h2>",
        f"<p>{html.escape(notification.message)}</p>",
    ]
    if notification.action_url:
        url = html.escape(notification.action_url, quote=True)
        parts.append(f'<p><a href="{url}">Open</a></p>')
    return subject, "".join(parts)


def send_notification_email(
    notification: Notification, recipient: str, *, recipient_name: str | None = None
) -> bool:
    """Email ``notification`` to ``recipient``."""

    subject, html_content = render_notification_email(
        notification, recipient_name=recipient_name
    )
    return send_email(subject, html_content, recipient)


__all__ = [
    "describe_sendgrid_error",
    "render_notification_email",
    "send_email",
    "send_notification_email",
]
