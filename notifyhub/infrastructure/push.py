"""HTTP client for the push gateway that relays messages to devices."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from notifyhub.domain.entities import Notification, PushSubscription

logger = logging.getLogger(__name__)

SEND_PATH = "/v1/messages"


class PushGatewayClient:
    """Send push payloads to a gateway over HTTPS.

    The gateway accepts one message per device token and answers ``2xx`` when
    the message was queued for the device.
    """

    def __init__(
        self,
        base_url: str | None,
        *,
        api_key: str | None = None,
        timeout: float = 5.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/") if base_url else None
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self._base_url)

    def send(self, subscription: PushSubscription, notification: Notification) -> bool:
        """Deliver ``notification`` to one device; return ``True`` when accepted."""

        if not self._base_url:
            logger.info("Push gateway is not configured; skipping push delivery")
            return False

        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        try:
            with httpx.Client(
                base_url=self._base_url, timeout=self._timeout, transport=self._transport
            ) as client:
                response = client.post(
                    SEND_PATH,
                    json=build_push_payload(subscription, notification),
                    headers=headers,
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "Push gateway rejected token for user %s with status %s",
                subscription.user_id,
                exc.response.status_code,
            )
            return False
        except httpx.HTTPError as exc:
            logger.warning("Push gateway request failed: %s", exc)
            return False
        return True


def build_push_payload(
    subscription: PushSubscription, notification: Notification
) -> dict[str, Any]:
    """Return the JSON body posted to the gateway for one device."""

    return {
        "token": subscription.token,
        "platform": subscription.platform,
        "notification": {
            "id": notification.id,
            "title": notification.title,
            "body": notification.message,
            "type": notification.type,
            "priority": notification.priority,
            "actionUrl": notification.action_url,
            "data": notification.data or {},
        },
        "urgency": "high" if notification.priority in ("high", "urgent") else "normal",
    }


__all__ = ["PushGatewayClient", "build_push_payload", "SEND_PATH"]
