"""Registry of live notification websockets, grouped by user."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class NotificationConnectionManager:
    """Track the open websockets of each user and fan messages out to them.

    This is the only in-process state of the service; it is never used to
    decide whether a notification was delivered.
    """

    def __init__(self) -> None:
        self._sockets: defaultdict[str, set[WebSocket]] = defaultdict(set)

    async def connect(self, user_id: str, websocket: WebSocket) -> None:
        await websocket.accept()
        self._sockets[user_id].add(websocket)
        logger.debug("Websocket opened for user %s (%s live)", user_id, len(self._sockets[user_id]))

    def disconnect(self, user_id: str, websocket: WebSocket) -> None:
        sockets = self._sockets.get(user_id)
        if not sockets:
            return
        sockets.discard(websocket)
        if not sockets:
            del self._sockets[user_id]

    def has_connections(self, user_id: str) -> bool:
        return bool(self._sockets.get(user_id))

    async def send_to_user(self, user_id: str, message: dict[str, Any]) -> int:
        """Send ``message`` to every socket of ``user_id``; return how many got it.

        Sockets that fail to send are treated as stale and dropped.
        """

        delivered = 0
        for websocket in list(self._sockets.get(user_id, ())):
            try:
                await websocket.send_json(message)
            except Exception:  # pragma: no cover - depends on client disconnect timing
                logger.debug("Dropping stale websocket for user %s", user_id)
                self.disconnect(user_id, websocket)
            else:
                delivered += 1
        return delivered

    async def close_all(self, code: int = 1001) -> None:
        """Close every open socket, used when the application shuts down."""

        sockets = [(user_id, ws) for user_id, group in self._sockets.items() for ws in group]
        if sockets:
            logger.info("Closing %s live notification websockets", len(sockets))
        for user_id, websocket in sockets:
            try:
                await websocket.close(code=code)
            except RuntimeError:
                logger.debug("Websocket for user %s was already closed", user_id)
            self.disconnect(user_id, websocket)


__all__ = ["NotificationConnectionManager"]
