"""
Server-sent notification fan-out.

Each subscriber of ``/notifications`` is a :class:`NotificationClient` with its
own unbounded frame queue. :class:`NotificationManager` owns the set of live
clients. There is no replay: a client only sees messages broadcast while it
is registered.
"""

import asyncio
import json
from collections.abc import AsyncIterator
from datetime import datetime

from ..logging_config import get_logger

logger = get_logger(__name__)


def format_frame(message: str) -> str:
    """Encode ``message`` as a single SSE data frame."""
    return f"data: {json.dumps({'message': message}, ensure_ascii=False, separators=(',', ':'))}\n\n"


class NotificationClient:
    """One open event stream."""

    def __init__(self) -> None:
        self.queue: asyncio.Queue[str] = asyncio.Queue()
        # Only used to tell connections apart in the logs
        self.connected_at = datetime.now().timestamp()

    def send(self, frame: str) -> None:
        self.queue.put_nowait(frame)

    async def next_frame(self) -> str:
        return await self.queue.get()

    def __repr__(self) -> str:
        return f"NotificationClient(connected_at={self.connected_at})"


class NotificationManager:
    """Registry of connected clients; register, unregister and broadcast are its only operations."""

    def __init__(self) -> None:
        self._clients: set[NotificationClient] = set()

    def __len__(self) -> int:
        return len(self._clients)

    def __contains__(self, client: object) -> bool:
        return client in self._clients

    def register(self, client: NotificationClient) -> None:
        self._clients.add(client)
        logger.info("notification_client_connected", client_id=client.connected_at, clients=len(self._clients))

    def unregister(self, client: NotificationClient) -> bool:
        """
        Remove ``client`` from the registry.

        Returns:
            bool: True if the client was registered; repeated calls return False
        """
        if client not in self._clients:
            return False
        self._clients.discard(client)
        logger.info("notification_client_disconnected", client_id=client.connected_at, clients=len(self._clients))
        return True

    def broadcast(self, message: str) -> int:
        """
        Send ``message`` to every registered client.

        A client whose write fails stays registered until its connection closes.

        Returns:
            int: Number of clients the frame was written to
        """
        logger.info("notification_broadcast", message=message, clients=len(self._clients))
        frame = format_frame(message)

        delivered = 0
        for client in list(self._clients):
            try:
                client.send(frame)
                delivered += 1
            except Exception as e:
                logger.error("notification_send_failed", client_id=client.connected_at, error=str(e))
        return delivered


async def stream_notifications(client: NotificationClient, manager: NotificationManager) -> AsyncIterator[str]:
    """Register ``client``, yield its frames until the stream is closed, then unregister it."""
    manager.register(client)
    try:
        while True:
            yield await client.next_frame()
    finally:
        manager.unregister(client)


# Global notification manager instance
_notification_manager: NotificationManager | None = None


def get_notification_manager() -> NotificationManager:
    """Get the global notification manager instance."""
    global _notification_manager
    if _notification_manager is None:
        _notification_manager = NotificationManager()
    return _notification_manager
