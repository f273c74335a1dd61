"""
Admin observer channel.
Pushes statistics to connected admin dashboards whenever the chat service reports a change.
"""
import asyncio
import logging
from typing import Dict, Set

from fastapi import WebSocket

from api.connections import ClientConnection
from core.interfaces import MessageStore
from core.models import Stats

logger = logging.getLogger(__name__)


async def build_admin_stats(stats: Stats, store: MessageStore) -> dict:
    """
    Combine live participant statistics with the stored counters.

    Args:
        stats: Snapshot from the chat service
        store: Message store queried for message and view totals

    Returns:
        Payload matching AdminStatsResponse (without uptime)
    """
    total_messages = await store.count_all()
    total_views = await store.total_views()
    payload = stats.to_dict()
    payload["totalMessages"] = total_messages
    payload["totalViews"] = total_views
    return payload


class AdminChannel:
    """Connected admin dashboards."""

    def __init__(self, store: MessageStore):
        self.store = store
        self._connections: Dict[str, ClientConnection] = {}
        self._pending: Set[asyncio.Task] = set()

    def attach(self, admin_id: str, websocket: WebSocket) -> ClientConnection:
        connection = ClientConnection(admin_id, websocket)
        self._connections[admin_id] = connection
        connection.start()
        logger.info(f"Admin dashboard connected: {admin_id}")
        return connection

    async def detach(self, admin_id: str) -> None:
        connection = self._connections.pop(admin_id, None)
        if connection is not None:
            await connection.close()
            logger.info(f"Admin dashboard disconnected: {admin_id}")

    def on_stats(self, stats: Stats) -> None:
        """Stats observer; schedules a push so the caller never waits on the database."""
        if not self._connections:
            return
        task = asyncio.get_running_loop().create_task(self.push(stats))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def push(self, stats: Stats) -> None:
        try:
            payload = await build_admin_stats(stats, self.store)
        except Exception as e:
            logger.error(f"Error broadcasting admin stats: {e}")
            return
        payload["type"] = "admin_stats"
        for connection in list(self._connections.values()):
            connection.send(payload)

    def __len__(self) -> int:
        return len(self._connections)
