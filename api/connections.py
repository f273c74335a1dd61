"""
WebSocket connection tracking for the chat transport.
Implements the notifier used by the chat service: every notification is
queued per connection and written by a background task, so the service
never waits on a socket.
"""
import asyncio
import logging
from datetime import datetime
from typing import Dict, Optional

from fastapi import WebSocket

from core.models import Status

logger = logging.getLogger(__name__)


class ClientConnection:
    """One websocket plus its outbound queue."""

    def __init__(self, connection_id: str, websocket: WebSocket):
        self.connection_id = connection_id
        self.websocket = websocket
        self.alive = True
        self._outbox: asyncio.Queue = asyncio.Queue()
        self._writer: Optional[asyncio.Task] = None

    def start(self) -> None:
        self._writer = asyncio.create_task(self._drain())

    def send(self, payload: dict) -> None:
        if self.alive:
            self._outbox.put_nowait(payload)

    async def _drain(self) -> None:
        while True:
            payload = await self._outbox.get()
            try:
                await self.websocket.send_json(payload)
            except Exception as e:
                logger.warning(f"Dropping connection {self.connection_id}, send failed: {e}")
                self.alive = False
                return

    async def close(self) -> None:
        self.alive = False
        if self._writer is None:
            return
        self._writer.cancel()
        try:
            await self._writer
        except asyncio.CancelledError:
            pass


class ConnectionHub:
    """Live chat connections keyed by participant id."""

    def __init__(self) -> None:
        self._connections: Dict[str, ClientConnection] = {}

    def attach(self, participant_id: str, websocket: WebSocket) -> ClientConnection:
        connection = ClientConnection(participant_id, websocket)
        self._connections[participant_id] = connection
        connection.start()
        return connection

    async def detach(self, participant_id: str) -> None:
        connection = self._connections.pop(participant_id, None)
        if connection is not None:
            await connection.close()

    def send(self, participant_id: str, payload: dict) -> None:
        connection = self._connections.get(participant_id)
        if connection is None:
            logger.debug(f"No connection for {participant_id}, dropping {payload.get('type')}")
            return
        connection.send(payload)

    def broadcast(self, payload: dict) -> None:
        for connection in list(self._connections.values()):
            connection.send(payload)

    def send_error(self, participant_id: str, detail: str) -> None:
        self.send(participant_id, {"type": "error", "detail": detail})

    def __len__(self) -> int:
        return len(self._connections)

    # Notifier implementation

    def is_connected(self, participant_id: str) -> bool:
        connection = self._connections.get(participant_id)
        return connection is not None and connection.alive

    def status_changed(self, participant_id: str, status: Status, room_id: Optional[str] = None) -> None:
        payload = {"type": "status", "status": status.value}
        if room_id is not None:
            payload["roomId"] = room_id
        self.send(participant_id, payload)

    def system_notice(self, participant_id: str, text: str) -> None:
        self.send(participant_id, {"type": "system", "content": text})

    def message_delivered(self, to_id: str, from_tag: str, content: str, timestamp: datetime) -> None:
        self.send(to_id, {
            "type": "message",
            "sender": from_tag,
            "content": content,
            "timestamp": timestamp.isoformat(),
        })

    def message_acknowledged(self, participant_id: str, content: str, timestamp: datetime) -> None:
        self.send(participant_id, {
            "type": "message_sent",
            "content": content,
            "timestamp": timestamp.isoformat(),
        })

    def online_count_changed(self, count: int) -> None:
        self.broadcast({"type": "user_count", "count": count})
