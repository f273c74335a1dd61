"""
Message relay between paired participants.
Validates the sender's room claim, forwards to the partner and hands the message to the store.
"""
import asyncio
import logging
from typing import Set

from core.exceptions import PersistenceError, RoomMismatchError
from core.interfaces import MessageStore, Notifier
from core.models import Room, Status, utcnow
from core.room_manager import RoomManager

logger = logging.getLogger(__name__)

STRANGER = "stranger"
NOT_CONNECTED_NOTICE = "Error: You are not connected to a partner. Please find a new partner."


class MessageRelay:
    """Routes chat messages inside a room."""

    def __init__(self, rooms: RoomManager, notifier: Notifier, store: MessageStore):
        self.rooms = rooms
        self.notifier = notifier
        self.store = store
        self._pending_writes: Set[asyncio.Task] = set()

    def validate(self, sender_id: str, claimed_room_id) -> Room:
        """
        Check that the sender is currently in the room they claim.

        Raises:
            RoomMismatchError: if the sender has no room or a different one
        """
        room = self.rooms.current_room(sender_id)
        if room is None or room.id != claimed_room_id:
            raise RoomMismatchError(sender_id, claimed_room_id, room.id if room else None)
        return room

    def send(self, sender_id: str, claimed_room_id, content: str) -> bool:
        """
        Relay a message from `sender_id`.

        Delivery to the partner is best effort: an abandoned room delivers
        nothing and nothing is queued. Persistence runs in the background.

        Returns:
            True if the message was accepted, False if it was rejected
        """
        try:
            room = self.validate(sender_id, claimed_room_id)
        except RoomMismatchError as e:
            logger.info(f"Message rejected: {e}")
            self.notifier.system_notice(sender_id, NOT_CONNECTED_NOTICE)
            self.notifier.status_changed(sender_id, Status.PARTNER_DISCONNECTED)
            return False

        timestamp = utcnow()
        self._schedule_write(room.id, sender_id, content)

        partner = self.rooms.partner_of(sender_id)
        if partner is not None:
            self.notifier.message_delivered(partner.id, STRANGER, content, timestamp)
        else:
            logger.debug(f"Room {room.id} is abandoned, message from {sender_id} not delivered")

        self.notifier.message_acknowledged(sender_id, content, timestamp)
        return True

    def _schedule_write(self, room_id: str, sender_id: str, content: str) -> None:
        task = asyncio.get_running_loop().create_task(self._persist(room_id, sender_id, content))
        self._pending_writes.add(task)
        task.add_done_callback(self._write_finished)

    async def _persist(self, room_id: str, sender_id: str, content: str) -> None:
        try:
            await self.store.append(room_id, sender_id, content)
        except PersistenceError as e:
            logger.warning(f"Message from {sender_id} in room {room_id} was not persisted: {e}")

    def _write_finished(self, task: asyncio.Task) -> None:
        self._pending_writes.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Unexpected error persisting message: {task.exception()!r}")

    @property
    def pending_writes(self) -> int:
        return len(self._pending_writes)

    async def wait_for_pending_writes(self) -> None:
        """Wait for background writes to finish (used at shutdown and in tests)."""
        if self._pending_writes:
            await asyncio.gather(*list(self._pending_writes), return_exceptions=True)
