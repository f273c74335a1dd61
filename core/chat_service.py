"""
Chat service: the single mutation path of the pairing core.

Every transport event (connect, disconnect, pairing request, leave, message)
is handled here under one asyncio lock, so the registry, the waiting queue
and the room mappings change together or not at all. Nothing awaited under
the lock does I/O: notifications are enqueued by the transport and message
writes run as background tasks.
"""
import asyncio
import logging
from typing import Optional

from core.exceptions import StaleReferenceError
from core.interfaces import MessageStore, Notifier
from core.matchmaking import WaitingQueue
from core.message_relay import MessageRelay
from core.models import Participant, Profile, Room, Stats, Status
from core.room_manager import RoomManager
from core.session_registry import SessionRegistry
from core.stats import StatsAggregator, StatsObserver, StatsPublisher

logger = logging.getLogger(__name__)


class ChatService:
    """Pairs participants, tracks rooms and relays messages."""

    def __init__(
        self,
        notifier: Notifier,
        store: MessageStore,
        top_tags_limit: int = 10,
    ):
        """
        Initialize chat service.

        Args:
            notifier: Transport sink for participant notifications
            store: Message persistence backend
            top_tags_limit: Number of tags reported in statistics
        """
        self.notifier = notifier
        self.store = store
        self.registry = SessionRegistry()
        self.queue = WaitingQueue()
        self.rooms = RoomManager(self.registry, notifier)
        self.relay = MessageRelay(self.rooms, notifier, store)
        self.aggregator = StatsAggregator(top_tags_limit)
        self.publisher = StatsPublisher()
        self._lock = asyncio.Lock()

    # Transport events

    async def connected(self, participant_id: str) -> Participant:
        """Register a new connection with a default profile."""
        async with self._lock:
            participant = self.registry.register(participant_id)
            logger.info(f"Participant connected: {participant_id}")
            self._refresh_stats(online_changed=True)
            return participant

    async def disconnected(self, participant_id: str) -> None:
        """Tear down everything a closed connection owned."""
        async with self._lock:
            self.rooms.leave(participant_id)
            self.queue.cancel(participant_id)
            self.registry.unregister(participant_id)
            logger.info(f"Participant disconnected: {participant_id}")
            self._refresh_stats(online_changed=True)

    async def request_match(self, participant_id: str, profile: Profile) -> Optional[Room]:
        """
        Pair a participant with the earliest compatible waiting participant.

        Leaves any current room and any previous queue entry first, then
        rebinds the profile. Without a compatible partner the participant
        joins the tail of the waiting queue.

        Args:
            participant_id: Connection id of the seeker
            profile: Matching filters for this request

        Returns:
            The new Room, or None if the seeker is now waiting
        """
        async with self._lock:
            if participant_id not in self.registry:
                logger.warning(f"Pairing request from unknown participant {participant_id}")
                return None

            self.rooms.leave(participant_id)
            self.queue.cancel(participant_id)
            seeker = self.registry.register(participant_id, profile)

            room = None
            partner = self._take_partner(seeker)
            if partner is not None:
                room = self.rooms.pair(seeker, partner)
            else:
                self.queue.append(seeker)
                self.notifier.status_changed(seeker.id, Status.WAITING)
                logger.info(f"Participant {seeker.id} is waiting (queue size: {len(self.queue)})")

            self._refresh_stats()
            return room

    async def leave_requested(self, participant_id: str) -> None:
        """Leave the current room and stop waiting, staying connected."""
        async with self._lock:
            self.rooms.leave(participant_id)
            self.queue.cancel(participant_id)
            self._refresh_stats()

    async def message_sent(self, participant_id: str, room_id, content: str) -> bool:
        """Relay a chat message. Returns False if the room claim was rejected."""
        async with self._lock:
            accepted = self.relay.send(participant_id, room_id, content)
            self._refresh_stats()
            return accepted

    # Statistics

    def stats(self) -> Stats:
        """Pull accessor for collaborators that poll."""
        return self.aggregator.compute(self.registry)

    def subscribe(self, observer: StatsObserver) -> None:
        self.publisher.subscribe(observer)

    def unsubscribe(self, observer: StatsObserver) -> None:
        self.publisher.unsubscribe(observer)

    async def wait_for_pending_writes(self) -> None:
        await self.relay.wait_for_pending_writes()

    # Internals

    def _is_live(self, participant_id: str) -> bool:
        return participant_id in self.registry and self.notifier.is_connected(participant_id)

    def _claim(self, candidate: Participant) -> Participant:
        if not self._is_live(candidate.id):
            raise StaleReferenceError(candidate.id)
        return candidate

    def _take_partner(self, seeker: Participant) -> Optional[Participant]:
        """
        Remove and return the first live compatible candidate.

        Stale entries found on the way are dropped. Every pass removes one
        entry, so the loop is bounded by the queue length.
        """
        for _ in range(len(self.queue)):
            candidate = self.queue.find_match(seeker)
            if candidate is None:
                return None
            self.queue.cancel(candidate.id)
            try:
                return self._claim(candidate)
            except StaleReferenceError as e:
                logger.info(f"Discarding stale queue entry: {e}")
        return None

    def _refresh_stats(self, online_changed: bool = False) -> None:
        stats = self.stats()
        self.publisher.publish(stats)
        if online_changed:
            self.notifier.online_count_changed(stats.online_count)
