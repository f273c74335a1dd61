"""
Room manager for paired chat sessions.
Creates rooms, maps participants to rooms and handles departures.
"""
import logging
from typing import Dict, Optional

from core.interfaces import Notifier
from core.matchmaking import common_interests
from core.models import Participant, Room, Status
from core.session_registry import SessionRegistry

logger = logging.getLogger(__name__)

CONNECTED_NOTICE = "You are now connected with a stranger!"
PARTNER_LEFT_NOTICE = "Stranger has disconnected."


class RoomManager:
    """Manages chat rooms and the participant -> room mapping."""

    def __init__(self, registry: SessionRegistry, notifier: Notifier):
        """
        Initialize room manager.

        Args:
            registry: Registry used to resolve room members
            notifier: Transport sink for status and system notices
        """
        self.registry = registry
        self.notifier = notifier
        self._rooms: Dict[str, Room] = {}

    def pair(self, first: Participant, second: Participant) -> Room:
        """
        Create a room for two matched participants and notify both.

        Args:
            first: Participant whose request produced the match
            second: Participant taken from the waiting queue

        Returns:
            Created Room
        """
        room = Room.open(first.id, second.id)
        self._rooms[room.id] = room
        first.room_id = room.id
        second.room_id = room.id

        shared = common_interests(first, second)
        notice = CONNECTED_NOTICE
        if shared:
            notice += f" You both like: {', '.join(shared)}"

        for member in (first, second):
            self.notifier.status_changed(member.id, Status.IN_CHAT, room.id)
            self.notifier.system_notice(member.id, notice)

        logger.info(f"Paired {first.id} <-> {second.id} in room {room.id}")
        return room

    def current_room(self, participant_id: str) -> Optional[Room]:
        participant = self.registry.get(participant_id)
        if participant is None or participant.room_id is None:
            return None
        return self._rooms.get(participant.room_id)

    def partner_of(self, participant_id: str) -> Optional[Participant]:
        """
        Get the other member of the participant's room, if they are still in it.

        Returns None for an abandoned room whose other member has left,
        disconnected or moved on to a new room.
        """
        room = self.current_room(participant_id)
        if room is None:
            return None
        partner = self.registry.get(room.other_member(participant_id))
        if partner is None or partner.room_id != room.id:
            return None
        return partner

    def leave(self, participant_id: str) -> Optional[Room]:
        """
        Take a participant out of their room.

        The remaining member is told their partner left, but keeps their own
        room mapping until they request a new match or disconnect.

        Returns:
            The room that was left, or None if the participant had no room
        """
        participant = self.registry.get(participant_id)
        if participant is None or participant.room_id is None:
            return None

        room = self._rooms.get(participant.room_id)
        participant.room_id = None
        if room is None:
            return None

        partner = self.registry.get(room.other_member(participant_id))
        if partner is not None and partner.room_id == room.id:
            self.notifier.status_changed(partner.id, Status.PARTNER_DISCONNECTED)
            self.notifier.system_notice(partner.id, PARTNER_LEFT_NOTICE)
        else:
            # Nobody maps to this room any more
            self._rooms.pop(room.id, None)

        logger.info(f"Participant {participant_id} left room {room.id}")
        return room

    @property
    def room_count(self) -> int:
        return len(self._rooms)
