"""
Error taxonomy for the pairing core.
None of these are fatal to the process; each degrades one participant's session at most.
"""


class ChatCoreError(Exception):
    """Base class for pairing core errors."""


class StaleReferenceError(ChatCoreError):
    """A queued candidate or room partner is no longer live."""

    def __init__(self, participant_id: str):
        super().__init__(f"Participant {participant_id} is no longer connected")
        self.participant_id = participant_id


class RoomMismatchError(ChatCoreError):
    """A message references a room the sender is not currently in."""

    def __init__(self, participant_id: str, claimed_room_id, current_room_id):
        super().__init__(
            f"Participant {participant_id} claimed room {claimed_room_id}, "
            f"current room is {current_room_id}"
        )
        self.participant_id = participant_id
        self.claimed_room_id = claimed_room_id
        self.current_room_id = current_room_id


class PersistenceError(ChatCoreError):
    """The message store failed to record a message."""
