"""
Registry of every connected participant, whatever their state.
"""
from dataclasses import replace
from typing import Dict, List, Optional

from core.models import Participant, Profile


class SessionRegistry:
    """Authoritative map of participant id -> Participant."""

    def __init__(self) -> None:
        self._participants: Dict[str, Participant] = {}

    def register(self, participant_id: str, profile: Optional[Profile] = None) -> Participant:
        """
        Insert a participant, or overwrite the profile of an existing one.

        Overwriting keeps the participant's registration position and room
        mapping; only the matching filters change.
        """
        profile = profile or Profile()
        participant = self._participants.get(participant_id)
        if participant is None:
            participant = Participant.from_profile(participant_id, profile)
            self._participants[participant_id] = participant
        else:
            participant.apply_profile(profile)
        return participant

    def unregister(self, participant_id: str) -> Optional[Participant]:
        """Remove a participant. Removing an unknown id is not an error."""
        return self._participants.pop(participant_id, None)

    def get(self, participant_id: str) -> Optional[Participant]:
        return self._participants.get(participant_id)

    def snapshot(self) -> List[Participant]:
        """Point-in-time copies, in registration order."""
        return [replace(participant) for participant in self._participants.values()]

    def __contains__(self, participant_id: object) -> bool:
        return participant_id in self._participants

    def __len__(self) -> int:
        return len(self._participants)
