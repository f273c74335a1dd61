"""
In-memory matchmaking for anonymous chat.
Holds the FIFO waiting queue and the first-fit compatibility rules.
"""
from typing import Dict, Iterator, List, Optional

from core.models import Gender, Participant


def wants(preference: Gender, identity: Gender) -> bool:
    """Check if a gender preference admits an identity (`any` admits all)."""
    return preference == Gender.ANY or preference == identity


def is_gender_compatible(seeker: Participant, candidate: Participant) -> bool:
    """Both sides must want each other (or accept all)."""
    return wants(seeker.gender_pref, candidate.gender_self) and wants(candidate.gender_pref, seeker.gender_self)


def common_interests(first: Participant, second: Participant) -> List[str]:
    """Tags shared by both participants, in the first participant's order."""
    theirs = set(second.interests)
    return [tag for tag in first.interests if tag in theirs]


def passes_interest_filter(seeker: Participant, candidate: Participant) -> bool:
    """
    Interest filter.

    A seeker without interests accepts anyone. A waiting candidate without
    interests is open to anyone too, so a seeker with interests can still
    pair with them; requiring an overlap whenever the seeker lists tags
    would leave such a seeker waiting behind open candidates. When both
    sides listed interests they must share at least one.
    """
    if not seeker.interests or not candidate.interests:
        return True
    return bool(common_interests(seeker, candidate))


def is_compatible(seeker: Participant, candidate: Participant) -> bool:
    if seeker.id == candidate.id:
        return False
    return is_gender_compatible(seeker, candidate) and passes_interest_filter(seeker, candidate)


def find_match(seeker: Participant, candidates) -> Optional[Participant]:
    """
    Return the earliest compatible candidate.

    First fit, not best fit: candidates are not ranked by overlap size.

    Args:
        seeker: Participant looking for a partner
        candidates: Participants in arrival order

    Returns:
        The first compatible candidate or None
    """
    for candidate in candidates:
        if is_compatible(seeker, candidate):
            return candidate
    return None


class WaitingQueue:
    """
    FIFO pool of participants waiting for a partner.

    Each participant appears at most once. Arrival order is only used as the
    scan and removal order; nothing is ever reordered.
    """

    def __init__(self) -> None:
        # participant id -> participant, insertion order == arrival order
        self._entries: Dict[str, Participant] = {}

    def append(self, participant: Participant) -> bool:
        """
        Add a participant to the tail.

        Returns:
            False if the participant was already waiting (position unchanged)
        """
        if participant.id in self._entries:
            return False
        self._entries[participant.id] = participant
        return True

    def cancel(self, participant_id: str) -> Optional[Participant]:
        """Remove a participant if present; relative order of the rest is kept."""
        return self._entries.pop(participant_id, None)

    def find_match(self, seeker: Participant) -> Optional[Participant]:
        """Scan in arrival order for the first candidate compatible with `seeker`."""
        return find_match(seeker, self._entries.values())

    def ids(self) -> List[str]:
        return list(self._entries)

    def __contains__(self, participant_id: object) -> bool:
        return participant_id in self._entries

    def __iter__(self) -> Iterator[Participant]:
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)
