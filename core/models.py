"""
In-memory data model for the pairing core.
Participants, rooms and statistics snapshots.
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple


class Gender(str, Enum):
    """Self-declared identity and partner preference."""
    MALE = "male"
    FEMALE = "female"
    ANY = "any"


class Status(str, Enum):
    """Visible session state reported to a participant."""
    WAITING = "waiting"
    IN_CHAT = "in_chat"
    PARTNER_DISCONNECTED = "partner_disconnected"


def normalize_interests(raw: Optional[Iterable[str]]) -> Tuple[str, ...]:
    """
    Normalize interest tags.

    Lower-cases and trims every tag, drops empty and non-string entries
    and collapses duplicates. First-seen order is kept so tag statistics are stable.
    """
    if not raw:
        return ()
    tags = (tag.strip().lower() for tag in raw if isinstance(tag, str))
    return tuple(dict.fromkeys(tag for tag in tags if tag))


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Profile:
    """Matching filters supplied with a pairing request."""
    gender_self: Gender = Gender.ANY
    gender_pref: Gender = Gender.ANY
    interests: Tuple[str, ...] = ()

    @classmethod
    def build(
        cls,
        gender_self: Optional[str] = None,
        gender_pref: Optional[str] = None,
        interests: Optional[Iterable[str]] = None,
    ) -> "Profile":
        """Build a profile from loosely typed input, defaulting to `any`."""
        return cls(
            gender_self=Gender(gender_self or Gender.ANY),
            gender_pref=Gender(gender_pref or Gender.ANY),
            interests=normalize_interests(interests),
        )


@dataclass
class Participant:
    """One live connection and its current matching profile."""
    id: str
    gender_self: Gender = Gender.ANY
    gender_pref: Gender = Gender.ANY
    interests: Tuple[str, ...] = ()
    room_id: Optional[str] = None
    connected_at: datetime = field(default_factory=utcnow)

    @classmethod
    def from_profile(cls, participant_id: str, profile: Profile) -> "Participant":
        return cls(
            id=participant_id,
            gender_self=profile.gender_self,
            gender_pref=profile.gender_pref,
            interests=profile.interests,
        )

    def apply_profile(self, profile: Profile) -> None:
        """Rebind the matching filters (done on every pairing request)."""
        self.gender_self = profile.gender_self
        self.gender_pref = profile.gender_pref
        self.interests = profile.interests


@dataclass(frozen=True)
class Room:
    """A two-party chat session. Membership never changes."""
    id: str
    members: Tuple[str, str]
    created_at: datetime = field(default_factory=utcnow)

    @classmethod
    def open(cls, first_id: str, second_id: str) -> "Room":
        return cls(id=str(uuid.uuid4()), members=(first_id, second_id))

    def other_member(self, participant_id: str) -> Optional[str]:
        """Return the member that is not `participant_id`."""
        first, second = self.members
        if participant_id == first:
            return second
        if participant_id == second:
            return first
        return None


@dataclass(frozen=True)
class TagCount:
    tag: str
    count: int


@dataclass(frozen=True)
class Stats:
    """Point-in-time participant statistics."""
    online_count: int
    tag_histogram: Dict[str, int]
    top_tags: List[TagCount]

    def to_dict(self) -> Dict:
        return {
            "onlineUsers": self.online_count,
            "activeTags": [{"tag": t.tag, "count": t.count} for t in self.top_tags],
        }
