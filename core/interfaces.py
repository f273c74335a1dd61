"""
Contracts between the pairing core and its collaborators.
The transport layer implements Notifier; the persistence layer implements MessageStore.
"""
from datetime import datetime
from typing import Optional, Protocol

from core.models import Status


class Notifier(Protocol):
    """
    Outbound notifications consumed by the transport layer.

    Implementations must not block: the core calls these while holding its
    mutation lock, so they should only enqueue work.
    """

    def status_changed(self, participant_id: str, status: Status, room_id: Optional[str] = None) -> None:
        ...

    def system_notice(self, participant_id: str, text: str) -> None:
        ...

    def message_delivered(self, to_id: str, from_tag: str, content: str, timestamp: datetime) -> None:
        ...

    def message_acknowledged(self, participant_id: str, content: str, timestamp: datetime) -> None:
        ...

    def online_count_changed(self, count: int) -> None:
        ...

    def is_connected(self, participant_id: str) -> bool:
        ...


class MessageStore(Protocol):
    """Append-only message persistence, queried for counts only."""

    async def append(self, room_id: str, sender_id: str, content: str) -> None:
        ...

    async def count_all(self) -> int:
        ...

    async def increment_views(self) -> None:
        ...

    async def total_views(self) -> int:
        ...
