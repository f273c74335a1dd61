"""
SQLAlchemy-backed message store used by the chat service.
"""
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.exceptions import PersistenceError
from db.crud import create_message, get_message_count, increment_total_views, get_total_views

logger = logging.getLogger(__name__)


class SqlMessageStore:
    """Append-only message persistence plus site counters."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        """
        Initialize message store.

        Args:
            session_factory: Async session factory (e.g. AsyncSessionLocal)
        """
        self.session_factory = session_factory

    async def append(self, room_id: str, sender_id: str, content: str) -> None:
        """
        Persist a relayed message.

        Raises:
            PersistenceError: if the database write fails (already logged)
        """
        try:
            async with self.session_factory() as session:
                await create_message(session, room_id, sender_id, content)
        except SQLAlchemyError as e:
            logger.error(f"❌ Error saving message for room {room_id}: {e}")
            raise PersistenceError(str(e)) from e

    async def count_all(self) -> int:
        async with self.session_factory() as session:
            return await get_message_count(session)

    async def increment_views(self) -> None:
        try:
            async with self.session_factory() as session:
                await increment_total_views(session)
        except SQLAlchemyError as e:
            logger.error(f"❌ View count error: {e}")
            raise PersistenceError(str(e)) from e

    async def total_views(self) -> int:
        async with self.session_factory() as session:
            return await get_total_views(session)
