"""
CRUD operations for database models.
"""
from sqlalchemy import select, func, update
from sqlalchemy.ext.asyncio import AsyncSession

from db.models import Message, SiteStats

SITE_STATS_ID = 1


async def create_message(session: AsyncSession, room_id: str, sender_id: str, content: str) -> Message:
    """Store a relayed chat message."""
    message = Message(room_id=room_id, sender_id=sender_id, content=content)
    session.add(message)
    await session.commit()
    return message


async def get_message_count(session: AsyncSession) -> int:
    """Get total number of stored messages."""
    result = await session.execute(select(func.count(Message.id)))
    return result.scalar() or 0


async def get_or_create_site_stats(session: AsyncSession) -> SiteStats:
    """Get the site stats row, creating it on first use."""
    site_stats = await session.get(SiteStats, SITE_STATS_ID)
    if site_stats is None:
        site_stats = SiteStats(id=SITE_STATS_ID, total_views=0)
        session.add(site_stats)
        await session.commit()
    return site_stats


async def increment_total_views(session: AsyncSession) -> None:
    """Count one more visit."""
    await get_or_create_site_stats(session)
    await session.execute(
        update(SiteStats)
        .where(SiteStats.id == SITE_STATS_ID)
        .values(total_views=SiteStats.total_views + 1)
    )
    await session.commit()


async def get_total_views(session: AsyncSession) -> int:
    """Get total number of visits."""
    result = await session.execute(
        select(SiteStats.total_views).where(SiteStats.id == SITE_STATS_ID)
    )
    return result.scalar() or 0
