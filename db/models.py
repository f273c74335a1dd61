"""
SQLAlchemy models for the database.
Defines Message and SiteStats models.
"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Text, Index
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Message(Base):
    """Append-only record of a relayed chat message."""
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    room_id = Column(String(100), nullable=False)
    sender_id = Column(String(100), nullable=False)
    content = Column(Text, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index('idx_messages_room_id', 'room_id'),
        Index('idx_messages_created_at', 'created_at'),
    )

    def __repr__(self):
        return f"<Message(id={self.id}, room_id={self.room_id}, sender_id={self.sender_id})>"


class SiteStats(Base):
    """Single-row table holding site-wide counters."""
    __tablename__ = "site_stats"

    id = Column(Integer, primary_key=True)
    total_views = Column(Integer, default=0, nullable=False)

    def __repr__(self):
        return f"<SiteStats(total_views={self.total_views})>"
