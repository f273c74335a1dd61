"""
Pydantic models for websocket frames and admin responses.
"""
from typing import List, Literal, Optional
from pydantic import BaseModel, Field, field_validator

from config.settings import settings
from core.models import Gender, Profile, normalize_interests


class FindPartnerRequest(BaseModel):
    """Client request to be paired with a stranger."""
    type: Literal["find_partner"] = "find_partner"
    gender: Optional[Gender] = None
    preference: Optional[Gender] = None
    interests: List[str] = Field(default_factory=list)

    @field_validator("interests", mode="before")
    @classmethod
    def clean_interests(cls, v):
        """Normalize tags and cap how many are accepted."""
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(",")
        if not isinstance(v, list):
            raise ValueError("Interests must be a list of strings")
        if not all(isinstance(tag, str) for tag in v):
            raise ValueError("Every interest must be a string")
        return list(normalize_interests(v))[:settings.MAX_INTERESTS]

    def to_profile(self) -> Profile:
        return Profile.build(self.gender, self.preference, self.interests)


class SendMessageRequest(BaseModel):
    """Client chat message for the room it believes it is in."""
    type: Literal["send_message"] = "send_message"
    roomId: Optional[str] = None
    content: str

    @field_validator("content")
    @classmethod
    def check_content(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Message is empty")
        if len(v) > settings.MAX_MESSAGE_LENGTH:
            raise ValueError(f"Message is longer than {settings.MAX_MESSAGE_LENGTH} characters")
        return v


class LeaveChatRequest(BaseModel):
    type: Literal["leave_chat"] = "leave_chat"


class TagCountModel(BaseModel):
    tag: str
    count: int


class AdminStatsResponse(BaseModel):
    """Response model for the admin statistics."""
    onlineUsers: int
    totalMessages: int
    totalViews: int
    activeTags: List[TagCountModel]
    uptime: Optional[float] = None
