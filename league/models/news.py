"""News feed posts and media stories."""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from league.models.base import Record


class NewsPost(Record):
    id: str
    image: str = ""
    caption: str = Field(min_length=1)
    created_at: datetime
    likes: int = Field(default=0, ge=0)


class StoryType(str, Enum):
    IMAGE = "image"
    VIDEO = "video"


class MediaStory(Record):
    """Short-lived media item shown in the feed strip until it expires."""

    id: str
    type: StoryType
    media_url: str = Field(min_length=1)
    thumbnail: Optional[str] = None
    duration: Optional[float] = Field(default=None, ge=0)
    caption: Optional[str] = None
    uploader: str = "admin"
    created_at: datetime
    expires_at: datetime
    match_id: Optional[str] = None

    def is_active(self, now: datetime) -> bool:
        return self.expires_at > now
