"""Post data model."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, HttpUrl


class MediaType(str, Enum):
    """Kind of media attached to a post."""
    IMAGE = "image"
    VIDEO = "video"
    CAROUSEL = "carousel"


class PostRecord(BaseModel):
    """Represents one extracted Instagram post."""

    shortcode: str
    post_url: HttpUrl
    position: int
    owner_username: str
    caption: str = ""
    created_at: datetime | None = None
    media_type: MediaType = MediaType.IMAGE
    media_urls: list[HttpUrl] = []

    # Engagement metrics
    like_count: int | None = None
    comment_count: int | None = None
