"""Data models for channel catalogs."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Hard per-call cap of the YouTube Data API search and videos endpoints
MAX_RESULTS_PER_PAGE = 50


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_wire(self) -> dict[str, Any]:
        """Dump to a JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


class VideoOrder(str, Enum):
    """Sort orders accepted by the search endpoint."""

    DATE = "date"
    RATING = "rating"
    RELEVANCE = "relevance"
    TITLE = "title"
    VIDEO_COUNT = "videoCount"
    VIEW_COUNT = "viewCount"


class ProgressStage(str, Enum):
    """Stages reported while a fetch session runs."""

    CHANNEL_LOOKUP = "channel_lookup"
    CHANNEL_INFO = "channel_info"
    CHANNEL_READY = "channel_ready"
    VIDEOS_START = "videos_start"
    VIDEOS_PROGRESS = "videos_progress"


class ChannelInfo(CamelModel):
    """Channel metadata, fetched once per session."""

    id: str
    title: str
    description: str = ""
    thumbnail_url: str = ""
    subscriber_count: int | None = None
    video_count: int | None = None
    view_count: int | None = None


class VideoSummary(CamelModel):
    """One item of a paginated channel search."""

    video_id: str
    title: str = ""
    description: str = ""
    published_at: str
    thumbnail_url: str = ""
    channel_id: str | None = None
    channel_title: str | None = None


class VideoDetail(CamelModel):
    """Statistics and content details for one video."""

    video_id: str
    duration: str | None = None
    duration_seconds: int | None = None
    view_count: int | None = None
    like_count: int | None = None
    comment_count: int | None = None
    tags: list[str] = Field(default_factory=list)


class Video(CamelModel):
    """A search item merged with its details; the unit delivered to consumers."""

    video_id: str
    title: str = ""
    description: str = ""
    published_at: str
    thumbnail_url: str = ""
    channel_id: str | None = None
    channel_title: str | None = None
    duration: str | None = None
    duration_seconds: int | None = None
    view_count: int | None = None
    like_count: int | None = None
    comment_count: int | None = None
    tags: list[str] = Field(default_factory=list)


class FetchOptions(CamelModel):
    """Options for walking a channel's video listing."""

    max_results_per_page: int = MAX_RESULTS_PER_PAGE
    order: VideoOrder = VideoOrder.DATE
    published_after: str | None = None
    published_before: str | None = None
    include_details: bool = True

    @field_validator("max_results_per_page")
    @classmethod
    def clamp_page_size(cls, value: int) -> int:
        return max(1, min(value, MAX_RESULTS_PER_PAGE))

    @field_validator("published_after", "published_before")
    @classmethod
    def check_timestamp(cls, value: str | None) -> str | None:
        if value is None:
            return None
        try:
            datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as e:
            raise ValueError(f"Not an ISO-8601 timestamp: {value}") from e
        return value


class ProgressEvent(CamelModel):
    """Status snapshot reported during a fetch session."""

    stage: ProgressStage
    message: str
    page: int | None = None
    total_fetched: int | None = None
    has_more: bool | None = None
    channel_info: ChannelInfo | None = None


class FetchResult(CamelModel):
    """Outcome of a completed fetch session."""

    total_videos: int
    channel_info: ChannelInfo | None = None
    cancelled: bool = False
