"""Channel metadata lookup."""

import logging
from typing import Any

from ytcatalog.models import ChannelInfo
from ytcatalog.services.errors import NotFoundError
from ytcatalog.services.youtube_api import YouTubeDataClient

logger = logging.getLogger(__name__)


def parse_count(value: Any) -> int | None:
    """Parse an upstream count (string or int) without truncation."""
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def pick_thumbnail(thumbnails: dict | None, preferred: tuple[str, ...]) -> str:
    """Return the first available thumbnail URL among preferred sizes."""
    thumbnails = thumbnails or {}
    for size in preferred:
        url = (thumbnails.get(size) or {}).get("url")
        if url:
            return url
    return ""


def parse_channel(item: dict[str, Any]) -> ChannelInfo:
    """Build ChannelInfo from a channels.list item."""
    snippet = item.get("snippet", {})
    statistics = item.get("statistics", {})
    hidden = statistics.get("hiddenSubscriberCount", False)

    return ChannelInfo(
        id=item["id"],
        title=snippet.get("title", ""),
        description=snippet.get("description", ""),
        thumbnail_url=pick_thumbnail(snippet.get("thumbnails"), ("default", "medium", "high")),
        subscriber_count=None if hidden else parse_count(statistics.get("subscriberCount")),
        video_count=parse_count(statistics.get("videoCount")),
        view_count=parse_count(statistics.get("viewCount")),
    )


class ChannelInfoService:
    """Fetches channel metadata for a resolved channel ID."""

    def __init__(self, client: YouTubeDataClient):
        self.client = client

    async def get_info(self, channel_id: str) -> ChannelInfo:
        """Fetch channel metadata.

        Raises:
            NotFoundError: If the ID has no channel metadata
            UpstreamError: On API failure
        """
        items = await self.client.list_channels(channel_id)
        if not items:
            raise NotFoundError(f"Channel not found: {channel_id}")

        info = parse_channel(items[0])
        logger.info(
            "Channel %s: %s (%s subscribers, %s videos)",
            info.id,
            info.title,
            info.subscriber_count,
            info.video_count,
        )
        return info
