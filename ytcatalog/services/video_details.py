"""Video detail batches and the summary/detail merge."""

import logging
import re
from typing import Any

from ytcatalog.models import Video, VideoDetail, VideoSummary
from ytcatalog.services.channel_info import parse_count
from ytcatalog.services.youtube_api import YouTubeDataClient

logger = logging.getLogger(__name__)


def parse_duration_to_seconds(duration: str | None) -> int | None:
    """Parse ISO 8601 duration to seconds."""
    if not duration:
        return None
    match = re.fullmatch(r"P(?:(\d+)D)?T?(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?", duration)
    if not match:
        return None

    days, hours, minutes, seconds = (int(part) if part else 0 for part in match.groups())
    return days * 86400 + hours * 3600 + minutes * 60 + seconds


def parse_detail(item: dict[str, Any]) -> VideoDetail:
    """Build VideoDetail from a videos.list item."""
    snippet = item.get("snippet", {})
    statistics = item.get("statistics", {})
    duration = item.get("contentDetails", {}).get("duration")

    return VideoDetail(
        video_id=item["id"],
        duration=duration,
        duration_seconds=parse_duration_to_seconds(duration),
        view_count=parse_count(statistics.get("viewCount")),
        like_count=parse_count(statistics.get("likeCount")),
        comment_count=parse_count(statistics.get("commentCount")),
        tags=snippet.get("tags") or [],
    )


def merge_video(summary: VideoSummary, detail: VideoDetail | None) -> Video:
    """Merge a search item with its details.

    Summary fields always win; detail fields stay empty when the detail
    batch did not return the video.
    """
    fields = summary.model_dump()
    if detail is not None:
        fields.update(detail.model_dump(exclude={"video_id"}))
    return Video(**fields)


class VideoDetailFetcher:
    """Fetches statistics and content details for a page of videos."""

    def __init__(self, client: YouTubeDataClient):
        self.client = client

    async def get_details(self, video_ids: list[str]) -> dict[str, VideoDetail]:
        """Fetch details for up to one page of video IDs in a single call.

        Returns:
            Mapping of video ID to detail; IDs upstream did not return are absent

        Raises:
            UpstreamError: On API failure
        """
        if not video_ids:
            return {}

        items = await self.client.list_videos(video_ids)
        details = {}
        for item in items:
            if not item.get("id"):
                continue
            detail = parse_detail(item)
            details[detail.video_id] = detail

        missing = len(set(video_ids) - details.keys())
        if missing:
            logger.warning("Details missing for %d of %d videos", missing, len(video_ids))
        return details
