"""Paginated channel video fetching."""

import asyncio
import logging
from typing import Any

from ytcatalog.models import (
    ChannelInfo,
    FetchOptions,
    FetchResult,
    ProgressEvent,
    ProgressStage,
    Video,
    VideoSummary,
)
from ytcatalog.services.channel_info import pick_thumbnail
from ytcatalog.services.delivery import CancellationToken, DeliverySink, VideoCollector
from ytcatalog.services.errors import UpstreamError
from ytcatalog.services.video_details import VideoDetailFetcher, merge_video
from ytcatalog.services.youtube_api import YouTubeDataClient

logger = logging.getLogger(__name__)

DEFAULT_PAGE_DELAY = 0.1


def parse_summary(item: dict[str, Any]) -> VideoSummary:
    """Build VideoSummary from a search.list item.

    Raises:
        UpstreamError: If the item has no video ID or publish date
    """
    video_id = (item.get("id") or {}).get("videoId")
    snippet = item.get("snippet") or {}
    published_at = snippet.get("publishedAt")
    if not video_id or not published_at:
        raise UpstreamError(f"Malformed search result: {item.get('id')}")

    return VideoSummary(
        video_id=video_id,
        title=snippet.get("title", ""),
        description=snippet.get("description", ""),
        published_at=published_at,
        thumbnail_url=pick_thumbnail(snippet.get("thumbnails"), ("medium", "default", "high")),
        channel_id=snippet.get("channelId"),
        channel_title=snippet.get("channelTitle"),
    )


class ChannelVideoFetcher:
    """Walks a channel's search listing page by page, merging in video details."""

    def __init__(
        self,
        client: YouTubeDataClient,
        detail_fetcher: VideoDetailFetcher | None = None,
        page_delay: float = DEFAULT_PAGE_DELAY,
    ):
        self.client = client
        self.detail_fetcher = detail_fetcher or VideoDetailFetcher(client)
        self.page_delay = page_delay

    async def _fetch_page(
        self,
        channel_id: str,
        options: FetchOptions,
        page_token: str | None,
    ) -> tuple[list[Video], str | None]:
        response = await self.client.search_videos(
            channel_id,
            order=options.order.value,
            max_results=options.max_results_per_page,
            page_token=page_token,
            published_after=options.published_after,
            published_before=options.published_before,
        )
        summaries = [parse_summary(item) for item in response.get("items") or []]

        details = {}
        if options.include_details and summaries:
            details = await self.detail_fetcher.get_details([s.video_id for s in summaries])

        videos = [merge_video(s, details.get(s.video_id)) for s in summaries]
        return videos, response.get("nextPageToken") or None

    async def fetch_pages(
        self,
        channel_id: str,
        options: FetchOptions,
        sink: DeliverySink,
        cancel: CancellationToken | None = None,
    ) -> FetchResult:
        """Deliver every page of a channel's videos to a sink.

        Pages are fetched strictly in sequence. After each page the sink
        gets the merged videos and then a progress snapshot of the work done
        so far. The loop ends when a page carries no continuation token or
        when ``cancel`` is set, checked before each page request.

        Raises:
            UpstreamError: On any search or detail failure; the fetch is aborted
        """
        logger.info(f"Fetching videos from channel: {channel_id}")
        total = 0
        page = 0
        page_token = None

        while True:
            if cancel is not None and cancel.cancelled:
                logger.info("Fetch for %s cancelled after %d pages", channel_id, page)
                return FetchResult(total_videos=total, cancelled=True)

            page += 1
            videos, page_token = await self._fetch_page(channel_id, options, page_token)
            total += len(videos)
            if videos:
                sink.on_videos(videos)
            logger.info(f"Found {len(videos)} videos on page {page}. Total so far: {total}")

            sink.on_progress(
                ProgressEvent(
                    stage=ProgressStage.VIDEOS_PROGRESS,
                    message=f"Fetched page {page} ({total} videos so far)",
                    page=page,
                    total_fetched=total,
                    has_more=page_token is not None,
                )
            )

            if page_token is None:
                break
            await asyncio.sleep(self.page_delay)

        logger.info("Fetched %d videos from %s in %d pages", total, channel_id, page)
        return FetchResult(total_videos=total)

    async def fetch_all(self, channel_id: str, options: FetchOptions | None = None) -> list[Video]:
        """Fetch a channel's full video list, ordered as upstream returns it.

        Raises:
            UpstreamError: On any failure; no partial result is returned
        """
        collector = VideoCollector()
        await self.fetch_pages(channel_id, options or FetchOptions(), collector)
        return collector.videos

    async def fetch_stream(
        self,
        channel_id: str,
        options: FetchOptions,
        sink: DeliverySink,
        cancel: CancellationToken | None = None,
        channel_info: ChannelInfo | None = None,
    ) -> None:
        """Stream a channel's videos to a sink, ending with one terminal call.

        Failures are reported through ``sink.on_error`` instead of raised.
        """
        try:
            result = await self.fetch_pages(channel_id, options, sink, cancel)
        except Exception as e:
            logger.error("Error streaming channel videos: %s", e)
            sink.on_error(e)
            return
        sink.on_complete(result.model_copy(update={"channel_info": channel_info}))
