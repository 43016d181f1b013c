"""Channel catalog sessions: resolve, describe, then list a channel's videos."""

import logging

from ytcatalog.models import FetchOptions, ProgressEvent, ProgressStage, Video
from ytcatalog.services.channel_info import ChannelInfoService
from ytcatalog.services.channel_resolver import ChannelResolver
from ytcatalog.services.delivery import CancellationToken, DeliverySink
from ytcatalog.services.video_fetcher import ChannelVideoFetcher

logger = logging.getLogger(__name__)


class CatalogService:
    """Runs one fetch session per call; holds no state between sessions."""

    def __init__(
        self,
        resolver: ChannelResolver,
        info_service: ChannelInfoService,
        fetcher: ChannelVideoFetcher,
    ):
        self.resolver = resolver
        self.info_service = info_service
        self.fetcher = fetcher

    async def fetch_videos(
        self,
        channel_input: str,
        options: FetchOptions | None = None,
    ) -> list[Video]:
        """Fetch every video of a channel.

        Raises:
            ValidationError: If the channel input is blank
            NotFoundError: If the channel cannot be resolved
            UpstreamError: On API failure
        """
        channel_id = await self.resolver.resolve(channel_input)
        info = await self.info_service.get_info(channel_id)
        videos = await self.fetcher.fetch_all(channel_id, options)
        logger.info("Fetched %d videos for %s", len(videos), info.title)
        return videos

    async def stream_videos(
        self,
        channel_input: str,
        options: FetchOptions,
        sink: DeliverySink,
        cancel: CancellationToken | None = None,
    ) -> None:
        """Stream a channel's videos to a sink.

        The sink sees lookup progress, then pages of videos with progress
        after each page, then exactly one ``on_complete`` or ``on_error``.
        Details are always fetched in stream mode.
        """
        options = options.model_copy(update={"include_details": True})
        try:
            sink.on_progress(
                ProgressEvent(
                    stage=ProgressStage.CHANNEL_LOOKUP,
                    message=f"Looking up channel: {channel_input}",
                )
            )
            channel_id = await self.resolver.resolve(channel_input)

            sink.on_progress(
                ProgressEvent(
                    stage=ProgressStage.CHANNEL_INFO,
                    message="Fetching channel information...",
                )
            )
            info = await self.info_service.get_info(channel_id)
            sink.on_progress(
                ProgressEvent(
                    stage=ProgressStage.CHANNEL_READY,
                    message=f"Channel found: {info.title}",
                    channel_info=info,
                )
            )
        except Exception as e:
            logger.error("Channel lookup failed for %s: %s", channel_input, e)
            sink.on_error(e)
            return

        sink.on_progress(
            ProgressEvent(stage=ProgressStage.VIDEOS_START, message="Starting video fetch...")
        )
        await self.fetcher.fetch_stream(channel_id, options, sink, cancel, channel_info=info)
