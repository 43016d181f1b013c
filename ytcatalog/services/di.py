"""Dependency providers for services."""

from fastapi import Depends

from ytcatalog.config import Settings, get_settings
from ytcatalog.services.catalog import CatalogService
from ytcatalog.services.channel_info import ChannelInfoService
from ytcatalog.services.channel_resolver import ChannelResolver
from ytcatalog.services.video_details import VideoDetailFetcher
from ytcatalog.services.video_fetcher import ChannelVideoFetcher
from ytcatalog.services.youtube_api import YouTubeDataClient


def build_catalog_service(settings: Settings) -> CatalogService:
    """Wire a catalog service around one YouTube client.

    The API key and timeouts are read here and passed down explicitly.
    """
    client = YouTubeDataClient(
        api_key=settings.youtube_api_key,
        timeout=settings.youtube_request_timeout,
    )
    return CatalogService(
        resolver=ChannelResolver(client),
        info_service=ChannelInfoService(client),
        fetcher=ChannelVideoFetcher(
            client,
            detail_fetcher=VideoDetailFetcher(client),
            page_delay=settings.page_delay_seconds,
        ),
    )


def get_catalog_service(settings: Settings = Depends(get_settings)) -> CatalogService:
    """Get a catalog service for one request."""
    return build_catalog_service(settings)
