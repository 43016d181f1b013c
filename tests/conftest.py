"""Shared test fixtures."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from ytcatalog.services.catalog import CatalogService
from ytcatalog.services.channel_info import ChannelInfoService
from ytcatalog.services.channel_resolver import ChannelResolver
from ytcatalog.services.di import get_catalog_service
from ytcatalog.services.video_details import VideoDetailFetcher
from ytcatalog.services.video_fetcher import ChannelVideoFetcher
from ytcatalog.services.youtube_api import YouTubeDataClient

CHANNEL_ID = "UCBJycsmduvYEL83R_U4JriQ"


def search_item(video_id: str, published_at: str = "2024-01-15T10:00:00Z") -> dict:
    """A search.list item for one video."""
    return {
        "kind": "youtube#searchResult",
        "id": {"kind": "youtube#video", "videoId": video_id},
        "snippet": {
            "publishedAt": published_at,
            "channelId": CHANNEL_ID,
            "channelTitle": "Test Channel",
            "title": f"Video {video_id}",
            "description": f"Description of {video_id}",
            "thumbnails": {
                "default": {"url": f"https://i.ytimg.com/vi/{video_id}/default.jpg"},
                "medium": {"url": f"https://i.ytimg.com/vi/{video_id}/mqdefault.jpg"},
            },
        },
    }


def video_item(video_id: str, views: str = "1000", tags: list[str] | None = None) -> dict:
    """A videos.list item with statistics and content details."""
    snippet = {"title": f"Video {video_id}"}
    if tags is not None:
        snippet["tags"] = tags
    return {
        "id": video_id,
        "snippet": snippet,
        "contentDetails": {"duration": "PT4M13S"},
        "statistics": {"viewCount": views, "likeCount": "10", "commentCount": "2"},
    }


def build_pages(total: int, page_size: int = 50) -> list[dict]:
    """Search responses splitting ``total`` videos into pages, newest first."""
    ids = [f"vid{n:04d}" for n in range(total)]
    chunks = [ids[i : i + page_size] for i in range(0, total, page_size)] or [[]]
    pages = []
    for index, chunk in enumerate(chunks):
        page = {"items": [search_item(video_id) for video_id in chunk]}
        if index < len(chunks) - 1:
            page["nextPageToken"] = f"page-{index + 2}"
        pages.append(page)
    return pages


@pytest.fixture
def make_search_item():
    return search_item


@pytest.fixture
def make_video_item():
    return video_item


@pytest.fixture
def make_pages():
    return build_pages


@pytest.fixture
def channel_item():
    """A channels.list item with large counts."""
    return {
        "id": CHANNEL_ID,
        "snippet": {
            "title": "Test Channel",
            "description": "A channel for tests",
            "thumbnails": {"default": {"url": "https://yt3.ggpht.com/default.jpg"}},
        },
        "statistics": {
            "subscriberCount": "19400000",
            "videoCount": "73",
            "viewCount": "4812345678901",
            "hiddenSubscriberCount": False,
        },
    }


@pytest.fixture
def mock_youtube_client(channel_item):
    """Mock YouTube Data API client; detail lookups echo back every requested id."""
    client = MagicMock(spec=YouTubeDataClient)
    client.search_channels = AsyncMock(return_value=[{"id": {"channelId": CHANNEL_ID}}])
    client.list_channels = AsyncMock(return_value=[channel_item])
    client.search_videos = AsyncMock(side_effect=build_pages(73))
    client.list_videos = AsyncMock(side_effect=lambda ids: [video_item(i) for i in ids])
    return client


@pytest.fixture
def video_fetcher(mock_youtube_client):
    """Fetcher without the inter-page delay."""
    return ChannelVideoFetcher(
        mock_youtube_client,
        detail_fetcher=VideoDetailFetcher(mock_youtube_client),
        page_delay=0,
    )


@pytest.fixture
def catalog_service(mock_youtube_client, video_fetcher):
    return CatalogService(
        resolver=ChannelResolver(mock_youtube_client),
        info_service=ChannelInfoService(mock_youtube_client),
        fetcher=video_fetcher,
    )


@pytest.fixture
def app(catalog_service):
    """FastAPI app wired to the mock YouTube client."""
    from ytcatalog.main import app

    app.dependency_overrides[get_catalog_service] = lambda: catalog_service
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    return TestClient(app)
