"""Unit tests for the video listing endpoints."""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from googleapiclient.errors import UnknownApiNameOrVersion

from ytcatalog.config import Settings
from ytcatalog.models import FetchOptions
from ytcatalog.routers.videos import _event_stream
from ytcatalog.services.delivery import CancellationToken, StreamEmitter
from ytcatalog.services.di import build_catalog_service, get_catalog_service
from ytcatalog.services.errors import UpstreamError

CHANNEL_ID = "UCBJycsmduvYEL83R_U4JriQ"


def parse_events(body: str) -> list[dict]:
    """Decode the data lines of a server-sent event body."""
    return [
        json.loads(line[len("data: ") :])
        for line in body.splitlines()
        if line.startswith("data: ")
    ]


class TestListVideos:
    """Tests for GET /api/videos."""

    def test_returns_every_video(self, client):
        response = client.get("/api/videos", params={"channel": CHANNEL_ID})

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 73
        assert data[0]["videoId"] == "vid0000"
        assert data[0]["publishedAt"] == "2024-01-15T10:00:00Z"
        assert data[0]["thumbnailUrl"].endswith("mqdefault.jpg")
        assert data[0]["durationSeconds"] == 253
        assert data[0]["viewCount"] == 1000

    def test_missing_channel(self, client, mock_youtube_client):
        response = client.get("/api/videos")

        assert response.status_code == 400
        assert response.json() == {"error": "Channel parameter is required"}
        mock_youtube_client.search_videos.assert_not_awaited()

    def test_blank_channel(self, client):
        response = client.get("/api/videos", params={"channel": "   "})

        assert response.status_code == 400

    def test_channel_not_found(self, client, mock_youtube_client):
        mock_youtube_client.search_channels = AsyncMock(return_value=[])

        response = client.get("/api/videos", params={"channel": "nobody"})

        assert response.status_code == 404
        assert response.json() == {"error": "Channel not found: nobody"}

    def test_upstream_failure(self, client, mock_youtube_client):
        mock_youtube_client.search_videos = AsyncMock(
            side_effect=UpstreamError("YouTube API search.list(video) failed: quotaExceeded")
        )

        response = client.get("/api/videos", params={"channel": CHANNEL_ID})

        assert response.status_code == 502
        assert "quotaExceeded" in response.json()["error"]

    def test_invalid_order(self, client):
        response = client.get("/api/videos", params={"channel": CHANNEL_ID, "order": "hot"})

        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid query parameters")

    def test_query_options_forwarded(self, client, mock_youtube_client):
        response = client.get(
            "/api/videos",
            params={
                "channel": CHANNEL_ID,
                "order": "viewCount",
                "maxResults": "200",
                "publishedAfter": "2024-01-01T00:00:00Z",
            },
        )

        assert response.status_code == 200
        kwargs = mock_youtube_client.search_videos.await_args_list[0].kwargs
        assert kwargs["order"] == "viewCount"
        assert kwargs["max_results"] == 50
        assert kwargs["published_after"] == "2024-01-01T00:00:00Z"

    def test_without_details(self, client, mock_youtube_client):
        response = client.get(
            "/api/videos", params={"channel": CHANNEL_ID, "includeDetails": "false"}
        )

        assert response.status_code == 200
        assert response.json()[0]["duration"] is None
        mock_youtube_client.list_videos.assert_not_awaited()


class TestStreamVideos:
    """Tests for GET /api/videos/stream."""

    def test_missing_channel(self, client):
        response = client.get("/api/videos/stream")

        assert response.status_code == 400
        assert response.json() == {"error": "Channel parameter is required"}

    def test_malformed_date(self, client):
        response = client.get(
            "/api/videos/stream",
            params={"channel": CHANNEL_ID, "publishedAfter": "yesterday"},
        )

        assert response.status_code == 400

    def test_event_stream_headers(self, client):
        response = client.get("/api/videos/stream", params={"channel": CHANNEL_ID})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["cache-control"] == "no-cache"

    def test_successful_stream(self, client):
        response = client.get("/api/videos/stream", params={"channel": CHANNEL_ID})

        events = parse_events(response.text)
        types = [e["type"] for e in events]
        assert types[0] == "connected"
        assert types[-1] == "complete"
        assert types.count("video") == 73
        assert [e["count"] for e in events if e["type"] == "video"] == list(range(1, 74))
        assert events[-1]["totalVideos"] == 73
        assert events[-1]["channelInfo"]["title"] == "Test Channel"

    def test_progress_stages_in_order(self, client):
        response = client.get("/api/videos/stream", params={"channel": CHANNEL_ID})

        stages = [e["stage"] for e in parse_events(response.text) if e["type"] == "progress"]
        assert stages[:4] == ["channel_lookup", "channel_info", "channel_ready", "videos_start"]
        assert stages[4:] == ["videos_progress", "videos_progress"]

    def test_lookup_failure_streams_error(self, client, mock_youtube_client):
        mock_youtube_client.search_channels = AsyncMock(return_value=[])

        response = client.get("/api/videos/stream", params={"channel": "nobody"})

        assert response.status_code == 200
        events = parse_events(response.text)
        assert [e["type"] for e in events] == ["connected", "progress", "error"]
        assert events[-1]["message"] == "Channel not found: nobody"

    def test_mid_stream_failure(self, client, mock_youtube_client, make_pages):
        mock_youtube_client.search_videos = AsyncMock(
            side_effect=[make_pages(73)[0], UpstreamError("quotaExceeded")]
        )

        response = client.get("/api/videos/stream", params={"channel": CHANNEL_ID})

        events = parse_events(response.text)
        types = [e["type"] for e in events]
        assert types.count("video") == 50
        assert types[-1] == "error"
        assert "complete" not in types


class TestQueryParameterErrors:
    """Malformed query values are client errors with an ``{error}`` body."""

    @pytest.mark.parametrize("path", ["/api/videos", "/api/videos/stream"])
    @pytest.mark.parametrize(
        "params", [{"maxResults": "abc"}, {"includeDetails": "maybe"}, {"order": "hot"}]
    )
    def test_malformed_value(self, client, mock_youtube_client, path, params):
        response = client.get(path, params={"channel": CHANNEL_ID, **params})

        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid query parameters")
        mock_youtube_client.search_videos.assert_not_awaited()

    def test_zero_page_size_is_clamped(self, client, mock_youtube_client):
        response = client.get("/api/videos", params={"channel": CHANNEL_ID, "maxResults": "0"})

        assert response.status_code == 200
        assert mock_youtube_client.search_videos.await_args_list[0].kwargs["max_results"] == 1

    def test_zero_page_size_streams(self, client, mock_youtube_client):
        response = client.get(
            "/api/videos/stream", params={"channel": CHANNEL_ID, "maxResults": "0"}
        )

        assert response.status_code == 200
        assert parse_events(response.text)[-1]["type"] == "complete"
        assert mock_youtube_client.search_videos.await_args_list[0].kwargs["max_results"] == 1


class TestClientConstructionFailure:
    """Errors building the upstream client reach callers as JSON errors."""

    def test_bulk_returns_502_json(self, app, client):
        service = build_catalog_service(Settings(_env_file=None, youtube_api_key="test-key"))
        app.dependency_overrides[get_catalog_service] = lambda: service

        with patch(
            "googleapiclient.discovery.build",
            side_effect=UnknownApiNameOrVersion("name: youtube  version: v3"),
        ):
            response = client.get("/api/videos", params={"channel": "mkbhd"})

        assert response.status_code == 502
        assert "youtube" in response.json()["error"]


class TestEventStream:
    """Tests for the _event_stream generator."""

    @pytest.mark.asyncio
    async def test_disconnect_cancels_session(
        self, catalog_service, mock_youtube_client, make_pages
    ):
        pages = iter(make_pages(73))
        page_in_flight = asyncio.Event()
        release_page = asyncio.Event()

        async def search(*args, **kwargs):
            page_in_flight.set()
            await release_page.wait()
            return next(pages)

        mock_youtube_client.search_videos = AsyncMock(side_effect=search)
        request = MagicMock()
        request.is_disconnected = AsyncMock(side_effect=lambda: page_in_flight.is_set())

        queue = asyncio.Queue()
        cancel = CancellationToken()
        emitter = StreamEmitter(queue.put_nowait, cancel)
        emitter.connected()
        session = asyncio.create_task(
            catalog_service.stream_videos(CHANNEL_ID, FetchOptions(), emitter, cancel)
        )

        chunks = [chunk async for chunk in _event_stream(request, queue, emitter, session, 0.01)]
        release_page.set()
        await session

        types = [event["type"] for event in parse_events("".join(chunks))]
        assert types[0] == "connected"
        assert "video" not in types
        assert "complete" not in types
        assert cancel.cancelled is True
        assert mock_youtube_client.search_videos.await_count == 1
        assert queue.empty()

    @pytest.mark.asyncio
    async def test_stops_when_session_ends_without_terminal_event(self):
        request = MagicMock()
        request.is_disconnected = AsyncMock(return_value=False)
        queue = asyncio.Queue()
        cancel = CancellationToken()
        emitter = StreamEmitter(queue.put_nowait, cancel)
        session = asyncio.create_task(asyncio.sleep(0))
        await session

        chunks = [chunk async for chunk in _event_stream(request, queue, emitter, session, 0.01)]

        assert chunks == []
        assert cancel.cancelled is True

    @pytest.mark.asyncio
    async def test_ends_after_terminal_event(self):
        request = MagicMock()
        request.is_disconnected = AsyncMock(return_value=False)
        queue = asyncio.Queue()
        emitter = StreamEmitter(queue.put_nowait)
        session = asyncio.create_task(asyncio.sleep(0))
        emitter.connected()
        emitter.on_error(RuntimeError("quota"))

        chunks = [chunk async for chunk in _event_stream(request, queue, emitter, session, 1.0)]
        await session

        assert [e["type"] for e in parse_events("".join(chunks))] == ["connected", "error"]
        request.is_disconnected.assert_not_awaited()
