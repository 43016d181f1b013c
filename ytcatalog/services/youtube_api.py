"""Thin async wrapper over the YouTube Data API v3 client."""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

import httplib2
from googleapiclient.errors import Error as GoogleApiError
from googleapiclient.errors import HttpError

from ytcatalog.services.errors import UpstreamError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class YouTubeDataClient:
    """One instance per fetch session; each method is a single upstream call."""

    def __init__(self, api_key: str | None, timeout: float = DEFAULT_TIMEOUT):
        self.api_key = api_key
        self.timeout = timeout
        self._youtube = None

    def _get_client(self):
        """Lazy-load the YouTube API client."""
        if self._youtube is None:
            if not self.api_key:
                raise UpstreamError("YouTube API key not configured")
            from googleapiclient.discovery import build

            self._youtube = build(
                "youtube",
                "v3",
                developerKey=self.api_key,
                http=httplib2.Http(timeout=self.timeout),
            )
        return self._youtube

    async def _execute(self, make_request: Callable[[Any], Any], operation: str) -> dict[str, Any]:
        """Build a request against the client and run it off the event loop.

        Client construction and execution share one error translation, so any
        failure surfaces as ``UpstreamError``.
        """
        try:
            request = make_request(self._get_client())
            return await asyncio.to_thread(request.execute)
        except HttpError as e:
            reason = e.reason or str(e)
            logger.error("YouTube API %s failed (HTTP %s): %s", operation, e.resp.status, reason)
            raise UpstreamError(f"YouTube API {operation} failed: {reason}") from e
        except (GoogleApiError, httplib2.HttpLib2Error, OSError) as e:
            logger.error("YouTube API %s error: %s", operation, e)
            raise UpstreamError(f"YouTube API {operation} failed: {e}") from e

    async def search_channels(self, query: str, limit: int = 1) -> list[dict[str, Any]]:
        """Search channels by free text."""
        response = await self._execute(
            lambda youtube: youtube.search().list(
                part="snippet",
                q=query,
                type="channel",
                maxResults=limit,
            ),
            "search.list(channel)",
        )
        return response.get("items") or []

    async def list_channels(self, channel_id: str) -> list[dict[str, Any]]:
        """List channel snippet and statistics by id."""
        response = await self._execute(
            lambda youtube: youtube.channels().list(part="snippet,statistics", id=channel_id),
            "channels.list",
        )
        return response.get("items") or []

    async def search_videos(
        self,
        channel_id: str,
        order: str,
        max_results: int,
        page_token: str | None = None,
        published_after: str | None = None,
        published_before: str | None = None,
    ) -> dict[str, Any]:
        """Fetch one page of a channel's videos.

        Returns:
            The raw response; ``nextPageToken`` is absent on the last page.
        """
        params: dict[str, Any] = {
            "part": "snippet",
            "channelId": channel_id,
            "type": "video",
            "order": order,
            "maxResults": max_results,
        }
        if page_token:
            params["pageToken"] = page_token
        if published_after:
            params["publishedAfter"] = published_after
        if published_before:
            params["publishedBefore"] = published_before

        return await self._execute(
            lambda youtube: youtube.search().list(**params), "search.list(video)"
        )

    async def list_videos(self, video_ids: list[str]) -> list[dict[str, Any]]:
        """List snippet, statistics and content details for a batch of ids."""
        response = await self._execute(
            lambda youtube: youtube.videos().list(
                part="snippet,statistics,contentDetails",
                id=",".join(video_ids),
            ),
            "videos.list",
        )
        return response.get("items") or []
