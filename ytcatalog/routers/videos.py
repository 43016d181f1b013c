"""Channel video listing endpoints: bulk JSON and a server-sent event stream."""

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import ValidationError as PydanticValidationError

from ytcatalog.config import Settings, get_settings
from ytcatalog.models import FetchOptions
from ytcatalog.services.catalog import CatalogService
from ytcatalog.services.delivery import (
    TERMINAL_EVENT_TYPES,
    CancellationToken,
    StreamEmitter,
    StreamEvent,
)
from ytcatalog.services.di import get_catalog_service
from ytcatalog.services.errors import (
    CatalogError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from ytcatalog.tasks import background_tasks

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/videos", tags=["videos"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

ChannelParam = Annotated[str | None, Query(description="Channel ID, URL, handle or name")]
OrderParam = Annotated[
    str | None, Query(description="date, rating, relevance, title, videoCount or viewCount")
]
PublishedAfterParam = Annotated[str | None, Query(alias="publishedAfter")]
PublishedBeforeParam = Annotated[str | None, Query(alias="publishedBefore")]
MaxResultsParam = Annotated[str | None, Query(alias="maxResults")]
IncludeDetailsParam = Annotated[str | None, Query(alias="includeDetails")]


def error_status(error: CatalogError) -> int:
    """Map a catalog error to an HTTP status code."""
    if isinstance(error, ValidationError):
        return 400
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, UpstreamError):
        return 502
    return 500


def error_response(error: CatalogError) -> JSONResponse:
    return JSONResponse(status_code=error_status(error), content={"error": error.message})


def build_options(
    settings: Settings,
    order: str | None = None,
    published_after: str | None = None,
    published_before: str | None = None,
    max_results: str | None = None,
    include_details: str | None = None,
) -> FetchOptions:
    """Build fetch options from query parameters and configured defaults.

    Raises:
        ValidationError: If a parameter is malformed
    """
    try:
        return FetchOptions(
            order=order or settings.default_order,
            published_after=published_after,
            published_before=published_before,
            max_results_per_page=max_results or settings.max_results_per_page,
            include_details=True if include_details is None else include_details,
        )
    except PydanticValidationError as e:
        problems = "; ".join(err["msg"] for err in e.errors())
        raise ValidationError(f"Invalid query parameters: {problems}") from e


def encode_event(event: StreamEvent) -> str:
    """Frame one event as a server-sent event."""
    return f"data: {json.dumps(event)}\n\n"


async def _event_stream(
    request: Request,
    queue: asyncio.Queue,
    emitter: StreamEmitter,
    session: asyncio.Task,
    poll_interval: float,
) -> AsyncIterator[str]:
    """Drain session events into the response until a terminal event or disconnect."""
    try:
        while True:
            try:
                event = await asyncio.wait_for(queue.get(), timeout=poll_interval)
            except TimeoutError:
                if await request.is_disconnected():
                    logger.info("Client disconnected from stream")
                    break
                if session.done() and queue.empty():
                    logger.warning("Stream session ended without a terminal event")
                    break
                continue

            yield encode_event(event)
            if event["type"] in TERMINAL_EVENT_TYPES:
                break
    finally:
        emitter.close()


@router.get("")
async def list_videos(
    channel: ChannelParam = None,
    order: OrderParam = None,
    published_after: PublishedAfterParam = None,
    published_before: PublishedBeforeParam = None,
    max_results: MaxResultsParam = None,
    include_details: IncludeDetailsParam = None,
    service: CatalogService = Depends(get_catalog_service),
    settings: Settings = Depends(get_settings),
):
    """Fetch a channel's full video list as one JSON array."""
    try:
        if not channel or not channel.strip():
            raise ValidationError("Channel parameter is required")
        options = build_options(
            settings, order, published_after, published_before, max_results, include_details
        )
        videos = await service.fetch_videos(channel, options)
    except CatalogError as e:
        logger.warning("Video listing failed for %r: %s", channel, e)
        return error_response(e)

    return [video.to_wire() for video in videos]


@router.get("/stream")
async def stream_videos(
    request: Request,
    channel: ChannelParam = None,
    order: OrderParam = None,
    published_after: PublishedAfterParam = None,
    published_before: PublishedBeforeParam = None,
    max_results: MaxResultsParam = None,
    include_details: IncludeDetailsParam = None,
    service: CatalogService = Depends(get_catalog_service),
    settings: Settings = Depends(get_settings),
):
    """Stream a channel's videos as server-sent events.

    Event types: ``connected`` once, then ``progress`` and ``video`` events,
    then exactly one ``complete`` or ``error``. Details are always fetched;
    ``includeDetails`` is only checked for well-formedness.
    """
    if not channel or not channel.strip():
        return JSONResponse(status_code=400, content={"error": "Channel parameter is required"})
    try:
        options = build_options(
            settings, order, published_after, published_before, max_results, include_details
        )
    except ValidationError as e:
        return error_response(e)

    queue: asyncio.Queue = asyncio.Queue()
    cancel = CancellationToken()
    emitter = StreamEmitter(queue.put_nowait, cancel)
    emitter.connected()

    session = asyncio.create_task(service.stream_videos(channel, options, emitter, cancel))
    background_tasks.add(session)
    session.add_done_callback(background_tasks.discard)

    return StreamingResponse(
        _event_stream(request, queue, emitter, session, settings.stream_poll_interval),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
