"""Delivery channels for fetch sessions.

A fetch session reports to a ``DeliverySink``: progress snapshots and
per-page video batches in emission order, then exactly one of
``on_complete`` or ``on_error``. Two sinks are provided:

- ``VideoCollector`` accumulates every page for the bulk endpoint.
- ``StreamEmitter`` turns each call into a tagged stream event and hands it
  to a handler immediately, for the streaming endpoint.
"""

import logging
from collections.abc import Callable
from typing import Any, Protocol

from ytcatalog.models import FetchResult, ProgressEvent, Video

logger = logging.getLogger(__name__)

StreamEvent = dict[str, Any]

TERMINAL_EVENT_TYPES = frozenset({"complete", "error"})


class CancellationToken:
    """Cooperative cancellation flag checked between pages."""

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class DeliverySink(Protocol):
    """Receiver of a fetch session's output."""

    def on_progress(self, event: ProgressEvent) -> None: ...

    def on_videos(self, videos: list[Video]) -> None: ...

    def on_complete(self, result: FetchResult) -> None: ...

    def on_error(self, error: Exception) -> None: ...


class VideoCollector:
    """Accumulates delivered pages into one ordered list."""

    def __init__(self):
        self.videos: list[Video] = []
        self.progress: list[ProgressEvent] = []
        self.result: FetchResult | None = None
        self.error: Exception | None = None

    def on_progress(self, event: ProgressEvent) -> None:
        self.progress.append(event)

    def on_videos(self, videos: list[Video]) -> None:
        self.videos.extend(videos)

    def on_complete(self, result: FetchResult) -> None:
        self.result = result

    def on_error(self, error: Exception) -> None:
        self.error = error


class StreamEmitter:
    """Pushes stream events to a handler as they occur.

    The handler is called synchronously, once per event, in emission order.
    Video events carry a 1-based running ``count``. After a terminal event or
    ``close()`` every further call is dropped; closing also cancels the
    session token so the fetch loop stops at its next checkpoint.
    """

    def __init__(
        self,
        handler: Callable[[StreamEvent], None],
        cancel: CancellationToken | None = None,
    ):
        self.handler = handler
        self.cancel = cancel or CancellationToken()
        self.count = 0
        self.closed = False
        self.finished = False

    def _emit(self, event: StreamEvent) -> None:
        if self.closed or self.finished:
            logger.debug("Dropping %s event after stream end", event["type"])
            return
        if event["type"] in TERMINAL_EVENT_TYPES:
            self.finished = True
        self.handler(event)

    def connected(self) -> None:
        self._emit({"type": "connected", "message": "Stream started"})

    def on_progress(self, event: ProgressEvent) -> None:
        # Only top-level optionals are dropped; nested channelInfo keeps its nulls
        fields = {key: value for key, value in event.to_wire().items() if value is not None}
        self._emit({"type": "progress", **fields})

    def on_videos(self, videos: list[Video]) -> None:
        for video in videos:
            if self.closed:
                return
            self.count += 1
            self._emit({"type": "video", "video": video.to_wire(), "count": self.count})

    def on_complete(self, result: FetchResult) -> None:
        event: StreamEvent = {
            "type": "complete",
            "message": "All videos fetched successfully",
            "totalVideos": self.count,
        }
        if result.channel_info is not None:
            event["channelInfo"] = result.channel_info.to_wire()
        self._emit(event)

    def on_error(self, error: Exception) -> None:
        self._emit({"type": "error", "message": str(error)})

    def close(self) -> None:
        """Stop delivery on consumer request; never raises."""
        if not self.closed:
            self.closed = True
            self.cancel.cancel()
