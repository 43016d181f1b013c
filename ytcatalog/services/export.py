"""Save fetched catalogs to disk."""

import json
import logging
from datetime import UTC, datetime
from pathlib import Path

from ytcatalog.models import Video

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "youtube_videos.json"


def save_videos(videos: list[Video], path: Path) -> Path:
    """Write videos as ``{fetchedAt, totalVideos, videos}`` JSON.

    Args:
        videos: Videos in delivery order
        path: Output file; parent directories are created

    Returns:
        The path written
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    data = {
        "fetchedAt": datetime.now(UTC).isoformat(),
        "totalVideos": len(videos),
        "videos": [video.to_wire() for video in videos],
    }
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("Saved %d videos to %s", len(videos), path)
    return path
