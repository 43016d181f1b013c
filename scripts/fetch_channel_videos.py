"""Fetch a YouTube channel's videos and save them to a JSON file.

Resolves the channel, fetches every video page with details and writes
``{fetchedAt, totalVideos, videos}`` under the configured output directory.

Usage:
    PYTHONPATH=. uv run python scripts/fetch_channel_videos.py CHANNEL
    PYTHONPATH=. uv run python scripts/fetch_channel_videos.py https://www.youtube.com/@mkbhd -o mkbhd.json
    PYTHONPATH=. uv run python scripts/fetch_channel_videos.py CHANNEL --order viewCount --after 2024-01-01T00:00:00Z
"""

import argparse
import asyncio
import re
import sys
from datetime import datetime

from pydantic import ValidationError

from ytcatalog.config import settings
from ytcatalog.models import FetchOptions, VideoOrder
from ytcatalog.services.di import build_catalog_service
from ytcatalog.services.errors import CatalogError
from ytcatalog.services.export import DEFAULT_FILENAME, save_videos


def default_filename(channel: str) -> str:
    """Derive an output filename from a handle URL, else use the default."""
    if "@" not in channel:
        return DEFAULT_FILENAME
    username = channel.split("@")[1].split("/")[0].split("?")[0]
    # Convert CamelCase to snake_case for filename
    snake_name = re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", username).lower()
    snake_name = snake_name.replace("-", "_")
    return f"{snake_name}_videos.json"


async def run(args: argparse.Namespace) -> int:
    try:
        options = FetchOptions(
            order=args.order,
            published_after=args.after,
            published_before=args.before,
            include_details=not args.no_details,
        )
    except ValidationError as e:
        print(f"Invalid options: {e}")
        return 2
    service = build_catalog_service(settings)

    print(f"Fetching videos from: {args.channel}")
    try:
        videos = await service.fetch_videos(args.channel, options)
    except CatalogError as e:
        print(f"Error: {e}")
        return 1

    print(f"Total videos fetched: {len(videos)}")
    if videos:
        latest = videos[0]
        published = datetime.fromisoformat(latest.published_at.replace("Z", "+00:00"))
        print(f'Latest video: "{latest.title}" ({published.strftime("%Y-%m-%d")})')

    output_file = settings.output_dir / (args.output or default_filename(args.channel))
    save_videos(videos, output_file)
    print(f"\nDone! JSON saved at: {output_file}")
    return 0


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Fetch a YouTube channel's videos to JSON")
    parser.add_argument(
        "channel",
        help="Channel ID, URL, @handle or name (e.g., https://www.youtube.com/@ChannelName)",
    )
    parser.add_argument(
        "-o", "--output",
        help="Output filename inside the output directory",
    )
    parser.add_argument(
        "--order",
        choices=[o.value for o in VideoOrder],
        default=settings.default_order,
        help=f"Sort order (default: {settings.default_order})",
    )
    parser.add_argument("--after", help="Only videos published after this ISO-8601 time")
    parser.add_argument("--before", help="Only videos published before this ISO-8601 time")
    parser.add_argument(
        "--no-details",
        action="store_true",
        help="Skip the per-page statistics lookup",
    )

    args = parser.parse_args()
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
