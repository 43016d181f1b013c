"""Channel identifier resolution.

Accepts any of:
- Channel ID (``UCBJycsmduvYEL83R_U4JriQ``)
- Channel URL (``https://www.youtube.com/channel/UC...``)
- Handle or custom URL (``https://www.youtube.com/@mkbhd``, ``youtube.com/c/name``)
- Plain handle or channel name (``@mkbhd``, ``Marques Brownlee``)
"""

import logging
import re
from urllib.parse import unquote

from ytcatalog.services.errors import NotFoundError, ValidationError
from ytcatalog.services.youtube_api import YouTubeDataClient

logger = logging.getLogger(__name__)

CHANNEL_ID_PREFIX = "UC"
CHANNEL_ID_LENGTH = 24

_CHANNEL_PATH = re.compile(r"youtube\.com/channel/([^/?#&\s]+)")
_NAMED_PATH = re.compile(r"youtube\.com/(?:c/|user/|@)([^/?#&\s]+)")


def is_channel_id(value: str) -> bool:
    """Check whether a value has the canonical channel ID shape."""
    return value.startswith(CHANNEL_ID_PREFIX) and len(value) == CHANNEL_ID_LENGTH


def canonical_channel_id(channel_input: str) -> str | None:
    """Return the channel ID carried by a bare ID or a ``/channel/`` URL.

    Handle and custom URLs never count, even when their path looks like an ID.
    """
    value = channel_input.strip()
    if is_channel_id(value):
        return value

    match = _CHANNEL_PATH.search(value)
    if match and is_channel_id(unquote(match.group(1))):
        return unquote(match.group(1))
    return None


def extract_search_term(channel_input: str) -> str:
    """Reduce a channel input to a canonical ID or a search term.

    Returns the input unchanged when nothing more specific can be extracted.
    """
    value = channel_input.strip()
    if is_channel_id(value):
        return value

    match = _CHANNEL_PATH.search(value)
    if match:
        return unquote(match.group(1))

    match = _NAMED_PATH.search(value)
    if match:
        return unquote(match.group(1))

    return value


class ChannelResolver:
    """Resolves heterogeneous channel inputs to a canonical channel ID."""

    def __init__(self, client: YouTubeDataClient):
        self.client = client

    async def resolve(self, channel_input: str) -> str:
        """Resolve a channel input.

        Canonical IDs, bare or inside a ``/channel/`` URL, are returned
        without an upstream call. Anything else costs exactly one channel
        search.

        Raises:
            ValidationError: If the input is blank
            NotFoundError: If the search returns no channel
            UpstreamError: On API failure
        """
        if not channel_input or not channel_input.strip():
            raise ValidationError("Channel parameter is required")

        channel_id = canonical_channel_id(channel_input)
        if channel_id:
            return channel_id

        term = extract_search_term(channel_input)
        logger.info("Searching for channel: %s", term)
        items = await self.client.search_channels(term, limit=1)
        for item in items:
            channel_id = item.get("id", {}).get("channelId") or item.get("snippet", {}).get(
                "channelId"
            )
            if channel_id:
                logger.info(f"Resolved '{channel_input}' to channel ID: {channel_id}")
                return channel_id

        raise NotFoundError(f"Channel not found: {channel_input}")
