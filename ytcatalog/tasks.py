"""Strong references to fire-and-forget tasks so they are not garbage collected."""

import asyncio

background_tasks: set[asyncio.Task] = set()
