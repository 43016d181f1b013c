"""YouTube channel catalog API and browser UI."""

import asyncio
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from ytcatalog.config import get_settings
from ytcatalog.routers import health, videos
from ytcatalog.tasks import background_tasks

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

_log_handler = logging.StreamHandler()
_log_handler.setFormatter(
    logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
    )
)
logging.getLogger("ytcatalog").setLevel(LOG_LEVEL)
logging.getLogger("ytcatalog").addHandler(_log_handler)

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log configuration on startup and drain stream sessions on shutdown."""
    settings = get_settings()
    if not settings.youtube_api_key:
        logger.warning("YOUTUBE_API_KEY is not set - video endpoints will fail")
    logger.info("ytcatalog %s serving UI from %s", settings.app_version, STATIC_DIR)
    try:
        yield
    finally:
        if background_tasks:
            logger.info("Waiting for %d stream session(s)...", len(background_tasks))
            _done, pending = await asyncio.wait(background_tasks, timeout=10.0)
            for t in pending:
                t.cancel()


app = FastAPI(
    title="ytcatalog",
    description="Browse a YouTube channel's full video catalog",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health.router)
app.include_router(videos.router)

# Mounted last so API routes take precedence
app.mount("/", StaticFiles(directory=STATIC_DIR, html=True), name="static")
