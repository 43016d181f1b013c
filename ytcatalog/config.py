"""Configuration settings."""

from pathlib import Path
from typing import Literal

from pydantic import ConfigDict
from pydantic_settings import BaseSettings

VideoOrderType = Literal["date", "rating", "relevance", "title", "videoCount", "viewCount"]


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = ConfigDict(
        env_file=[".env", "../.env"],
        extra="ignore",
    )

    # YouTube Data API
    youtube_api_key: str | None = None
    youtube_request_timeout: float = 30.0

    # Channel fetching
    page_delay_seconds: float = 0.1
    max_results_per_page: int = 50
    default_order: VideoOrderType = "date"

    # Streaming endpoint
    stream_poll_interval: float = 0.5

    # Export
    output_dir: Path = Path("output")

    @property
    def app_version(self) -> str:
        """Read app version from pyproject.toml."""
        import re

        pyproject = Path(__file__).parent.parent / "pyproject.toml"
        if not pyproject.exists():
            return "unknown"
        text = pyproject.read_text(encoding="utf-8")
        match = re.search(r'(?m)^version\s*=\s*"([^"]+)"', text)
        return match.group(1) if match else "unknown"


settings = Settings()


def get_settings() -> Settings:
    """Get application settings (for dependency injection)."""
    return settings
