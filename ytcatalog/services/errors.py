"""Error taxonomy for channel catalog fetching."""


class CatalogError(Exception):
    """Base class for catalog fetch failures."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(CatalogError):
    """A channel could not be resolved or has no metadata upstream."""


class ValidationError(CatalogError):
    """Required input is missing or malformed."""


class UpstreamError(CatalogError):
    """Transport, auth, quota or malformed-response failure from the YouTube API."""
