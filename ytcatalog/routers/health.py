"""Health endpoint."""

from datetime import UTC, datetime

from fastapi import APIRouter

router = APIRouter(tags=["health"])


@router.get("/health")
async def health():
    """Basic health check - always returns OK if service is running."""
    return {
        "status": "OK",
        "message": "Server is running",
        "timestamp": datetime.now(UTC).isoformat(),
    }
