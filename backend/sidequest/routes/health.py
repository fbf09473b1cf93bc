"""
Side Quest Backend — Health Check Route
=========================================

What:  Liveness probe for Docker health checks and load balancers.
How:   Answers without touching any dependency; a slow record store or object
       store must not make the process look dead.
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from sidequest.schemas.card import HealthResponse

router = APIRouter(tags=["Health"])


def utc_timestamp() -> str:
    """Current UTC time as ISO 8601 with milliseconds and a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service liveness check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", timestamp=utc_timestamp())
