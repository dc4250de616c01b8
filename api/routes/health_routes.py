"""Health check endpoints."""

from fastapi import APIRouter

from schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Liveness probe. No dependencies are checked."""
    return HealthResponse(
        status="ok", message="Certificate generation server is running"
    )
