"""Health check route."""

from fastapi import APIRouter

from querybot import __version__
from querybot.models.api import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Liveness check; reports ``degraded`` when no agent is configured."""
    from querybot.api.main import app_state

    runtime = app_state.get("runtime")
    configured = runtime is not None and runtime.data_source.is_ready
    return HealthResponse(
        status="healthy" if configured else "degraded",
        version=__version__,
        agent_configured=configured,
    )
