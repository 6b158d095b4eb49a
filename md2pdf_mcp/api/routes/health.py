"""
Health Routes
=============

FastAPI routes for health check endpoints.
"""

from fastapi import APIRouter, Request

from md2pdf_mcp.models.schemas import HealthStatus

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthStatus)
async def health_check(request: Request) -> HealthStatus:
    """Basic health check with session and runtime counters."""
    state = request.app.state
    launcher = state.tools.launcher
    return HealthStatus(
        status="healthy",
        version=state.settings.app_version,
        active_sessions=len(state.registry),
        runtimes_acquired=launcher.acquired,
        runtimes_released=launcher.released,
    )
