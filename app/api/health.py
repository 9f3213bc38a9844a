"""Health check endpoints."""

from fastapi import APIRouter, Depends

from app.config import settings
from app.services.simulation import SimulationRuntime

from .deps import get_runtime

router = APIRouter()


@router.get("/healthz", summary="Health check")
def health_check() -> dict[str, str]:
    """Simple health check endpoint."""
    return {"status": "ok", "env": settings.tracksim_env}


@router.get("/api/status", summary="Simulation status")
def simulation_status(runtime: SimulationRuntime = Depends(get_runtime)) -> dict:
    """Report run state, population per category and publication counters."""

    return runtime.status()
