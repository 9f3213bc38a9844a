"""Shared FastAPI dependencies."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from app.services.simulation import SimulationRuntime


def get_runtime(request: Request) -> SimulationRuntime:
    """Return the runtime created by the application lifespan."""

    runtime: SimulationRuntime | None = getattr(request.app.state, "runtime", None)
    if runtime is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Simulation runtime is not initialized",
        )
    return runtime


__all__ = ["get_runtime"]
