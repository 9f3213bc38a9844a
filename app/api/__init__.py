"""API routers for the Tracksim data simulator."""

from fastapi import APIRouter

from .entities import router as entities_router
from .health import router as health_router
from .mock_sources import router as mock_sources_router
from .simulation import router as simulation_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(mock_sources_router)
api_router.include_router(simulation_router)
api_router.include_router(entities_router)

__all__ = ["api_router"]
