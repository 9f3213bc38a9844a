"""Simulated provider endpoints and their statistics."""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.domain.entities import EntityKind
from app.domain.geo import BoundingBox
from app.services.aggregation import SourceFeed
from app.services.simulation import SimulationRuntime

from .deps import get_runtime

router = APIRouter(prefix="/api/mock", tags=["mock-sources"])

logger = logging.getLogger("tracksim.api.mock_sources")


def _get_feed(runtime: SimulationRuntime, source: str) -> SourceFeed:
    try:
        return runtime.aggregation.feed(source)
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown source: {source}",
        ) from exc


@router.get("/status", summary="Per-source statistics")
def sources_status(runtime: SimulationRuntime = Depends(get_runtime)) -> dict[str, Any]:
    """Counts, quality and priority of every simulated provider."""

    return {
        "running": runtime.running,
        "active_aircraft": runtime.store.count(EntityKind.AIRCRAFT),
        "active_vessels": runtime.store.count(EntityKind.VESSEL),
        "sources": runtime.aggregation.stats(),
    }


@router.get("/sources/{source}", summary="Statistics for one provider")
def source_status(
    source: str, runtime: SimulationRuntime = Depends(get_runtime)
) -> dict[str, Any]:
    return _get_feed(runtime, source).stats()


@router.get("/{source}", summary="Poll a simulated provider")
def poll_source(
    source: str,
    bounds: Optional[str] = Query(
        default=None, description="minLat,maxLat,minLon,maxLon"
    ),
    runtime: SimulationRuntime = Depends(get_runtime),
) -> dict[str, Any]:
    """Return the provider's current view in its own wire shape."""

    feed = _get_feed(runtime, source)
    area: BoundingBox | None = None
    if bounds is not None:
        try:
            area = BoundingBox.parse(bounds)
        except ValueError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
            ) from exc

    payload = feed.query(area)
    logger.debug("Served %s poll (bounds=%s)", source, bounds)
    return payload
