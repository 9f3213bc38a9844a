"""Manual injection and lookup of individual entities."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from app.domain.entities import Aircraft, EntityKind, Vessel
from app.models.tracking import (
    AircraftOverrides,
    AircraftSnapshot,
    VesselOverrides,
    VesselSnapshot,
)
from app.services.simulation import SimulationRuntime
from app.services.trajectory import PopulationFullError

from .deps import get_runtime

router = APIRouter(prefix="/api", tags=["entities"])

logger = logging.getLogger("tracksim.api.entities")


@router.post(
    "/manual/flight",
    response_model=AircraftSnapshot,
    status_code=status.HTTP_201_CREATED,
    summary="Inject one flight",
)
async def create_flight(
    overrides: Optional[AircraftOverrides] = None,
    runtime: SimulationRuntime = Depends(get_runtime),
) -> AircraftSnapshot:
    """Create a random flight with any supplied fields applied on top."""

    try:
        return runtime.inject_aircraft(overrides)
    except PopulationFullError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ValueError as exc:
        logger.warning("Rejected manual injection: %s", exc)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.post(
    "/manual/ship",
    response_model=VesselSnapshot,
    status_code=status.HTTP_201_CREATED,
    summary="Inject one vessel",
)
async def create_ship(
    overrides: Optional[VesselOverrides] = None,
    runtime: SimulationRuntime = Depends(get_runtime),
) -> VesselSnapshot:
    try:
        return runtime.inject_vessel(overrides)
    except PopulationFullError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ValueError as exc:
        logger.warning("Rejected manual injection: %s", exc)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.get(
    "/entities/flights/{flight_id}",
    response_model=AircraftSnapshot,
    summary="Ground truth of one flight",
)
def get_flight(
    flight_id: int, runtime: SimulationRuntime = Depends(get_runtime)
) -> AircraftSnapshot:
    aircraft = runtime.store.get(EntityKind.AIRCRAFT, flight_id)
    if not isinstance(aircraft, Aircraft):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"Flight {flight_id} not found"
        )
    return AircraftSnapshot.from_entity(aircraft)


@router.get(
    "/entities/vessels/{voyage_id}",
    response_model=VesselSnapshot,
    summary="Ground truth of one vessel",
)
def get_vessel(
    voyage_id: int, runtime: SimulationRuntime = Depends(get_runtime)
) -> VesselSnapshot:
    vessel = runtime.store.get(EntityKind.VESSEL, voyage_id)
    if not isinstance(vessel, Vessel):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"Vessel {voyage_id} not found"
        )
    return VesselSnapshot.from_entity(vessel)
