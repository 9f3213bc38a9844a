"""Simulation lifecycle, scenario and configuration endpoints."""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from app.domain.reference import AIRPORTS, PORTS
from app.models.simulation import (
    AirportScenarioRequest,
    ScenarioResponse,
    SimulationControlResponse,
    SimulationStartRequest,
)
from app.models.tracking import AircraftSnapshot, VesselSnapshot
from app.services.simulation import SimulationRuntime

from .deps import get_runtime

router = APIRouter(prefix="/api", tags=["simulation"])

logger = logging.getLogger("tracksim.api.simulation")


@router.post(
    "/simulation/start",
    response_model=SimulationControlResponse,
    summary="Start the simulation loops",
)
async def start_simulation(
    body: Optional[SimulationStartRequest] = None,
    runtime: SimulationRuntime = Depends(get_runtime),
) -> SimulationControlResponse:
    options = body.model_dump(exclude_none=True) if body else {}
    logger.info("Simulation start requested (options=%s)", options)
    try:
        started = await runtime.start(**options)
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return SimulationControlResponse(
        status="started" if started else "already_running", running=runtime.running
    )


@router.post(
    "/simulation/stop",
    response_model=SimulationControlResponse,
    summary="Stop the simulation loops",
)
async def stop_simulation(
    runtime: SimulationRuntime = Depends(get_runtime),
) -> SimulationControlResponse:
    stopped = await runtime.stop()
    return SimulationControlResponse(
        status="stopped" if stopped else "not_running", running=runtime.running
    )


@router.post(
    "/simulation/scenarios/airport",
    response_model=ScenarioResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Cluster flights around an airport",
)
async def airport_scenario(
    request: AirportScenarioRequest,
    runtime: SimulationRuntime = Depends(get_runtime),
) -> ScenarioResponse:
    try:
        records = runtime.airport_scenario(request.airport)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    flights = [record for record in records if isinstance(record, AircraftSnapshot)]
    return ScenarioResponse(created=len(flights), flights=flights)


@router.post(
    "/simulation/scenarios/port",
    response_model=ScenarioResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Cluster vessels around the main ports",
)
async def port_scenario(runtime: SimulationRuntime = Depends(get_runtime)) -> ScenarioResponse:
    vessels = [
        record for record in runtime.port_scenario() if isinstance(record, VesselSnapshot)
    ]
    return ScenarioResponse(created=len(vessels), vessels=vessels)


@router.get("/config", summary="Active simulation configuration")
def read_config(runtime: SimulationRuntime = Depends(get_runtime)) -> dict[str, Any]:
    config = runtime.config.as_dict()
    config["sources"] = [feed.stats() for feed in runtime.aggregation.feeds()]
    config["publish_mode"] = runtime.settings.publish_mode
    return config


@router.get("/locations", summary="Airports and ports used for seeding")
def read_locations() -> dict[str, list[dict[str, Any]]]:
    return {
        "airports": [
            {"code": item.code, "name": item.name, "lat": item.lat, "lon": item.lon}
            for item in AIRPORTS
        ],
        "ports": [
            {"code": item.code, "name": item.name, "lat": item.lat, "lon": item.lon}
            for item in PORTS
        ],
    }
