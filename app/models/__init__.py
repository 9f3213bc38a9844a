"""Pydantic models for the Tracksim data simulator."""

from .simulation import (
    AirportScenarioRequest,
    ScenarioResponse,
    SimulationControlResponse,
    SimulationStartRequest,
)
from .tracking import (
    AircraftOverrides,
    AircraftSnapshot,
    VesselOverrides,
    VesselSnapshot,
)

__all__ = [
    "AircraftOverrides",
    "AircraftSnapshot",
    "AirportScenarioRequest",
    "ScenarioResponse",
    "SimulationControlResponse",
    "SimulationStartRequest",
    "VesselOverrides",
    "VesselSnapshot",
]
