"""Request and response bodies for the simulation control endpoints."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.tracking import AircraftSnapshot, VesselSnapshot


class SimulationStartRequest(BaseModel):
    """Optional configuration changes applied before the loops start."""

    max_flights: Optional[int] = Field(default=None, ge=0)
    max_vessels: Optional[int] = Field(default=None, ge=0)
    flight_interval: Optional[float] = Field(
        default=None, gt=0, description="Seconds between aircraft ticks"
    )
    vessel_interval: Optional[float] = Field(
        default=None, gt=0, description="Seconds between vessel ticks"
    )
    enable_flights: Optional[bool] = None
    enable_vessels: Optional[bool] = None
    destination_mode: Optional[bool] = None

    model_config = ConfigDict(extra="forbid")


class SimulationControlResponse(BaseModel):
    status: str = Field(..., description="started, stopped, already_running or not_running")
    running: bool


class AirportScenarioRequest(BaseModel):
    airport: str = Field(default="SGN", description="Airport code to cluster flights around")


class ScenarioResponse(BaseModel):
    created: int
    flights: list[AircraftSnapshot] = Field(default_factory=list)
    vessels: list[VesselSnapshot] = Field(default_factory=list)


__all__ = [
    "AirportScenarioRequest",
    "ScenarioResponse",
    "SimulationControlResponse",
    "SimulationStartRequest",
]
