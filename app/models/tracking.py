"""Published ground-truth records and manual-injection overrides."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.domain.entities import Aircraft, FlightPhase, Vessel


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class AircraftSnapshot(BaseModel):
    """Clean, un-noised aircraft record emitted once per tick."""

    id: int = Field(..., description="Numeric flight identifier")
    hex_ident: str = Field(..., description="ICAO 24-bit address as 6 hex chars")
    callsign: str
    registration: str
    aircraft_type: str
    manufacturer: str
    engine_count: int
    operator_name: str
    operator_code: str
    operator_country: str
    origin: str = Field(..., description="Origin airport code")
    destination: str = Field(..., description="Destination airport code")
    latitude: float = Field(..., description="Latitude in decimal degrees")
    longitude: float = Field(..., description="Longitude in decimal degrees")
    altitude: float = Field(..., description="Altitude in feet")
    heading: float = Field(..., description="True heading in degrees [0, 360)")
    speed: float = Field(..., description="Ground speed in knots")
    vertical_speed: float = Field(..., description="Vertical speed in feet per minute")
    squawk: str
    phase: FlightPhase
    track_age: float = Field(..., description="Simulated seconds since creation")
    timestamp: datetime = Field(default_factory=_utcnow)

    @classmethod
    def from_entity(cls, aircraft: Aircraft) -> "AircraftSnapshot":
        return cls(
            id=aircraft.id,
            hex_ident=aircraft.hex_ident,
            callsign=aircraft.callsign,
            registration=aircraft.registration,
            aircraft_type=aircraft.aircraft_type,
            manufacturer=aircraft.manufacturer,
            engine_count=aircraft.engine_count,
            operator_name=aircraft.operator_name,
            operator_code=aircraft.operator_code,
            operator_country=aircraft.operator_country,
            origin=aircraft.origin,
            destination=aircraft.destination,
            latitude=aircraft.latitude,
            longitude=aircraft.longitude,
            altitude=aircraft.altitude,
            heading=aircraft.heading,
            speed=aircraft.speed,
            vertical_speed=aircraft.vertical_speed,
            squawk=aircraft.squawk,
            phase=aircraft.phase,
            track_age=aircraft.track_age,
        )


class VesselSnapshot(BaseModel):
    """Clean, un-noised vessel record emitted once per tick."""

    voyage_id: int = Field(..., description="Numeric voyage identifier")
    mmsi: int = Field(..., description="9-digit Maritime Mobile Service Identity")
    name: str
    vessel_type: str
    flag: str
    imo: str
    callsign: str
    length: int = Field(..., description="Length overall in meters")
    width: int = Field(..., description="Beam in meters")
    latitude: float
    longitude: float
    speed: float = Field(..., description="Speed over ground in knots")
    course: float = Field(..., description="Course over ground in degrees [0, 360)")
    draught: float = Field(..., description="Draught in meters")
    destination: str = Field(..., description="Destination port code")
    nav_status: str
    track_age: float
    timestamp: datetime = Field(default_factory=_utcnow)

    @classmethod
    def from_entity(cls, vessel: Vessel) -> "VesselSnapshot":
        return cls(
            voyage_id=vessel.id,
            mmsi=vessel.mmsi,
            name=vessel.name,
            vessel_type=vessel.vessel_type,
            flag=vessel.flag,
            imo=vessel.imo,
            callsign=vessel.callsign,
            length=vessel.length,
            width=vessel.width,
            latitude=vessel.latitude,
            longitude=vessel.longitude,
            speed=vessel.speed,
            course=vessel.course,
            draught=vessel.draught,
            destination=vessel.destination,
            nav_status=vessel.nav_status,
            track_age=vessel.track_age,
        )


class AircraftOverrides(BaseModel):
    """Partial aircraft state applied on top of a random valid flight."""

    callsign: Optional[str] = Field(default=None, min_length=2, max_length=8)
    registration: Optional[str] = None
    aircraft_type: Optional[str] = Field(
        default=None, description="Aircraft type code, e.g. A321"
    )
    operator_code: Optional[str] = Field(
        default=None, description="Airline code, e.g. VN"
    )
    origin: Optional[str] = Field(default=None, description="Origin airport code")
    destination: Optional[str] = Field(
        default=None, description="Destination airport code"
    )
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    altitude: Optional[float] = Field(default=None, description="Altitude in feet")
    cruise_altitude: Optional[float] = None
    heading: Optional[float] = None
    speed: Optional[float] = Field(default=None, ge=0, description="Knots")
    vertical_speed: Optional[float] = None
    squawk: Optional[str] = Field(default=None, pattern=r"^[0-7]{4}$")

    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)


class VesselOverrides(BaseModel):
    """Partial vessel state applied on top of a random valid voyage."""

    name: Optional[str] = None
    vessel_type: Optional[str] = None
    flag: Optional[str] = Field(default=None, description="Flag state code, e.g. VN")
    destination: Optional[str] = Field(default=None, description="Port code")
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    speed: Optional[float] = Field(default=None, ge=0, description="Knots")
    course: Optional[float] = None
    draught: Optional[float] = Field(default=None, ge=0, description="Meters")
    nav_status: Optional[str] = None
    length: Optional[int] = Field(default=None, gt=0)
    width: Optional[int] = Field(default=None, gt=0)

    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)


__all__ = [
    "AircraftOverrides",
    "AircraftSnapshot",
    "VesselOverrides",
    "VesselSnapshot",
]
