"""Canonical ground-truth entity shapes."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import ClassVar, Union


class EntityKind(str, Enum):
    """Simulated traffic categories."""

    AIRCRAFT = "aircraft"
    VESSEL = "vessel"


class FlightPhase(str, Enum):
    CLIMB = "climb"
    CRUISE = "cruise"
    DESCENT = "descent"


@dataclass
class Aircraft:
    """Mutable ground-truth state of one simulated flight.

    Only the entity store mutates live instances; everyone else works on
    copies returned by :meth:`copy`.
    """

    kind: ClassVar[EntityKind] = EntityKind.AIRCRAFT

    id: int
    hex_ident: str
    callsign: str
    registration: str
    aircraft_type: str
    manufacturer: str
    engine_count: int
    operator_name: str
    operator_code: str
    operator_country: str
    origin: str
    destination: str
    latitude: float
    longitude: float
    altitude: float
    target_altitude: float
    cruise_altitude: float
    heading: float
    target_heading: float
    speed: float
    target_speed: float
    vertical_speed: float
    squawk: str
    destination_lat: float
    destination_lon: float
    phase: FlightPhase = FlightPhase.CLIMB
    track_age: float = 0.0
    last_update: float = 0.0

    @property
    def key(self) -> str:
        return self.hex_ident

    def copy(self) -> "Aircraft":
        return replace(self)


@dataclass
class Vessel:
    """Mutable ground-truth state of one simulated voyage."""

    kind: ClassVar[EntityKind] = EntityKind.VESSEL

    id: int
    mmsi: int
    name: str
    vessel_type: str
    flag: str
    imo: str
    callsign: str
    length: int
    width: int
    latitude: float
    longitude: float
    speed: float
    target_speed: float
    course: float
    target_course: float
    draught: float
    destination: str
    destination_lat: float
    destination_lon: float
    nav_status: str = "Under way using engine"
    track_age: float = 0.0
    last_update: float = 0.0

    @property
    def key(self) -> int:
        return self.mmsi

    def copy(self) -> "Vessel":
        return replace(self)


Entity = Union[Aircraft, Vessel]

__all__ = ["Aircraft", "Entity", "EntityKind", "FlightPhase", "Vessel"]
