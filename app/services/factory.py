"""Random entity generation and the override-applying builder."""

from __future__ import annotations

import logging
import random
from typing import Optional

from app.config import SimulationConfig
from app.domain.entities import Aircraft, FlightPhase, Vessel
from app.domain.geo import bearing_to, in_bounds, normalize_heading
from app.domain.reference import (
    AIRCRAFT_TYPES,
    AIRLINES,
    AIRPORTS,
    FLAG_STATES,
    PORTS,
    SHIP_NAME_PREFIXES,
    SHIP_NAME_SUFFIXES,
    VESSEL_TYPES,
    Location,
    airport_by_code,
    port_by_code,
)
from app.models.tracking import AircraftOverrides, VesselOverrides

logger = logging.getLogger("tracksim.factory")

AIRPORT_JITTER_DEG = 0.1
PORT_JITTER_DEG = 0.2
_EMERGENCY_SQUAWKS = {"7500", "7600", "7700"}


def _clamp(value: float, bounds: tuple[float, float]) -> float:
    low, high = bounds
    return max(low, min(high, value))


class EntityFactory:
    """Build random but valid aircraft and vessels inside the envelope."""

    def __init__(self, config: SimulationConfig, rng: random.Random | None = None) -> None:
        self.config = config
        self.rng = rng or random.Random()

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------
    def _locations_in_envelope(self, locations: tuple[Location, ...]) -> list[Location]:
        return [
            location
            for location in locations
            if in_bounds(location.lat, location.lon, self.config.envelope)
        ] or list(locations)

    def _seed_position(self, location: Location, jitter: float) -> tuple[float, float]:
        envelope = self.config.envelope
        lat = location.lat + self.rng.uniform(-jitter, jitter)
        lon = location.lon + self.rng.uniform(-jitter, jitter)
        return (
            _clamp(lat, (envelope.min_lat, envelope.max_lat)),
            _clamp(lon, (envelope.min_lon, envelope.max_lon)),
        )

    def _other_location(
        self, locations: list[Location], exclude: Location
    ) -> Location:
        choices = [location for location in locations if location.code != exclude.code]
        return self.rng.choice(choices or locations)

    def _squawk(self) -> str:
        while True:
            code = "".join(str(self.rng.randint(0, 7)) for _ in range(4))
            if code not in _EMERGENCY_SQUAWKS:
                return code

    def _require_in_envelope(self, lat: float, lon: float) -> None:
        if not in_bounds(lat, lon, self.config.envelope):
            raise ValueError(
                f"Position ({lat:.4f}, {lon:.4f}) is outside the operating envelope"
            )

    # ------------------------------------------------------------------
    # Aircraft
    # ------------------------------------------------------------------
    def random_aircraft(
        self,
        *,
        origin: Optional[Location] = None,
        jitter: float = AIRPORT_JITTER_DEG,
    ) -> Aircraft:
        airports = self._locations_in_envelope(AIRPORTS)
        origin = origin or self.rng.choice(airports)
        destination = self._other_location(airports, origin)
        latitude, longitude = self._seed_position(origin, jitter)

        airline = self.rng.choice(AIRLINES)
        aircraft_type = self.rng.choice(AIRCRAFT_TYPES)
        altitude_range = self.config.altitude_range
        altitude = self.rng.uniform(*altitude_range)
        cruise = _clamp(
            self.rng.uniform(aircraft_type.cruise_min_ft, aircraft_type.cruise_max_ft),
            altitude_range,
        )
        speed = self.rng.uniform(*self.config.flight_speed_range)
        if self.config.destination_mode:
            heading = bearing_to(latitude, longitude, destination.lat, destination.lon)
        else:
            heading = self.rng.uniform(0.0, 360.0)
        heading = normalize_heading(heading)

        return Aircraft(
            id=self.rng.randint(10000, 99999),
            hex_ident=f"{self.rng.randrange(1 << 24):06X}",
            callsign=f"{airline.code}{self.rng.randint(100, 9999)}",
            registration=f"{airline.registration_prefix}{self.rng.randint(100, 999)}",
            aircraft_type=aircraft_type.type_code,
            manufacturer=aircraft_type.manufacturer,
            engine_count=aircraft_type.engines,
            operator_name=airline.name,
            operator_code=airline.code,
            operator_country=airline.country,
            origin=origin.code,
            destination=destination.code,
            latitude=latitude,
            longitude=longitude,
            altitude=altitude,
            target_altitude=altitude,
            cruise_altitude=cruise,
            heading=heading,
            target_heading=heading,
            speed=speed,
            target_speed=speed,
            vertical_speed=0.0,
            squawk=self._squawk(),
            destination_lat=destination.lat,
            destination_lon=destination.lon,
            phase=FlightPhase.CLIMB if altitude < cruise else FlightPhase.CRUISE,
        )

    def build_aircraft(self, overrides: AircraftOverrides | None = None) -> Aircraft:
        """Random valid aircraft with ``overrides`` applied and re-validated.

        Range-valued fields are clamped into their configured ranges; a
        position outside the envelope or an unknown airport/airline raises
        ``ValueError``.
        """

        if overrides is None:
            return self.random_aircraft()

        values = overrides.model_dump(exclude_none=True)
        origin = airport_by_code(values["origin"]) if "origin" in values else None
        aircraft = self.random_aircraft(origin=origin)

        if "destination" in values:
            destination = airport_by_code(values["destination"])
            aircraft.destination = destination.code
            aircraft.destination_lat = destination.lat
            aircraft.destination_lon = destination.lon
        if "operator_code" in values:
            airline = next(
                (item for item in AIRLINES if item.code == values["operator_code"].upper()),
                None,
            )
            if airline is None:
                raise ValueError(f"Unknown airline: {values['operator_code']}")
            aircraft.operator_code = airline.code
            aircraft.operator_name = airline.name
            aircraft.operator_country = airline.country
        if "aircraft_type" in values:
            type_code = values["aircraft_type"].upper()
            known = next(
                (item for item in AIRCRAFT_TYPES if item.type_code == type_code), None
            )
            aircraft.aircraft_type = type_code
            aircraft.manufacturer = known.manufacturer if known else "Unknown"
            aircraft.engine_count = known.engines if known else 2

        for name in ("callsign", "registration", "squawk"):
            if name in values:
                setattr(aircraft, name, values[name].upper())
        for name in (
            "latitude",
            "longitude",
            "altitude",
            "cruise_altitude",
            "heading",
            "speed",
            "vertical_speed",
        ):
            if name in values:
                setattr(aircraft, name, float(values[name]))

        self._require_in_envelope(aircraft.latitude, aircraft.longitude)
        aircraft.altitude = _clamp(aircraft.altitude, self.config.altitude_range)
        aircraft.cruise_altitude = _clamp(aircraft.cruise_altitude, self.config.altitude_range)
        aircraft.speed = _clamp(aircraft.speed, self.config.flight_speed_range)
        aircraft.heading = normalize_heading(aircraft.heading)
        if self.config.destination_mode and "heading" not in values:
            aircraft.heading = bearing_to(
                aircraft.latitude,
                aircraft.longitude,
                aircraft.destination_lat,
                aircraft.destination_lon,
            )
        aircraft.target_altitude = aircraft.altitude
        aircraft.target_heading = aircraft.heading
        aircraft.target_speed = aircraft.speed
        aircraft.phase = (
            FlightPhase.CLIMB
            if aircraft.altitude < aircraft.cruise_altitude
            else FlightPhase.CRUISE
        )
        logger.debug("Built flight %s with overrides %s", aircraft.callsign, sorted(values))
        return aircraft

    # ------------------------------------------------------------------
    # Vessels
    # ------------------------------------------------------------------
    def random_vessel(
        self,
        *,
        port: Optional[Location] = None,
        jitter: float = PORT_JITTER_DEG,
        flag_code: Optional[str] = None,
    ) -> Vessel:
        ports = self._locations_in_envelope(PORTS)
        port = port or self.rng.choice(ports)
        destination = self._other_location(ports, port)
        latitude, longitude = self._seed_position(port, jitter)

        if flag_code is not None:
            flag = next((item for item in FLAG_STATES if item.code == flag_code.upper()), None)
            if flag is None:
                raise ValueError(f"Unknown flag state: {flag_code}")
        else:
            flag = self.rng.choice(FLAG_STATES)
        vessel_type = self.rng.choice(VESSEL_TYPES)
        length = self.rng.randint(vessel_type.min_length_m, vessel_type.max_length_m)
        speed = self.rng.uniform(*self.config.vessel_speed_range)
        if self.config.destination_mode:
            course = bearing_to(latitude, longitude, destination.lat, destination.lon)
        else:
            course = self.rng.uniform(0.0, 360.0)
        course = normalize_heading(course)

        return Vessel(
            id=self.rng.randint(10000, 99999),
            mmsi=flag.mid * 1_000_000 + self.rng.randrange(1_000_000),
            name=f"{self.rng.choice(SHIP_NAME_PREFIXES)} {self.rng.choice(SHIP_NAME_SUFFIXES)}",
            vessel_type=vessel_type.name,
            flag=flag.code,
            imo=str(self.rng.randint(9_000_000, 9_999_999)),
            callsign=f"XV{self.rng.randint(1000, 9999)}",
            length=length,
            width=max(4, round(length * self.rng.uniform(0.12, 0.17))),
            latitude=latitude,
            longitude=longitude,
            speed=speed,
            target_speed=speed,
            course=course,
            target_course=course,
            draught=_clamp(self.rng.uniform(5.0, 15.0), self.config.draught_range),
            destination=destination.code,
            destination_lat=destination.lat,
            destination_lon=destination.lon,
        )

    def build_vessel(self, overrides: VesselOverrides | None = None) -> Vessel:
        """Random valid vessel with ``overrides`` applied and re-validated."""

        if overrides is None:
            return self.random_vessel()

        values = overrides.model_dump(exclude_none=True)
        vessel = self.random_vessel(flag_code=values.get("flag"))

        if "destination" in values:
            port = port_by_code(values["destination"])
            vessel.destination = port.code
            vessel.destination_lat = port.lat
            vessel.destination_lon = port.lon
        for name in ("name", "vessel_type", "nav_status"):
            if name in values:
                setattr(vessel, name, values[name])
        for name in ("length", "width"):
            if name in values:
                setattr(vessel, name, int(values[name]))
        for name in ("latitude", "longitude", "speed", "course", "draught"):
            if name in values:
                setattr(vessel, name, float(values[name]))

        self._require_in_envelope(vessel.latitude, vessel.longitude)
        vessel.speed = _clamp(vessel.speed, self.config.vessel_speed_range)
        vessel.draught = _clamp(vessel.draught, self.config.draught_range)
        vessel.course = normalize_heading(vessel.course)
        if self.config.destination_mode and "course" not in values:
            vessel.course = bearing_to(
                vessel.latitude, vessel.longitude, vessel.destination_lat, vessel.destination_lon
            )
        vessel.target_course = vessel.course
        vessel.target_speed = vessel.speed
        logger.debug("Built vessel %s with overrides %s", vessel.name, sorted(values))
        return vessel


__all__ = ["AIRPORT_JITTER_DEG", "EntityFactory", "PORT_JITTER_DEG"]
