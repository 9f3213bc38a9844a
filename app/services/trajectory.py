"""Per-tick advancement of simulated flights and voyages."""

from __future__ import annotations

import logging
import random
from threading import Lock
from typing import Optional, Union

from app.config import SimulationConfig
from app.domain.entities import Aircraft, Entity, EntityKind, FlightPhase, Vessel
from app.domain.geo import (
    advance,
    bearing_to,
    distance_deg,
    heading_delta,
    in_bounds,
    normalize_heading,
)
from app.domain.reference import AIRPORTS, PORTS, airport_by_code
from app.models.tracking import (
    AircraftOverrides,
    AircraftSnapshot,
    VesselOverrides,
    VesselSnapshot,
)
from app.services.entity_store import EntityStore
from app.services.factory import EntityFactory

logger = logging.getLogger("tracksim.trajectory")

Snapshot = Union[AircraftSnapshot, VesselSnapshot]

# Per-tick probabilities of drawing a fresh target value
AIRCRAFT_HEADING_REDRAW = 0.10
AIRCRAFT_SPEED_REDRAW = 0.05
AIRCRAFT_ALTITUDE_REDRAW = 0.03
VESSEL_COURSE_REDRAW = 0.05
VESSEL_SPEED_REDRAW = 0.03

# Fraction of the remaining gap closed per tick
AIRCRAFT_HEADING_RATE = 0.10
AIRCRAFT_SPEED_RATE = 0.05
AIRCRAFT_ALTITUDE_RATE = 0.02
VESSEL_COURSE_RATE = 0.05
VESSEL_SPEED_RATE = 0.03

DRAUGHT_STEP_M = 0.05
DESCENT_DISTANCE_DEG = 0.5
ARRIVAL_DISTANCE_DEG = 0.05

AIRCRAFT_SPAWN_WEIGHTS = {1: 0.5, 2: 0.3, 3: 0.2}
VESSEL_SPAWN_WEIGHTS = {1: 0.6, 2: 0.4}
INITIAL_AIRCRAFT_CAP = 20
INITIAL_VESSEL_CAP = 10

AIRPORT_SCENARIO_SIZE = 10
AIRPORT_SCENARIO_JITTER = 0.05
PORT_SCENARIO_SIZE = 5
PORT_SCENARIO_JITTER = 0.1
PORT_SCENARIO_PORTS = 2


def to_snapshot(entity: Entity) -> Snapshot:
    if isinstance(entity, Aircraft):
        return AircraftSnapshot.from_entity(entity)
    return VesselSnapshot.from_entity(entity)


class PopulationFullError(RuntimeError):
    """Raised when an explicit creation request would exceed the cap."""


class TrajectoryEngine:
    """Advance every active entity of a category once per tick.

    Ticks for one category are serialized by a per-category lock; each
    entity is stepped on a copy and written back with a single commit, so
    readers never observe a half-applied update.
    """

    def __init__(
        self,
        store: EntityStore,
        config: SimulationConfig,
        *,
        rng: random.Random | None = None,
        factory: EntityFactory | None = None,
    ) -> None:
        self.store = store
        self.config = config
        self.rng = rng or random.Random()
        self.factory = factory or EntityFactory(config, self.rng)
        self._locks = {kind: Lock() for kind in EntityKind}
        self.ticks = {kind: 0 for kind in EntityKind}
        self.created = {kind: 0 for kind in EntityKind}
        self.evicted = {kind: 0 for kind in EntityKind}

    # ------------------------------------------------------------------
    # Single-entity steps
    # ------------------------------------------------------------------
    def advance_aircraft(self, aircraft: Aircraft, dt: float) -> Aircraft:
        """Return the state of ``aircraft`` one tick of ``dt`` seconds later."""

        updated = aircraft.copy()
        rng = self.rng
        low_alt, high_alt = self.config.altitude_range

        updated.latitude, updated.longitude = advance(
            aircraft.latitude, aircraft.longitude, aircraft.speed, aircraft.heading, dt
        )

        if rng.random() < AIRCRAFT_SPEED_REDRAW:
            updated.target_speed = rng.uniform(*self.config.flight_speed_range)

        if self.config.destination_mode:
            self._steer_to_destination(updated, dt)
        else:
            if rng.random() < AIRCRAFT_HEADING_REDRAW:
                updated.target_heading = rng.uniform(0.0, 360.0)
            if rng.random() < AIRCRAFT_ALTITUDE_REDRAW:
                updated.target_altitude = rng.uniform(low_alt, high_alt)
            change = (updated.target_altitude - updated.altitude) * AIRCRAFT_ALTITUDE_RATE
            updated.altitude += change
            updated.vertical_speed = change / dt * 60.0 if dt > 0 else 0.0

        updated.altitude = max(low_alt, min(high_alt, updated.altitude))
        updated.heading = normalize_heading(
            updated.heading
            + heading_delta(updated.heading, updated.target_heading) * AIRCRAFT_HEADING_RATE
        )
        updated.speed += (updated.target_speed - updated.speed) * AIRCRAFT_SPEED_RATE
        updated.track_age += dt
        return updated

    def _steer_to_destination(self, aircraft: Aircraft, dt: float) -> None:
        rng = self.rng
        low_alt, _ = self.config.altitude_range
        remaining = distance_deg(
            aircraft.latitude,
            aircraft.longitude,
            aircraft.destination_lat,
            aircraft.destination_lon,
        )

        if remaining < ARRIVAL_DISTANCE_DEG:
            arrived = aircraft.destination
            choices = [airport for airport in AIRPORTS if airport.code != arrived]
            following = rng.choice(choices)
            aircraft.origin = arrived
            aircraft.destination = following.code
            aircraft.destination_lat = following.lat
            aircraft.destination_lon = following.lon
            aircraft.phase = FlightPhase.CLIMB
            logger.debug(
                "Flight %s arrived at %s, continuing to %s",
                aircraft.callsign,
                arrived,
                following.code,
            )
            remaining = distance_deg(
                aircraft.latitude, aircraft.longitude, following.lat, following.lon
            )

        aircraft.target_heading = bearing_to(
            aircraft.latitude,
            aircraft.longitude,
            aircraft.destination_lat,
            aircraft.destination_lon,
        )

        if remaining < DESCENT_DISTANCE_DEG:
            aircraft.phase = FlightPhase.DESCENT
            aircraft.vertical_speed = -rng.uniform(1500.0, 2500.0)
            aircraft.target_altitude = low_alt
            aircraft.altitude = max(low_alt, aircraft.altitude + aircraft.vertical_speed * dt / 60.0)
        elif aircraft.altitude < aircraft.cruise_altitude:
            aircraft.phase = FlightPhase.CLIMB
            aircraft.vertical_speed = rng.uniform(1500.0, 2500.0)
            aircraft.target_altitude = aircraft.cruise_altitude
            aircraft.altitude = min(
                aircraft.cruise_altitude,
                aircraft.altitude + aircraft.vertical_speed * dt / 60.0,
            )
        else:
            aircraft.phase = FlightPhase.CRUISE
            aircraft.vertical_speed = rng.uniform(-100.0, 100.0)
            aircraft.target_altitude = aircraft.cruise_altitude
            aircraft.altitude += aircraft.vertical_speed * dt / 60.0

    def advance_vessel(self, vessel: Vessel, dt: float) -> Vessel:
        """Return the state of ``vessel`` one tick of ``dt`` seconds later."""

        updated = vessel.copy()
        rng = self.rng

        updated.latitude, updated.longitude = advance(
            vessel.latitude, vessel.longitude, vessel.speed, vessel.course, dt
        )

        if self.config.destination_mode:
            remaining = distance_deg(
                updated.latitude,
                updated.longitude,
                updated.destination_lat,
                updated.destination_lon,
            )
            if remaining < ARRIVAL_DISTANCE_DEG:
                choices = [port for port in PORTS if port.code != updated.destination]
                following = rng.choice(choices)
                updated.destination = following.code
                updated.destination_lat = following.lat
                updated.destination_lon = following.lon
            updated.target_course = bearing_to(
                updated.latitude,
                updated.longitude,
                updated.destination_lat,
                updated.destination_lon,
            )
        elif rng.random() < VESSEL_COURSE_REDRAW:
            updated.target_course = rng.uniform(0.0, 360.0)
        if rng.random() < VESSEL_SPEED_REDRAW:
            updated.target_speed = rng.uniform(*self.config.vessel_speed_range)

        updated.course = normalize_heading(
            updated.course
            + heading_delta(updated.course, updated.target_course) * VESSEL_COURSE_RATE
        )
        updated.speed = max(
            0.0, updated.speed + (updated.target_speed - updated.speed) * VESSEL_SPEED_RATE
        )
        low_draught, high_draught = self.config.draught_range
        updated.draught = max(
            low_draught,
            min(high_draught, updated.draught + rng.uniform(-DRAUGHT_STEP_M, DRAUGHT_STEP_M)),
        )
        updated.track_age += dt
        return updated

    def step(self, entity: Entity, dt: float) -> Entity:
        if isinstance(entity, Aircraft):
            return self.advance_aircraft(entity, dt)
        return self.advance_vessel(entity, dt)

    # ------------------------------------------------------------------
    # Category ticks
    # ------------------------------------------------------------------
    def tick(self, kind: EntityKind, dt: Optional[float] = None) -> list[Snapshot]:
        """Advance, evict and replenish one category.

        Returns one ground-truth snapshot per entity that was advanced and
        kept, plus one per entity created to replace attrition.
        """

        dt = self.config.interval(kind) if dt is None else dt
        with self._locks[kind]:
            records: list[Snapshot] = []
            evicted = 0
            for entity in self.store.snapshot(kind):
                updated = self.step(entity, dt)
                if not in_bounds(updated.latitude, updated.longitude, self.config.envelope):
                    if self.store.remove(kind, updated.id):
                        evicted += 1
                    continue
                if self.store.commit(updated):
                    records.append(to_snapshot(updated))

            self.ticks[kind] += 1
            self.evicted[kind] += evicted
            if evicted:
                logger.debug("Evicted %s %s entities leaving the envelope", evicted, kind.value)
            records.extend(to_snapshot(entity) for entity in self._replenish(kind))
            return records

    def _replenish(self, kind: EntityKind) -> list[Entity]:
        if not self.config.enabled(kind):
            return []
        available = self.config.max_population(kind) - self.store.count(kind)
        if available <= 0:
            return []
        weights = AIRCRAFT_SPAWN_WEIGHTS if kind is EntityKind.AIRCRAFT else VESSEL_SPAWN_WEIGHTS
        wanted = self.rng.choices(list(weights), weights=list(weights.values()))[0]
        return self.spawn(kind, min(available, wanted))

    def spawn(self, kind: EntityKind, count: int) -> list[Entity]:
        """Create ``count`` random entities seeded at airports or ports."""

        if kind is EntityKind.AIRCRAFT:
            factory = self.factory.random_aircraft
        else:
            factory = self.factory.random_vessel
        created = [self.store.create(factory) for _ in range(max(0, count))]
        self.created[kind] += len(created)
        return created

    def populate_initial(self) -> list[Snapshot]:
        """Seed the opening population for every enabled category."""

        records: list[Snapshot] = []
        for kind, cap in (
            (EntityKind.AIRCRAFT, INITIAL_AIRCRAFT_CAP),
            (EntityKind.VESSEL, INITIAL_VESSEL_CAP),
        ):
            if not self.config.enabled(kind):
                continue
            target = min(self.config.max_population(kind) // 2, cap)
            missing = target - self.store.count(kind)
            with self._locks[kind]:
                records.extend(to_snapshot(entity) for entity in self.spawn(kind, missing))
        logger.info("Initial population: %s records", len(records))
        return records

    def enforce_caps(self) -> int:
        """Remove the newest entities of any category above its maximum."""

        removed = 0
        for kind in EntityKind:
            with self._locks[kind]:
                excess = self.store.count(kind) - self.config.max_population(kind)
                if excess <= 0:
                    continue
                for entity_id in self.store.ids(kind)[-excess:]:
                    removed += self.store.remove(kind, entity_id)
        if removed:
            logger.info("Removed %s entities above the population caps", removed)
        return removed

    def sweep_idle(self) -> int:
        return self.store.evict_idle_older_than(self.config.idle_threshold_seconds)

    # ------------------------------------------------------------------
    # On-demand creation
    # ------------------------------------------------------------------
    def _free_slots(self, kind: EntityKind) -> int:
        return max(0, self.config.max_population(kind) - self.store.count(kind))

    def airport_scenario(self, airport_code: str, count: int = AIRPORT_SCENARIO_SIZE) -> list[Snapshot]:
        """Create a cluster of flights around one airport.

        Raises ``ValueError`` for an unknown airport. The cluster is
        truncated to the free population slots.
        """

        airport = airport_by_code(airport_code)
        with self._locks[EntityKind.AIRCRAFT]:
            size = min(count, self._free_slots(EntityKind.AIRCRAFT))
            created = [
                self.store.create(
                    lambda: self.factory.random_aircraft(
                        origin=airport, jitter=AIRPORT_SCENARIO_JITTER
                    )
                )
                for _ in range(size)
            ]
            self.created[EntityKind.AIRCRAFT] += len(created)
        logger.info("Airport scenario at %s created %s flights", airport.code, len(created))
        return [to_snapshot(entity) for entity in created]

    def port_scenario(self, count_per_port: int = PORT_SCENARIO_SIZE) -> list[Snapshot]:
        """Create vessel clusters around the first two ports."""

        created: list[Entity] = []
        with self._locks[EntityKind.VESSEL]:
            for port in PORTS[:PORT_SCENARIO_PORTS]:
                size = min(count_per_port, self._free_slots(EntityKind.VESSEL))
                for _ in range(size):
                    created.append(
                        self.store.create(
                            lambda port=port: self.factory.random_vessel(
                                port=port, jitter=PORT_SCENARIO_JITTER
                            )
                        )
                    )
            self.created[EntityKind.VESSEL] += len(created)
        logger.info("Port scenario created %s vessels", len(created))
        return [to_snapshot(entity) for entity in created]

    def create_aircraft(self, overrides: AircraftOverrides | None = None) -> AircraftSnapshot:
        """Inject one flight built from ``overrides``.

        Invalid overrides raise ``ValueError``; a full population raises
        :class:`PopulationFullError`.
        """

        # Raises ValueError before the create() retry loop
        self.factory.build_aircraft(overrides)
        with self._locks[EntityKind.AIRCRAFT]:
            if not self._free_slots(EntityKind.AIRCRAFT):
                raise PopulationFullError("aircraft population is at its maximum")
            aircraft = self.store.create(lambda: self.factory.build_aircraft(overrides))
            self.created[EntityKind.AIRCRAFT] += 1
        logger.info("Injected flight %s (%s)", aircraft.callsign, aircraft.hex_ident)
        return AircraftSnapshot.from_entity(aircraft)

    def create_vessel(self, overrides: VesselOverrides | None = None) -> VesselSnapshot:
        self.factory.build_vessel(overrides)
        with self._locks[EntityKind.VESSEL]:
            if not self._free_slots(EntityKind.VESSEL):
                raise PopulationFullError("vessel population is at its maximum")
            vessel = self.store.create(lambda: self.factory.build_vessel(overrides))
            self.created[EntityKind.VESSEL] += 1
        logger.info("Injected vessel %s (%s)", vessel.name, vessel.mmsi)
        return VesselSnapshot.from_entity(vessel)

    def stats(self) -> dict[str, dict[str, int]]:
        return {
            kind.value: {
                "active": self.store.count(kind),
                "max": self.config.max_population(kind),
                "ticks": self.ticks[kind],
                "created": self.created[kind],
                "evicted": self.evicted[kind],
            }
            for kind in EntityKind
        }


__all__ = [
    "PopulationFullError",
    "Snapshot",
    "TrajectoryEngine",
    "to_snapshot",
]
