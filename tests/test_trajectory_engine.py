from dataclasses import replace
import random

import pytest

from app.config import SimulationConfig
from app.domain.entities import EntityKind, FlightPhase
from app.domain.geo import BoundingBox, bearing_to, distance_m
from app.domain.reference import airport_by_code, port_by_code
from app.models.tracking import AircraftOverrides
from app.services.entity_store import EntityStore
from app.services.trajectory import PopulationFullError, TrajectoryEngine

VIETNAM = BoundingBox(8.5, 23.5, 102.0, 109.5)
WORLD = BoundingBox(-90.0, 90.0, -180.0, 180.0)


class FakeClock:
    def __init__(self, now: float = 5_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def make_engine(seed: int = 3, store: EntityStore | None = None, **options) -> TrajectoryEngine:
    options.setdefault("envelope", VIETNAM)
    config = SimulationConfig(**options)
    return TrajectoryEngine(store or EntityStore(), config, rng=random.Random(seed))


def test_tick_advances_aircraft_by_speed_and_heading():
    engine = make_engine()
    aircraft = engine.store.create(
        lambda: replace(
            engine.factory.random_aircraft(),
            latitude=10.8231,
            longitude=106.6297,
            heading=45.0,
            target_heading=45.0,
            speed=480.0,
            target_speed=480.0,
        )
    )

    records = engine.tick(EntityKind.AIRCRAFT, dt=60.0)

    moved = engine.store.get(EntityKind.AIRCRAFT, aircraft.id)
    travelled = distance_m(10.8231, 106.6297, moved.latitude, moved.longitude)
    assert travelled == pytest.approx(14_816.0, rel=0.01)
    assert bearing_to(10.8231, 106.6297, moved.latitude, moved.longitude) == pytest.approx(45.0, abs=0.5)
    assert moved.track_age == 60.0
    assert aircraft.id in {record.id for record in records}


def test_entity_leaving_envelope_is_evicted_immediately():
    engine = make_engine(max_flights=1)
    leaving = engine.store.create(
        lambda: replace(
            engine.factory.random_aircraft(),
            latitude=23.49,
            longitude=105.0,
            heading=0.0,
            target_heading=0.0,
            speed=600.0,
            target_speed=600.0,
        )
    )

    records = engine.tick(EntityKind.AIRCRAFT, dt=60.0)

    assert engine.store.get(EntityKind.AIRCRAFT, leaving.id) is None
    assert leaving.id not in {record.id for record in records}
    assert engine.evicted[EntityKind.AIRCRAFT] == 1
    # replacement keeps the category populated
    assert engine.store.count(EntityKind.AIRCRAFT) == 1


def test_population_stays_within_bounds():
    engine = make_engine(max_flights=5, max_vessels=3)

    for _ in range(200):
        engine.tick(EntityKind.AIRCRAFT, dt=120.0)
        engine.tick(EntityKind.VESSEL, dt=600.0)
        assert 0 < engine.store.count(EntityKind.AIRCRAFT) <= 5
        assert 0 < engine.store.count(EntityKind.VESSEL) <= 3


def test_disabled_category_is_not_replenished():
    engine = make_engine(enable_flights=False)

    assert engine.tick(EntityKind.AIRCRAFT) == []
    assert engine.store.count(EntityKind.AIRCRAFT) == 0


def test_heading_and_altitude_stay_valid_under_fuzzing():
    engine = make_engine(seed=11, max_flights=3)
    low, high = engine.config.altitude_range

    for _ in range(10_000):
        for record in engine.tick(EntityKind.AIRCRAFT, dt=1.0):
            assert 0.0 <= record.heading < 360.0
            assert low <= record.altitude <= high
            assert VIETNAM.contains(record.latitude, record.longitude)


def test_vessel_course_stays_valid_under_fuzzing():
    engine = make_engine(seed=13, max_vessels=3)

    for _ in range(10_000):
        for record in engine.tick(EntityKind.VESSEL, dt=1.0):
            assert 0.0 <= record.course < 360.0
            assert record.speed >= 0.0
            assert VIETNAM.contains(record.latitude, record.longitude)


def test_destination_mode_stays_valid_under_fuzzing():
    engine = make_engine(seed=21, destination_mode=True, max_flights=3, max_vessels=3)
    low, high = engine.config.altitude_range

    for _ in range(10_000):
        for record in engine.tick(EntityKind.AIRCRAFT, dt=5.0):
            assert 0.0 <= record.heading < 360.0
            assert low <= record.altitude <= high
        for record in engine.tick(EntityKind.VESSEL, dt=60.0):
            assert 0.0 <= record.course < 360.0
            assert record.speed >= 0.0

    for aircraft in engine.store.snapshot(EntityKind.AIRCRAFT):
        assert 0.0 <= aircraft.target_heading < 360.0
    for vessel in engine.store.snapshot(EntityKind.VESSEL):
        assert 0.0 <= vessel.target_course < 360.0


def test_vessel_draught_random_walk_stays_in_range():
    engine = make_engine(seed=5, envelope=WORLD, max_vessels=1)
    vessel = engine.store.create(lambda: replace(engine.factory.random_vessel(), draught=10.0))

    for _ in range(1_000):
        engine.tick(EntityKind.VESSEL, dt=2.0)
        current = engine.store.get(EntityKind.VESSEL, vessel.id)
        assert 5.0 <= current.draught <= 20.0
        assert 0.0 <= current.course < 360.0
        assert current.speed >= 0.0


def test_destination_mode_descends_near_destination():
    engine = make_engine(destination_mode=True)
    han = airport_by_code("HAN")
    aircraft = replace(
        engine.factory.random_aircraft(),
        latitude=han.lat - 0.3,
        longitude=han.lon,
        destination="HAN",
        destination_lat=han.lat,
        destination_lon=han.lon,
        altitude=20000.0,
    )

    updated = engine.advance_aircraft(aircraft, 1.0)

    assert updated.phase is FlightPhase.DESCENT
    assert -2500.0 <= updated.vertical_speed <= -1500.0
    assert updated.altitude < 20000.0
    # due north of the aircraft
    assert min(updated.target_heading, 360.0 - updated.target_heading) < 1.0


def test_destination_mode_climbs_to_cruise_then_levels_off():
    engine = make_engine(destination_mode=True)
    han = airport_by_code("HAN")
    aircraft = replace(
        engine.factory.random_aircraft(),
        latitude=10.9,
        longitude=106.7,
        destination="HAN",
        destination_lat=han.lat,
        destination_lon=han.lon,
        altitude=34_950.0,
        cruise_altitude=35_000.0,
    )

    climbing = engine.advance_aircraft(aircraft, 60.0)
    assert climbing.phase is FlightPhase.CLIMB
    assert climbing.altitude == 35_000.0

    cruising = engine.advance_aircraft(climbing, 1.0)
    assert cruising.phase is FlightPhase.CRUISE
    assert -100.0 <= cruising.vertical_speed <= 100.0


def test_destination_mode_assigns_next_airport_on_arrival():
    engine = make_engine(destination_mode=True)
    sgn = airport_by_code("SGN")
    aircraft = replace(
        engine.factory.random_aircraft(),
        latitude=sgn.lat + 0.01,
        longitude=sgn.lon,
        origin="HAN",
        destination="SGN",
        destination_lat=sgn.lat,
        destination_lon=sgn.lon,
        speed=150.0,
    )

    updated = engine.advance_aircraft(aircraft, 1.0)

    assert updated.origin == "SGN"
    assert updated.destination != "SGN"
    assert (updated.destination_lat, updated.destination_lon) != (sgn.lat, sgn.lon)


def test_destination_mode_steers_vessels_to_port():
    engine = make_engine(destination_mode=True)
    port = port_by_code("VNQNI")
    vessel = replace(
        engine.factory.random_vessel(),
        latitude=10.5,
        longitude=107.5,
        destination="VNQNI",
        destination_lat=port.lat,
        destination_lon=port.lon,
    )

    updated = engine.advance_vessel(vessel, 2.0)

    assert updated.target_course == pytest.approx(
        bearing_to(updated.latitude, updated.longitude, port.lat, port.lon)
    )


def test_populate_initial_respects_caps():
    engine = make_engine(max_flights=100, max_vessels=6)

    records = engine.populate_initial()

    assert engine.store.count(EntityKind.AIRCRAFT) == 20
    assert engine.store.count(EntityKind.VESSEL) == 3
    assert len(records) == 23


def test_airport_scenario_clusters_flights_and_respects_cap():
    engine = make_engine(max_flights=4)
    sgn = airport_by_code("SGN")

    records = engine.airport_scenario("sgn")

    assert len(records) == 4
    for record in records:
        assert abs(record.latitude - sgn.lat) <= 0.05
        assert abs(record.longitude - sgn.lon) <= 0.05
    with pytest.raises(ValueError):
        engine.airport_scenario("XYZ")


def test_port_scenario_uses_first_two_ports():
    engine = make_engine()

    records = engine.port_scenario()

    assert len(records) == 10
    for record, port_code in zip(records, ["VNSGN"] * 5 + ["VNHPH"] * 5):
        port = port_by_code(port_code)
        assert abs(record.latitude - port.lat) <= 0.1
        assert abs(record.longitude - port.lon) <= 0.1


def test_manual_injection_refuses_when_population_full():
    engine = make_engine(max_flights=1)
    engine.create_aircraft(AircraftOverrides(callsign="VN100"))

    with pytest.raises(PopulationFullError):
        engine.create_aircraft(AircraftOverrides(callsign="VN200"))
    with pytest.raises(ValueError):
        make_engine().create_aircraft(AircraftOverrides(latitude=0.0, longitude=0.0))


def test_enforce_caps_trims_excess_population():
    store = EntityStore()
    make_engine(store=store, max_flights=10).spawn(EntityKind.AIRCRAFT, 10)

    removed = make_engine(store=store, max_flights=4).enforce_caps()

    assert removed == 6
    assert store.count(EntityKind.AIRCRAFT) == 4


def test_sweep_idle_removes_stale_entities():
    clock = FakeClock()
    engine = make_engine(store=EntityStore(clock=clock))
    engine.spawn(EntityKind.VESSEL, 2)
    clock.now += 301

    assert engine.sweep_idle() == 2
    assert engine.store.count(EntityKind.VESSEL) == 0
