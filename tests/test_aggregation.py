from dataclasses import replace
import random

import pytest

from app.config import SimulationConfig
from app.domain.entities import EntityKind
from app.domain.geo import BoundingBox, in_bounds
from app.domain.reference import port_by_code
from app.domain.sources import DEFAULT_SOURCE_PROFILES
from app.services.aggregation import AggregationLayer, SourceFeed
from app.services.entity_store import EntityStore
from app.services.factory import EntityFactory

VIETNAM = BoundingBox(8.5, 23.5, 102.0, 109.5)
PROFILES = {profile.name: profile for profile in DEFAULT_SOURCE_PROFILES}


@pytest.fixture
def populated_store():
    config = SimulationConfig(envelope=VIETNAM)
    factory = EntityFactory(config, random.Random(21))
    store = EntityStore()
    for _ in range(100):
        store.create(factory.random_vessel)
    for _ in range(50):
        store.create(factory.random_aircraft)
    return store


def make_feed(store, name="marinetraffic", seed=8, **changes):
    profile = replace(PROFILES[name], **changes)
    return SourceFeed(profile, store, VIETNAM, rng=random.Random(seed))


def test_drop_fraction_tracks_error_rate(populated_store):
    feed = make_feed(populated_store, error_rate=0.3, quality=1.0)

    for _ in range(40):
        feed.sample()

    offered = feed.returned + feed.dropped
    assert offered == 40 * 100
    assert feed.dropped / offered == pytest.approx(0.3, abs=0.03)
    assert feed.polls == 40


def test_quality_one_never_alters_readings(populated_store):
    feed = make_feed(populated_store, error_rate=0.0, quality=1.0)
    truth = {vessel.id: vessel for vessel in populated_store.snapshot(EntityKind.VESSEL)}

    readings = feed.sample()

    assert len(readings) == 100
    for reading in readings:
        original = truth[reading.id]
        assert (reading.latitude, reading.longitude) == (original.latitude, original.longitude)
        assert reading.speed == original.speed
        assert reading.course == original.course
    assert feed.degraded == 0


def test_quality_zero_degrades_every_surviving_reading(populated_store):
    feed = make_feed(populated_store, "adsbexchange", error_rate=0.1, quality=0.0)
    truth = {item.id: item for item in populated_store.snapshot(EntityKind.AIRCRAFT)}

    readings = feed.sample()

    assert feed.degraded == len(readings) == feed.returned
    for reading in readings:
        original = truth[reading.id]
        assert (
            reading.latitude != original.latitude
            or reading.speed != original.speed
            or reading.heading != original.heading
        )
        assert 0.0 <= reading.heading < 360.0
        assert reading.speed >= 0.0


def test_noise_amplitude_scales_with_quality(populated_store):
    feed = make_feed(populated_store, error_rate=0.0, quality=0.5, noise_factor=2.0)
    truth = {vessel.id: vessel for vessel in populated_store.snapshot(EntityKind.VESSEL)}
    limit = (1 - 0.5) * 2.0 * feed.profile.position_noise_deg + 1e-9

    for reading in feed.sample():
        original = truth[reading.id]
        assert abs(reading.latitude - original.latitude) <= limit
        assert abs(reading.longitude - original.longitude) <= limit


def test_region_restriction_uses_ground_truth(populated_store):
    feed = make_feed(populated_store, "chinaports", error_rate=0.0, quality=1.0)
    region = feed.profile.region

    feed.refresh()
    readings = feed.sample()

    expected = [
        vessel
        for vessel in populated_store.snapshot(EntityKind.VESSEL)
        if in_bounds(vessel.latitude, vessel.longitude, region)
    ]
    assert {reading.id for reading in readings} == {vessel.id for vessel in expected}
    assert len(readings) < 100


def test_bounds_filter_and_lazy_refresh(populated_store):
    feed = make_feed(populated_store, error_rate=0.0, quality=1.0)
    hai_phong = port_by_code("VNHPH")
    bounds = BoundingBox(hai_phong.lat - 0.5, hai_phong.lat + 0.5, hai_phong.lon - 0.5, hai_phong.lon + 0.5)

    assert feed.last_refresh is None
    readings = feed.sample(bounds)

    assert feed.last_refresh is not None
    assert readings
    assert all(bounds.contains(reading.latitude, reading.longitude) for reading in readings)


def test_view_is_only_updated_on_refresh(populated_store):
    feed = make_feed(populated_store, error_rate=0.0, quality=1.0)
    feed.refresh()
    victim = populated_store.snapshot(EntityKind.VESSEL)[0]
    populated_store.remove(EntityKind.VESSEL, victim.id)

    assert victim.id in {reading.id for reading in feed.sample()}
    feed.refresh()
    assert victim.id not in {reading.id for reading in feed.sample()}


def test_query_serializes_in_source_shape(populated_store):
    feed = make_feed(populated_store, "vesselfinder", error_rate=0.0)

    payload = feed.query()

    assert set(payload) == {"vessels"}
    assert len(payload["vessels"]) == 100
    stats = feed.stats()
    assert stats["polls"] == 1
    assert stats["returned"] == 100
    assert stats["view_size"] == 100
    assert stats["coverage"] == "commercial"


def test_aggregation_layer_registry(populated_store):
    layer = AggregationLayer(
        populated_store, SimulationConfig(envelope=VIETNAM), rng=random.Random(1)
    )

    assert len(layer.feeds(EntityKind.AIRCRAFT)) == 2
    assert len(layer.feeds(EntityKind.VESSEL)) == 4
    assert layer.feed("chinaports").profile.priority == 3
    with pytest.raises(KeyError):
        layer.feed("unknown")
    assert set(layer.stats()) == set(PROFILES)
