import pytest

from app.config import (
    Settings,
    SimulationConfig,
    _get_bool,
    _source_overrides_from_env,
    build_simulation_config,
)
from app.domain.entities import EntityKind
from app.domain.geo import BoundingBox


def test_build_simulation_config_uses_settings():
    config = build_simulation_config(
        Settings(max_flights=12, max_vessels=7, vessel_interval=3.0, source_overrides={})
    )

    assert config.envelope == BoundingBox(8.5, 23.5, 102.0, 109.5)
    assert config.max_population(EntityKind.AIRCRAFT) == 12
    assert config.max_population(EntityKind.VESSEL) == 7
    assert config.interval(EntityKind.VESSEL) == 3.0
    assert len(config.sources) == 6


def test_keyword_overrides_replace_settings():
    config = build_simulation_config(
        Settings(source_overrides={}), flight_interval=0.5, destination_mode=True, max_vessels=None
    )

    assert config.flight_interval == 0.5
    assert config.destination_mode is True
    assert config.max_vessels == Settings().max_vessels


def test_unknown_override_is_rejected():
    with pytest.raises(ValueError):
        build_simulation_config(Settings(source_overrides={}), warp_speed=9)


def test_inverted_envelope_is_rejected():
    with pytest.raises(ValueError):
        build_simulation_config(
            Settings(envelope_min_lat=30.0, envelope_max_lat=10.0, source_overrides={})
        )


@pytest.mark.parametrize(
    "changes",
    [
        {"flight_interval": 0},
        {"max_flights": -1},
        {"altitude_range": (40000.0, 1000.0)},
        {"idle_threshold_seconds": 0},
    ],
)
def test_invalid_simulation_values_are_rejected(changes):
    with pytest.raises(ValueError):
        SimulationConfig(envelope=BoundingBox(0, 1, 0, 1), **changes)


def test_source_overrides_are_applied_and_validated():
    config = build_simulation_config(
        Settings(source_overrides={"chinaports": {"quality": 0.5, "update_interval": 5.0}})
    )

    profile = config.source("chinaports")
    assert profile.quality == 0.5
    assert profile.update_interval == 5.0
    assert profile.region is not None
    with pytest.raises(KeyError):
        config.source("opensky")
    with pytest.raises(ValueError):
        build_simulation_config(Settings(source_overrides={"vesselfinder": {"quality": 1.5}}))


def test_source_overrides_are_read_from_environment(monkeypatch):
    monkeypatch.setenv("VESSELFINDER_ERROR_RATE", "0.2")
    monkeypatch.setenv("FLIGHTRADAR24_QUALITY", "0.7")

    overrides = _source_overrides_from_env()

    assert overrides["vesselfinder"] == {"error_rate": 0.2}
    assert overrides["flightradar24"] == {"quality": 0.7}


def test_get_bool(monkeypatch):
    monkeypatch.setenv("TRACKSIM_FLAG", "Yes")
    assert _get_bool("TRACKSIM_FLAG") is True
    monkeypatch.setenv("TRACKSIM_FLAG", "off")
    assert _get_bool("TRACKSIM_FLAG", default=True) is False
    monkeypatch.delenv("TRACKSIM_FLAG")
    assert _get_bool("TRACKSIM_FLAG", default=True) is True


def test_as_dict_is_serializable():
    config = SimulationConfig(envelope=BoundingBox(8.5, 23.5, 102.0, 109.5))

    data = config.as_dict()

    assert data["envelope"]["max_lon"] == 109.5
    assert data["altitude_range"] == [1000.0, 42000.0]
