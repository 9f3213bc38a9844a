"""Configuration settings for the Tracksim data simulator."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import logging
import os
from typing import Any

from app.domain.entities import EntityKind
from app.domain.geo import BoundingBox
from app.domain.sources import DEFAULT_SOURCE_PROFILES, SourceProfile

logger = logging.getLogger("tracksim.config")

PUBLISH_MODES = {"none", "log", "http"}


def _get_bool(env_var: str, default: bool = False) -> bool:
    """Parse an environment variable into a boolean with a default."""

    value = os.getenv(env_var)
    if value is None:
        return default

    return value.lower() in {"1", "true", "yes", "on"}


def _get_optional_float(env_var: str) -> float | None:
    value = os.getenv(env_var)
    return float(value) if value else None


def _source_overrides_from_env() -> dict[str, dict[str, float]]:
    """Collect ``<SOURCE>_QUALITY`` style overrides for every known source."""

    overrides: dict[str, dict[str, float]] = {}
    for profile in DEFAULT_SOURCE_PROFILES:
        prefix = profile.name.upper()
        values = {
            "quality": _get_optional_float(f"{prefix}_QUALITY"),
            "error_rate": _get_optional_float(f"{prefix}_ERROR_RATE"),
            "update_interval": _get_optional_float(f"{prefix}_UPDATE_INTERVAL"),
        }
        present = {key: value for key, value in values.items() if value is not None}
        if present:
            overrides[profile.name] = present
    return overrides


@dataclass
class Settings:
    """Application configuration loaded from environment variables."""

    tracksim_env: str = os.getenv("TRACKSIM_ENV", "local")
    log_level: str = os.getenv("TRACKSIM_LOG_LEVEL", "INFO")

    # Operating envelope (Vietnam area)
    envelope_min_lat: float = float(os.getenv("ENVELOPE_MIN_LAT", "8.5"))
    envelope_max_lat: float = float(os.getenv("ENVELOPE_MAX_LAT", "23.5"))
    envelope_min_lon: float = float(os.getenv("ENVELOPE_MIN_LON", "102.0"))
    envelope_max_lon: float = float(os.getenv("ENVELOPE_MAX_LON", "109.5"))

    # Simulation
    max_flights: int = int(os.getenv("MAX_FLIGHTS", "100"))
    max_vessels: int = int(os.getenv("MAX_VESSELS", "50"))
    flight_interval: float = float(os.getenv("FLIGHT_SIMULATION_INTERVAL", "1.0"))
    vessel_interval: float = float(os.getenv("VESSEL_SIMULATION_INTERVAL", "2.0"))
    enable_flights: bool = _get_bool("ENABLE_FLIGHTS", default=True)
    enable_vessels: bool = _get_bool("ENABLE_VESSELS", default=True)
    destination_mode: bool = _get_bool("DESTINATION_MODE", default=False)
    idle_threshold_seconds: float = float(os.getenv("IDLE_THRESHOLD_SECONDS", "300"))
    idle_sweep_interval: float = float(os.getenv("IDLE_SWEEP_INTERVAL", "60"))
    simulation_autostart: bool = _get_bool("SIMULATION_AUTOSTART", default=True)

    # Publication of ground-truth deltas
    publish_mode: str = os.getenv("PUBLISH_MODE", "log")
    publish_base_url: str = os.getenv("PUBLISH_BASE_URL", "http://localhost:9090")
    publish_timeout: float = float(os.getenv("PUBLISH_TIMEOUT", "5.0"))
    publish_retry_attempts: int = int(os.getenv("PUBLISH_RETRY_ATTEMPTS", "3"))
    publish_retry_delay: float = float(os.getenv("PUBLISH_RETRY_DELAY", "1.0"))
    publish_queue_size: int = int(os.getenv("PUBLISH_QUEUE_SIZE", "10000"))

    # Per-source quality / error / cadence overrides
    source_overrides: dict[str, dict[str, float]] = field(
        default_factory=_source_overrides_from_env
    )


@dataclass(frozen=True)
class SimulationConfig:
    """Immutable per-run snapshot of everything the core needs."""

    envelope: BoundingBox
    max_flights: int = 100
    max_vessels: int = 50
    flight_interval: float = 1.0
    vessel_interval: float = 2.0
    enable_flights: bool = True
    enable_vessels: bool = True
    destination_mode: bool = False
    idle_threshold_seconds: float = 300.0
    idle_sweep_interval: float = 60.0
    altitude_range: tuple[float, float] = (1000.0, 42000.0)
    flight_speed_range: tuple[float, float] = (150.0, 600.0)
    vessel_speed_range: tuple[float, float] = (0.0, 25.0)
    draught_range: tuple[float, float] = (5.0, 20.0)
    sources: tuple[SourceProfile, ...] = DEFAULT_SOURCE_PROFILES

    def __post_init__(self) -> None:
        if self.max_flights < 0 or self.max_vessels < 0:
            raise ValueError("population caps must be non-negative")
        if self.flight_interval <= 0 or self.vessel_interval <= 0:
            raise ValueError("tick intervals must be positive")
        if self.idle_threshold_seconds <= 0 or self.idle_sweep_interval <= 0:
            raise ValueError("idle threshold and sweep interval must be positive")
        for name in (
            "altitude_range",
            "flight_speed_range",
            "vessel_speed_range",
            "draught_range",
        ):
            low, high = getattr(self, name)
            if low < 0 or low > high:
                raise ValueError(f"{name} must be a non-negative, non-inverted range")
        names = [profile.name for profile in self.sources]
        if len(names) != len(set(names)):
            raise ValueError("source names must be unique")

    def max_population(self, kind: EntityKind) -> int:
        return self.max_flights if kind is EntityKind.AIRCRAFT else self.max_vessels

    def interval(self, kind: EntityKind) -> float:
        return self.flight_interval if kind is EntityKind.AIRCRAFT else self.vessel_interval

    def enabled(self, kind: EntityKind) -> bool:
        return self.enable_flights if kind is EntityKind.AIRCRAFT else self.enable_vessels

    def source(self, name: str) -> SourceProfile:
        for profile in self.sources:
            if profile.name == name:
                return profile
        raise KeyError(name)

    def as_dict(self) -> dict[str, Any]:
        return {
            "envelope": self.envelope.as_dict(),
            "max_flights": self.max_flights,
            "max_vessels": self.max_vessels,
            "flight_interval": self.flight_interval,
            "vessel_interval": self.vessel_interval,
            "enable_flights": self.enable_flights,
            "enable_vessels": self.enable_vessels,
            "destination_mode": self.destination_mode,
            "idle_threshold_seconds": self.idle_threshold_seconds,
            "idle_sweep_interval": self.idle_sweep_interval,
            "altitude_range": list(self.altitude_range),
            "flight_speed_range": list(self.flight_speed_range),
            "vessel_speed_range": list(self.vessel_speed_range),
            "draught_range": list(self.draught_range),
        }


def build_simulation_config(
    source_settings: Settings | None = None, **overrides: Any
) -> SimulationConfig:
    """Validate settings and freeze them into a :class:`SimulationConfig`.

    Keyword overrides (for example from a start request) replace the
    corresponding settings values. Invalid values raise ``ValueError``.
    """

    current = source_settings or settings
    envelope = BoundingBox(
        current.envelope_min_lat,
        current.envelope_max_lat,
        current.envelope_min_lon,
        current.envelope_max_lon,
    )

    profiles = []
    for profile in DEFAULT_SOURCE_PROFILES:
        profile_overrides = current.source_overrides.get(profile.name)
        profiles.append(replace(profile, **profile_overrides) if profile_overrides else profile)

    values: dict[str, Any] = {
        "envelope": envelope,
        "max_flights": current.max_flights,
        "max_vessels": current.max_vessels,
        "flight_interval": current.flight_interval,
        "vessel_interval": current.vessel_interval,
        "enable_flights": current.enable_flights,
        "enable_vessels": current.enable_vessels,
        "destination_mode": current.destination_mode,
        "idle_threshold_seconds": current.idle_threshold_seconds,
        "idle_sweep_interval": current.idle_sweep_interval,
        "sources": tuple(profiles),
    }
    unknown = set(overrides) - set(SimulationConfig.__dataclass_fields__)
    if unknown:
        raise ValueError(f"Unknown simulation options: {', '.join(sorted(unknown))}")
    values.update({key: value for key, value in overrides.items() if value is not None})
    return SimulationConfig(**values)


settings = Settings()

if settings.publish_mode not in PUBLISH_MODES:
    logger.warning(
        "Unknown PUBLISH_MODE %r; falling back to 'log'", settings.publish_mode
    )
    settings.publish_mode = "log"

__all__ = [
    "PUBLISH_MODES",
    "Settings",
    "SimulationConfig",
    "build_simulation_config",
    "settings",
]
