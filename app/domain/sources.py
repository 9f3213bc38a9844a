"""Profiles describing each simulated upstream data provider."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from app.domain.entities import EntityKind
from app.domain.geo import BoundingBox


@dataclass(frozen=True)
class SourceProfile:
    """Fidelity, cadence and wire format of one simulated provider.

    ``quality`` is the probability that a surviving reading is returned
    un-degraded; ``error_rate`` is the probability that a reading is dropped.
    Noise amplitudes are multiplied by ``(1 - quality) * noise_factor``.
    """

    name: str
    kind: EntityKind
    quality: float
    error_rate: float
    priority: int
    coverage: str
    update_interval: float
    wire_format: str
    region: Optional[BoundingBox] = None
    noise_factor: float = 1.0
    position_noise_deg: float = 0.05
    speed_noise_kt: float = 20.0
    course_noise_deg: float = 15.0

    def __post_init__(self) -> None:
        if not 0.0 <= self.quality <= 1.0:
            raise ValueError(f"{self.name}: quality must be within [0, 1]")
        if not 0.0 <= self.error_rate <= 1.0:
            raise ValueError(f"{self.name}: error_rate must be within [0, 1]")
        if self.update_interval <= 0:
            raise ValueError(f"{self.name}: update_interval must be positive")
        if min(
            self.noise_factor,
            self.position_noise_deg,
            self.speed_noise_kt,
            self.course_noise_deg,
        ) < 0:
            raise ValueError(f"{self.name}: noise coefficients must be non-negative")

    @property
    def noise_scale(self) -> float:
        return (1.0 - self.quality) * self.noise_factor


DEFAULT_SOURCE_PROFILES: tuple[SourceProfile, ...] = (
    SourceProfile(
        name="flightradar24",
        kind=EntityKind.AIRCRAFT,
        quality=0.95,
        error_rate=0.02,
        priority=1,
        coverage="global",
        update_interval=30.0,
        wire_format="flightradar24",
    ),
    SourceProfile(
        name="adsbexchange",
        kind=EntityKind.AIRCRAFT,
        quality=0.88,
        error_rate=0.05,
        priority=2,
        coverage="community",
        update_interval=30.0,
        wire_format="adsbexchange",
    ),
    SourceProfile(
        name="marinetraffic",
        kind=EntityKind.VESSEL,
        quality=0.92,
        error_rate=0.03,
        priority=1,
        coverage="global",
        update_interval=30.0,
        wire_format="marinetraffic",
        position_noise_deg=0.02,
        speed_noise_kt=3.0,
    ),
    SourceProfile(
        name="vesselfinder",
        kind=EntityKind.VESSEL,
        quality=0.87,
        error_rate=0.06,
        priority=2,
        coverage="commercial",
        update_interval=30.0,
        wire_format="vesselfinder",
        position_noise_deg=0.02,
        speed_noise_kt=3.0,
    ),
    SourceProfile(
        name="chinaports",
        kind=EntityKind.VESSEL,
        quality=0.85,
        error_rate=0.08,
        priority=3,
        coverage="china_sea",
        update_interval=30.0,
        wire_format="chinaports",
        region=BoundingBox(16.0, 25.0, 105.0, 125.0),
        position_noise_deg=0.02,
        speed_noise_kt=3.0,
    ),
    SourceProfile(
        name="marinetrafficv2",
        kind=EntityKind.VESSEL,
        quality=0.89,
        error_rate=0.04,
        priority=4,
        coverage="extended",
        update_interval=30.0,
        wire_format="marinetrafficv2",
        position_noise_deg=0.02,
        speed_noise_kt=3.0,
    ),
)

__all__ = ["DEFAULT_SOURCE_PROFILES", "SourceProfile"]
