"""Noisy, provider-shaped views of the ground-truth population."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
import random
from threading import Lock
import time
from typing import Any, Callable, Optional

from app.config import SimulationConfig
from app.domain.entities import Aircraft, Entity, EntityKind
from app.domain.geo import BoundingBox, in_bounds, normalize_heading
from app.domain.sources import SourceProfile
from app.services.entity_store import EntityStore
from app.services.formats import Payload, serialize

logger = logging.getLogger("tracksim.aggregation")


class SourceFeed:
    """One simulated upstream provider over the shared entity store.

    The feed keeps a ground-truth view that is refreshed on the provider's
    cadence (or lazily on first query). Every query drops and degrades
    readings independently, so two polls of the same view differ.
    """

    def __init__(
        self,
        profile: SourceProfile,
        store: EntityStore,
        envelope: BoundingBox,
        *,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.profile = profile
        self.store = store
        self.envelope = envelope
        self.rng = rng or random.Random()
        self._clock = clock
        self._lock = Lock()
        self._view: Optional[list[Entity]] = None
        self.last_refresh: Optional[float] = None
        self.polls = 0
        self.returned = 0
        self.dropped = 0
        self.degraded = 0

    @property
    def name(self) -> str:
        return self.profile.name

    def refresh(self) -> int:
        """Re-snapshot the store, restricted to the provider's region."""

        region = self.profile.region
        view = [
            entity
            for entity in self.store.snapshot(self.profile.kind)
            if region is None or in_bounds(entity.latitude, entity.longitude, region)
        ]
        with self._lock:
            self._view = view
            self.last_refresh = self._clock()
        logger.debug("Refreshed %s view with %s entities", self.name, len(view))
        return len(view)

    def _degrade(self, reading: Entity) -> Entity:
        profile = self.profile
        scale = profile.noise_scale
        position = scale * profile.position_noise_deg
        speed = scale * profile.speed_noise_kt
        course = scale * profile.course_noise_deg
        rng = self.rng

        reading.latitude += rng.uniform(-position, position)
        reading.longitude += rng.uniform(-position, position)
        reading.speed = max(0.0, reading.speed + rng.uniform(-speed, speed))
        if isinstance(reading, Aircraft):
            reading.heading = normalize_heading(reading.heading + rng.uniform(-course, course))
        else:
            reading.course = normalize_heading(reading.course + rng.uniform(-course, course))
        return reading

    def sample(self, bounds: Optional[BoundingBox] = None) -> list[Entity]:
        """Return the readings a single poll would see, before serialization.

        ``bounds`` filters on ground-truth position; without it the global
        envelope applies.
        """

        with self._lock:
            view = self._view
        if view is None:
            self.refresh()
            with self._lock:
                view = self._view or []

        area = bounds or self.envelope
        readings: list[Entity] = []
        dropped = degraded = 0
        with self._lock:
            for entity in view:
                if not in_bounds(entity.latitude, entity.longitude, area):
                    continue
                if self.rng.random() < self.profile.error_rate:
                    dropped += 1
                    continue
                reading = entity.copy()
                if self.rng.random() >= self.profile.quality:
                    self._degrade(reading)
                    degraded += 1
                readings.append(reading)
            self.polls += 1
            self.returned += len(readings)
            self.dropped += dropped
            self.degraded += degraded
        return readings

    def query(self, bounds: Optional[BoundingBox] = None) -> Payload:
        readings = self.sample(bounds)
        return serialize(self.profile.wire_format, readings, self.rng)

    def stats(self) -> dict[str, Any]:
        profile = self.profile
        with self._lock:
            last_refresh = (
                datetime.fromtimestamp(self.last_refresh, tz=timezone.utc).isoformat()
                if self.last_refresh is not None
                else None
            )
            return {
                "name": profile.name,
                "kind": profile.kind.value,
                "quality": profile.quality,
                "error_rate": profile.error_rate,
                "priority": profile.priority,
                "coverage": profile.coverage,
                "update_interval": profile.update_interval,
                "region": profile.region.as_dict() if profile.region else None,
                "view_size": len(self._view) if self._view is not None else 0,
                "polls": self.polls,
                "returned": self.returned,
                "dropped": self.dropped,
                "degraded": self.degraded,
                "last_refresh": last_refresh,
            }


class AggregationLayer:
    """Registry of every configured source feed."""

    def __init__(
        self,
        store: EntityStore,
        config: SimulationConfig,
        *,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        rng = rng or random.Random()
        self._feeds = {
            profile.name: SourceFeed(
                profile,
                store,
                config.envelope,
                rng=random.Random(rng.random()),
                clock=clock,
            )
            for profile in config.sources
        }

    def feed(self, name: str) -> SourceFeed:
        """Return the named feed; unknown names raise ``KeyError``."""

        return self._feeds[name]

    def feeds(self, kind: EntityKind | None = None) -> list[SourceFeed]:
        return [
            feed
            for feed in self._feeds.values()
            if kind is None or feed.profile.kind is kind
        ]

    def names(self) -> list[str]:
        return list(self._feeds)

    def refresh_all(self) -> None:
        for feed in self._feeds.values():
            feed.refresh()

    def stats(self) -> dict[str, dict[str, Any]]:
        return {name: feed.stats() for name, feed in self._feeds.items()}


__all__ = ["AggregationLayer", "SourceFeed"]
