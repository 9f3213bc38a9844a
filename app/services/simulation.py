"""Scheduling and lifecycle of the simulation loops."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
import logging
import random
import time
from typing import Any, Callable, Optional

from app.config import Settings, SimulationConfig, build_simulation_config, settings
from app.domain.entities import EntityKind
from app.models.tracking import (
    AircraftOverrides,
    AircraftSnapshot,
    VesselOverrides,
    VesselSnapshot,
)
from app.services.aggregation import AggregationLayer, SourceFeed
from app.services.entity_store import EntityStore
from app.services.publication import PublicationQueue, PublicationSink, build_sink
from app.services.trajectory import Snapshot, TrajectoryEngine

logger = logging.getLogger("tracksim.simulation")


class SimulationRunner:
    """Drive category ticks, source refreshes and the idle sweep.

    Every loop waits on a shared stop event, so :meth:`stop` returns only
    after each loop has finished the tick it was running.
    """

    def __init__(
        self,
        engine: TrajectoryEngine,
        aggregation: AggregationLayer,
        publisher: PublicationQueue,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.engine = engine
        self.aggregation = aggregation
        self.publisher = publisher
        self._clock = clock
        self._stop_event: Optional[asyncio.Event] = None
        self._tasks: list[asyncio.Task[None]] = []
        self.started_at: Optional[float] = None
        self.generated = 0

    @property
    def config(self) -> SimulationConfig:
        return self.engine.config

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    async def start(self) -> bool:
        """Seed the population and launch the loops; False if already running."""

        if self.running:
            return False

        self._stop_event = asyncio.Event()
        self.publisher.start()
        self.engine.enforce_caps()
        self._emit(self.engine.populate_initial())
        self.aggregation.refresh_all()

        for kind in EntityKind:
            if self.config.enabled(kind):
                self._tasks.append(
                    asyncio.create_task(self._tick_loop(kind), name=f"tick-{kind.value}")
                )
        for feed in self.aggregation.feeds():
            self._tasks.append(
                asyncio.create_task(self._refresh_loop(feed), name=f"refresh-{feed.name}")
            )
        self._tasks.append(asyncio.create_task(self._sweep_loop(), name="idle-sweep"))

        self.started_at = self._clock()
        logger.info(
            "Simulation started: %s aircraft, %s vessels",
            self.engine.store.count(EntityKind.AIRCRAFT),
            self.engine.store.count(EntityKind.VESSEL),
        )
        return True

    async def stop(self) -> bool:
        """Stop every loop and wait for in-flight ticks; False if not running."""

        if not self.running:
            return False
        assert self._stop_event is not None
        self._stop_event.set()
        tasks, self._tasks = self._tasks, []
        await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("Simulation stopped after %.1f s", self.uptime_seconds)
        self.started_at = None
        return True

    async def _wait(self, seconds: float) -> bool:
        """Sleep up to ``seconds``; True when stop was requested."""

        assert self._stop_event is not None
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return False
        return True

    def _emit(self, records: list[Snapshot]) -> None:
        self.generated += len(records)
        self.publisher.submit(records)

    def force_tick(self, kind: EntityKind, dt: Optional[float] = None) -> list[Snapshot]:
        """Run one tick immediately and publish its records."""

        records = self.engine.tick(kind, dt)
        self._emit(records)
        return records

    async def _tick_loop(self, kind: EntityKind) -> None:
        interval = self.config.interval(kind)
        while not await self._wait(interval):
            try:
                self.force_tick(kind)
            except Exception:
                logger.exception("%s tick failed", kind.value)

    async def _refresh_loop(self, feed: SourceFeed) -> None:
        while not await self._wait(feed.profile.update_interval):
            try:
                feed.refresh()
            except Exception:
                logger.exception("Refreshing source %s failed", feed.name)

    async def _sweep_loop(self) -> None:
        while not await self._wait(self.config.idle_sweep_interval):
            try:
                self.engine.sweep_idle()
            except Exception:
                logger.exception("Idle sweep failed")

    @property
    def uptime_seconds(self) -> float:
        if self.started_at is None:
            return 0.0
        return max(0.0, self._clock() - self.started_at)

    def status(self) -> dict[str, Any]:
        started_at = (
            datetime.fromtimestamp(self.started_at, tz=timezone.utc).isoformat()
            if self.started_at is not None
            else None
        )
        return {
            "running": self.running,
            "started_at": started_at,
            "uptime_seconds": round(self.uptime_seconds, 3),
            "generated": self.generated,
            "entities": self.engine.stats(),
            "publication": self.publisher.stats(),
        }


class SimulationRuntime:
    """Everything one application instance simulates, wired together.

    The store and the publication queue live for the whole process; the
    engine, the aggregation layer and the runner are rebuilt whenever the
    simulation is restarted with new options.
    """

    def __init__(
        self,
        source_settings: Settings | None = None,
        *,
        sink: PublicationSink | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.settings = source_settings or settings
        self.rng = rng or random.Random()
        self._clock = clock
        self.store = EntityStore(clock=clock)
        self.publisher = PublicationQueue(
            sink or build_sink(self.settings), maxsize=self.settings.publish_queue_size
        )
        self._configure(build_simulation_config(self.settings))

    def _configure(self, config: SimulationConfig) -> None:
        self.config = config
        self.engine = TrajectoryEngine(self.store, config, rng=self.rng)
        self.aggregation = AggregationLayer(
            self.store, config, rng=random.Random(self.rng.random()), clock=self._clock
        )
        previous: Optional[SimulationRunner] = getattr(self, "runner", None)
        self.runner = SimulationRunner(
            self.engine, self.aggregation, self.publisher, clock=self._clock
        )
        if previous is not None:
            self.runner.generated = previous.generated

    @property
    def running(self) -> bool:
        return self.runner.running

    async def startup(self) -> None:
        self.publisher.start()
        if self.settings.simulation_autostart:
            await self.runner.start()

    async def shutdown(self) -> None:
        await self.runner.stop()
        await self.publisher.stop()
        await self.publisher.sink.aclose()

    async def start(self, **overrides: Any) -> bool:
        """Start the loops, first applying any configuration overrides.

        Raises ``RuntimeError`` when overrides are given while running and
        ``ValueError`` when they are invalid.
        """

        options = {key: value for key, value in overrides.items() if value is not None}
        if options:
            if self.running:
                raise RuntimeError("stop the simulation before changing its options")
            self._configure(build_simulation_config(self.settings, **options))
            logger.info("Simulation reconfigured: %s", options)
        return await self.runner.start()

    async def stop(self) -> bool:
        return await self.runner.stop()

    def _publish(self, records: list[Snapshot]) -> None:
        self.runner.generated += len(records)
        self.publisher.submit(records)

    def inject_aircraft(self, overrides: AircraftOverrides | None = None) -> AircraftSnapshot:
        record = self.engine.create_aircraft(overrides)
        self._publish([record])
        return record

    def inject_vessel(self, overrides: VesselOverrides | None = None) -> VesselSnapshot:
        record = self.engine.create_vessel(overrides)
        self._publish([record])
        return record

    def airport_scenario(self, airport_code: str) -> list[Snapshot]:
        records = self.engine.airport_scenario(airport_code)
        self._publish(records)
        return records

    def port_scenario(self) -> list[Snapshot]:
        records = self.engine.port_scenario()
        self._publish(records)
        return records

    def status(self) -> dict[str, Any]:
        status = self.runner.status()
        status["env"] = self.settings.tracksim_env
        status["publish_mode"] = self.settings.publish_mode
        return status


__all__ = ["SimulationRunner", "SimulationRuntime"]
