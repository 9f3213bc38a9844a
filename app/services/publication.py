"""Delivery of per-tick ground-truth records to downstream consumers."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Iterable, Optional, Protocol

import httpx

from app.config import Settings, settings
from app.models.tracking import AircraftSnapshot
from app.services.trajectory import Snapshot

logger = logging.getLogger("tracksim.publication")

FLIGHT_PUBLISH_PATH = "/api/tracking/publish/flight"
VESSEL_PUBLISH_PATH = "/api/tracking/publish/vessel"
SOURCE_HEADER = {"X-Source": "DATA_SIMULATOR"}


class PublicationSink(Protocol):
    async def publish(self, record: Snapshot) -> bool:
        """Deliver one record; return False when delivery failed."""

    async def aclose(self) -> None:
        ...


class NullPublicationSink:
    """Accept and discard every record."""

    async def publish(self, record: Snapshot) -> bool:
        return True

    async def aclose(self) -> None:
        return None


class LoggingPublicationSink:
    """Write each record to the log instead of a remote service."""

    def __init__(self, level: int = logging.DEBUG) -> None:
        self.level = level

    async def publish(self, record: Snapshot) -> bool:
        logger.log(self.level, "Ground truth %s: %s", type(record).__name__, record.model_dump_json())
        return True

    async def aclose(self) -> None:
        return None


class HttpPublicationSink:
    """POST each record to the tracking backend with exponential backoff."""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        retry_attempts: int | None = None,
        retry_delay: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.publish_base_url).rstrip("/")
        self.timeout = settings.publish_timeout if timeout is None else timeout
        self.retry_attempts = max(1, retry_attempts or settings.publish_retry_attempts)
        self.retry_delay = settings.publish_retry_delay if retry_delay is None else retry_delay
        self.transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self.transport,
                headers=SOURCE_HEADER,
            )
        return self._client

    async def publish(self, record: Snapshot) -> bool:
        path = FLIGHT_PUBLISH_PATH if isinstance(record, AircraftSnapshot) else VESSEL_PUBLISH_PATH
        body = record.model_dump(mode="json")
        client = self._get_client()

        for attempt in range(1, self.retry_attempts + 1):
            try:
                response = await client.post(path, json=body)
                response.raise_for_status()
                return True
            except httpx.TimeoutException as exc:
                logger.warning("Publish to %s timed out (attempt %s): %s", path, attempt, exc)
            except httpx.HTTPStatusError as exc:
                logger.warning(
                    "Publish to %s returned HTTP %s (attempt %s)",
                    path,
                    exc.response.status_code,
                    attempt,
                )
            except httpx.RequestError as exc:
                logger.warning("Publish to %s failed (attempt %s): %s", path, attempt, exc)

            if attempt < self.retry_attempts:
                await asyncio.sleep(self.retry_delay * 2 ** (attempt - 1))
        return False

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def build_sink(
    source_settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> PublicationSink:
    """Pick the sink named by ``PUBLISH_MODE``."""

    current = source_settings or settings
    if current.publish_mode == "http":
        return HttpPublicationSink(
            base_url=current.publish_base_url,
            timeout=current.publish_timeout,
            retry_attempts=current.publish_retry_attempts,
            retry_delay=current.publish_retry_delay,
            transport=transport,
        )
    if current.publish_mode == "none":
        return NullPublicationSink()
    return LoggingPublicationSink()


class PublicationQueue:
    """Bounded buffer between the tick loops and a publication sink.

    ``submit`` never blocks: when the buffer is full the oldest pending
    record is discarded and counted. A single worker task drains the
    buffer into the sink.
    """

    def __init__(self, sink: PublicationSink, maxsize: int = 10000) -> None:
        if maxsize <= 0:
            raise ValueError("publication queue size must be positive")
        self.sink = sink
        self._queue: asyncio.Queue[Snapshot] = asyncio.Queue(maxsize=maxsize)
        self._worker: Optional[asyncio.Task[None]] = None
        self.published = 0
        self.failed = 0
        self.dropped = 0

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def submit(self, records: Iterable[Snapshot]) -> None:
        for record in records:
            while True:
                try:
                    self._queue.put_nowait(record)
                    break
                except asyncio.QueueFull:
                    self._queue.get_nowait()
                    self._queue.task_done()
                    self.dropped += 1

    async def _drain(self) -> None:
        while True:
            record = await self._queue.get()
            try:
                delivered = await self.sink.publish(record)
            except Exception:
                logger.exception("Publication sink raised while delivering a record")
                delivered = False
            finally:
                self._queue.task_done()
            if delivered:
                self.published += 1
            else:
                self.failed += 1

    def start(self) -> None:
        if self.running:
            return
        self._worker = asyncio.create_task(self._drain(), name="tracksim-publication")

    async def stop(self, timeout: float = 5.0) -> None:
        """Flush pending records (bounded by ``timeout``) and stop the worker."""

        if self._worker is None:
            return
        if not self._worker.done():
            try:
                await asyncio.wait_for(self._queue.join(), timeout=timeout)
            except asyncio.TimeoutError:
                logger.warning(
                    "Publication queue stopped with %s undelivered records", self.pending
                )
        self._worker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._worker
        self._worker = None

    def stats(self) -> dict[str, int]:
        return {
            "published": self.published,
            "failed": self.failed,
            "dropped": self.dropped,
            "pending": self.pending,
        }


__all__ = [
    "FLIGHT_PUBLISH_PATH",
    "HttpPublicationSink",
    "LoggingPublicationSink",
    "NullPublicationSink",
    "PublicationQueue",
    "PublicationSink",
    "VESSEL_PUBLISH_PATH",
    "build_sink",
]
