"""In-memory owner of every live flight and vessel."""

from __future__ import annotations

import logging
from threading import RLock
import time
from typing import Callable, Hashable, Optional

from app.domain.entities import Entity, EntityKind

logger = logging.getLogger("tracksim.entity_store")


class EntityStore:
    """Thread-safe mapping of entity id to ground-truth state per kind.

    Every read hands out copies. Writes go through :meth:`create`,
    :meth:`commit` and :meth:`remove`, each of which is atomic with respect
    to the store lock.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._lock = RLock()
        self._entities: dict[EntityKind, dict[int, Entity]] = {
            kind: {} for kind in EntityKind
        }
        self._keys: dict[EntityKind, dict[Hashable, int]] = {
            kind: {} for kind in EntityKind
        }

    def create(self, factory: Callable[[], Entity]) -> Entity:
        """Insert the first factory product whose id and key are both free.

        The factory is called again on every collision; there is no retry
        cap because the identifier space is far larger than any population.
        """

        attempts = 0
        while True:
            attempts += 1
            candidate = factory()
            kind = candidate.kind
            with self._lock:
                if (
                    candidate.id not in self._entities[kind]
                    and candidate.key not in self._keys[kind]
                ):
                    candidate.last_update = self._clock()
                    self._entities[kind][candidate.id] = candidate
                    self._keys[kind][candidate.key] = candidate.id
                    if attempts > 1:
                        logger.debug(
                            "Created %s %s after %s attempts",
                            kind.value,
                            candidate.id,
                            attempts,
                        )
                    return candidate.copy()

    def get(self, kind: EntityKind, entity_id: int) -> Optional[Entity]:
        with self._lock:
            entity = self._entities[kind].get(entity_id)
            return entity.copy() if entity is not None else None

    def find(self, kind: EntityKind, key: Hashable) -> Optional[Entity]:
        """Look up an entity by hex ident (aircraft) or MMSI (vessel)."""

        with self._lock:
            entity_id = self._keys[kind].get(key)
            if entity_id is None:
                return None
            return self._entities[kind][entity_id].copy()

    def snapshot(self, kind: EntityKind) -> list[Entity]:
        with self._lock:
            return [entity.copy() for entity in self._entities[kind].values()]

    def for_each_active(self, kind: EntityKind, fn: Callable[[Entity], None]) -> None:
        """Call ``fn`` with a copy of every active entity of ``kind``.

        The copies are taken up front so ``fn`` may call back into the store.
        """

        for entity in self.snapshot(kind):
            fn(entity)

    def ids(self, kind: EntityKind) -> list[int]:
        with self._lock:
            return list(self._entities[kind])

    def count(self, kind: EntityKind) -> int:
        with self._lock:
            return len(self._entities[kind])

    def commit(self, entity: Entity) -> bool:
        """Replace the live state with ``entity``; False if it was removed."""

        with self._lock:
            entities = self._entities[entity.kind]
            if entity.id not in entities:
                return False
            stored = entity.copy()
            stored.last_update = self._clock()
            entities[entity.id] = stored
            return True

    def remove(self, kind: EntityKind, entity_id: int) -> bool:
        with self._lock:
            entity = self._entities[kind].pop(entity_id, None)
            if entity is None:
                return False
            self._keys[kind].pop(entity.key, None)
            return True

    def evict_idle_older_than(self, seconds: float) -> int:
        """Remove entities whose last update is more than ``seconds`` old."""

        cutoff = self._clock() - seconds
        removed = 0
        with self._lock:
            for kind in EntityKind:
                stale = [
                    entity_id
                    for entity_id, entity in self._entities[kind].items()
                    if entity.last_update < cutoff
                ]
                for entity_id in stale:
                    self.remove(kind, entity_id)
                removed += len(stale)
        if removed:
            logger.info("Evicted %s idle entities", removed)
        return removed

    def clear(self) -> None:
        with self._lock:
            for kind in EntityKind:
                self._entities[kind].clear()
                self._keys[kind].clear()


__all__ = ["EntityStore"]
