"""Domain types for the traffic simulator."""

from .entities import Aircraft, Entity, EntityKind, FlightPhase, Vessel
from .geo import BoundingBox
from .sources import DEFAULT_SOURCE_PROFILES, SourceProfile

__all__ = [
    "Aircraft",
    "BoundingBox",
    "DEFAULT_SOURCE_PROFILES",
    "Entity",
    "EntityKind",
    "FlightPhase",
    "SourceProfile",
    "Vessel",
]
