"""Service layer of the Tracksim data simulator."""

from .aggregation import AggregationLayer, SourceFeed
from .entity_store import EntityStore
from .factory import EntityFactory
from .publication import (
    HttpPublicationSink,
    LoggingPublicationSink,
    NullPublicationSink,
    PublicationQueue,
    PublicationSink,
    build_sink,
)
from .simulation import SimulationRunner, SimulationRuntime
from .trajectory import PopulationFullError, TrajectoryEngine

__all__ = [
    "AggregationLayer",
    "EntityFactory",
    "EntityStore",
    "HttpPublicationSink",
    "LoggingPublicationSink",
    "NullPublicationSink",
    "PopulationFullError",
    "PublicationQueue",
    "PublicationSink",
    "SimulationRunner",
    "SimulationRuntime",
    "SourceFeed",
    "TrajectoryEngine",
    "build_sink",
]
