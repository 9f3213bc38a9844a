"""Great-circle kinematics helpers on a spherical Earth."""

from __future__ import annotations

from dataclasses import dataclass
import math

EARTH_RADIUS_M = 6_371_000.0
KNOTS_TO_MPS = 0.514444


@dataclass(frozen=True)
class BoundingBox:
    """Inclusive latitude/longitude rectangle in decimal degrees."""

    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    def __post_init__(self) -> None:
        for name in ("min_lat", "max_lat", "min_lon", "max_lon"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ValueError(f"{name} must be a finite number")
        if not -90.0 <= self.min_lat <= self.max_lat <= 90.0:
            raise ValueError(
                f"invalid latitude range {self.min_lat}..{self.max_lat}"
            )
        if not -180.0 <= self.min_lon <= self.max_lon <= 180.0:
            raise ValueError(
                f"invalid longitude range {self.min_lon}..{self.max_lon}"
            )

    def contains(self, lat: float, lon: float) -> bool:
        return in_bounds(lat, lon, self)

    def intersection(self, other: "BoundingBox") -> "BoundingBox | None":
        """Return the overlapping rectangle, or None when disjoint."""

        min_lat = max(self.min_lat, other.min_lat)
        max_lat = min(self.max_lat, other.max_lat)
        min_lon = max(self.min_lon, other.min_lon)
        max_lon = min(self.max_lon, other.max_lon)
        if min_lat > max_lat or min_lon > max_lon:
            return None
        return BoundingBox(min_lat, max_lat, min_lon, max_lon)

    @property
    def center(self) -> tuple[float, float]:
        return (self.min_lat + self.max_lat) / 2, (self.min_lon + self.max_lon) / 2

    def as_dict(self) -> dict[str, float]:
        return {
            "min_lat": self.min_lat,
            "max_lat": self.max_lat,
            "min_lon": self.min_lon,
            "max_lon": self.max_lon,
        }

    @classmethod
    def parse(cls, raw: str) -> "BoundingBox":
        """Parse ``minLat,maxLat,minLon,maxLon`` into a bounding box.

        Raises ``ValueError`` for anything that is not four finite numbers
        describing a valid, non-inverted rectangle.
        """

        parts = [part.strip() for part in raw.split(",")]
        if len(parts) != 4:
            raise ValueError(
                "bounds must have four comma-separated values: minLat,maxLat,minLon,maxLon"
            )
        try:
            min_lat, max_lat, min_lon, max_lon = (float(part) for part in parts)
        except ValueError as exc:
            raise ValueError(f"bounds contain a non-numeric value: {raw!r}") from exc
        return cls(min_lat, max_lat, min_lon, max_lon)


def normalize_heading(degrees: float) -> float:
    """Wrap an angle into [0, 360)."""

    wrapped = math.fmod(degrees, 360.0)
    if wrapped < 0:
        wrapped += 360.0
    # fmod of a tiny negative value can round up to exactly 360.0
    if wrapped >= 360.0:
        wrapped = 0.0
    return wrapped


def heading_delta(current: float, target: float) -> float:
    """Shortest signed turn from ``current`` to ``target`` in (-180, 180]."""

    delta = normalize_heading(target - current)
    if delta > 180.0:
        delta -= 360.0
    return delta


def _normalize_longitude(lon: float) -> float:
    return normalize_heading(lon + 180.0) - 180.0


def advance(
    lat: float,
    lon: float,
    speed_knots: float,
    heading_deg: float,
    dt_seconds: float,
) -> tuple[float, float]:
    """Move a point along a great circle for ``dt_seconds`` at constant speed."""

    distance = speed_knots * KNOTS_TO_MPS * dt_seconds
    angular = distance / EARTH_RADIUS_M
    heading = math.radians(heading_deg)
    lat1 = math.radians(lat)
    lon1 = math.radians(lon)

    sin_lat2 = math.sin(lat1) * math.cos(angular) + math.cos(lat1) * math.sin(
        angular
    ) * math.cos(heading)
    lat2 = math.asin(max(-1.0, min(1.0, sin_lat2)))
    lon2 = lon1 + math.atan2(
        math.sin(heading) * math.sin(angular) * math.cos(lat1),
        math.cos(angular) - math.sin(lat1) * math.sin(lat2),
    )
    return math.degrees(lat2), _normalize_longitude(math.degrees(lon2))


def bearing_to(from_lat: float, from_lon: float, to_lat: float, to_lon: float) -> float:
    """Initial great-circle bearing in [0, 360)."""

    lat1 = math.radians(from_lat)
    lat2 = math.radians(to_lat)
    dlon = math.radians(to_lon - from_lon)
    y = math.sin(dlon) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(dlon)
    return normalize_heading(math.degrees(math.atan2(y, x)))


def _central_angle(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = phi2 - phi1
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    return 2 * math.asin(min(1.0, math.sqrt(a)))


def distance_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine great-circle distance in meters."""

    return EARTH_RADIUS_M * _central_angle(lat1, lon1, lat2, lon2)


def distance_deg(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance expressed as a central angle in degrees."""

    return math.degrees(_central_angle(lat1, lon1, lat2, lon2))


def in_bounds(lat: float, lon: float, envelope: BoundingBox) -> bool:
    return (
        envelope.min_lat <= lat <= envelope.max_lat
        and envelope.min_lon <= lon <= envelope.max_lon
    )


__all__ = [
    "BoundingBox",
    "EARTH_RADIUS_M",
    "KNOTS_TO_MPS",
    "advance",
    "bearing_to",
    "distance_deg",
    "distance_m",
    "heading_delta",
    "in_bounds",
    "normalize_heading",
]
