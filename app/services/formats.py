"""Provider-specific payload shapes for the mock source endpoints.

Each serializer turns a list of (possibly noised) entity copies into the
JSON document the corresponding real provider would return. Metadata that
is not part of ground truth (ETAs, rate of turn, receiver quality fields)
is re-rolled on every call.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import random
from typing import Any, Callable, Optional, Sequence

from app.domain.entities import Aircraft, Vessel
from app.domain.reference import FLAG_STATES, NAV_STATUS_CODES

Payload = dict[str, Any]
Serializer = Callable[[Sequence[Any], random.Random, datetime], Payload]

_COUNTRY_BY_FLAG = {flag.code: flag.country for flag in FLAG_STATES}


def _eta(rng: random.Random, now: datetime, max_days: int) -> datetime:
    return now + timedelta(days=rng.randint(1, max_days), minutes=rng.randint(0, 1439))


def _flightradar24(aircraft: Sequence[Aircraft], rng: random.Random, now: datetime) -> Payload:
    payload: Payload = {"full_count": len(aircraft), "version": 4}
    stamp = int(now.timestamp())
    for item in aircraft:
        payload[item.hex_ident] = [
            item.hex_ident,
            round(item.latitude, 4),
            round(item.longitude, 4),
            round(item.heading),
            round(item.altitude),
            round(item.speed),
            item.squawk,
            "T-MLAT",
            item.aircraft_type,
            item.registration,
            stamp - rng.randint(0, 5),
            item.origin,
            item.destination,
            item.callsign,
            item.altitude < 100,
            round(item.vertical_speed),
            item.callsign,
        ]
    return payload


def _adsbexchange(aircraft: Sequence[Aircraft], rng: random.Random, now: datetime) -> Payload:
    return {
        "now": now.timestamp(),
        "total": len(aircraft),
        "aircraft": [
            {
                "hex": item.hex_ident.lower(),
                "flight": item.callsign.ljust(8),
                "r": item.registration,
                "t": item.aircraft_type,
                "lat": round(item.latitude, 6),
                "lon": round(item.longitude, 6),
                "alt_baro": round(item.altitude),
                "gs": round(item.speed, 1),
                "track": round(item.heading, 2),
                "baro_rate": round(item.vertical_speed),
                "squawk": item.squawk,
                "emergency": "none",
                "category": "A3",
                "nav_qnh": round(rng.uniform(1008.0, 1018.0), 1),
                "nav_altitude_mcp": round(item.cruise_altitude, -2),
                "nav_heading": round(item.heading, 1),
                "nic": rng.choice((7, 8, 9)),
                "rc": rng.choice((75, 186, 370)),
                "seen_pos": round(rng.uniform(0.1, 5.0), 1),
                "version": 2,
                "nac_p": rng.choice((8, 9, 10)),
                "sil": 3,
                "sil_type": "perhour",
            }
            for item in aircraft
        ],
    }


def _marinetraffic(vessels: Sequence[Vessel], rng: random.Random, now: datetime) -> Payload:
    return {
        "data": [
            {
                "MMSI": item.mmsi,
                "LAT": round(item.latitude, 5),
                "LON": round(item.longitude, 5),
                "SPEED": round(item.speed * 10),
                "COURSE": round(item.course),
                "HEADING": round(item.course),
                "STATUS": NAV_STATUS_CODES.get(item.nav_status, 15),
                "DRAUGHT": round(item.draught * 10),
                "SHIPNAME": item.name,
                "SHIPTYPE": item.vessel_type,
                "FLAG": item.flag,
                "LENGTH": item.length,
                "WIDTH": item.width,
                "DESTINATION": item.destination,
                "ETA": _eta(rng, now, 5).strftime("%m-%d %H:%M"),
                "TIMESTAMP": now.strftime("%Y-%m-%dT%H:%M:%S"),
            }
            for item in vessels
        ],
        "meta": {"total": len(vessels), "last_update": now.isoformat()},
    }


def _vesselfinder(vessels: Sequence[Vessel], rng: random.Random, now: datetime) -> Payload:
    vessel_rows = []
    for item in vessels:
        bow = round(item.length * rng.uniform(0.6, 0.85))
        port_side = item.width // 2
        vessel_rows.append(
            {
                "mmsi": item.mmsi,
                "lat": round(item.latitude, 5),
                "lng": round(item.longitude, 5),
                "sog": round(item.speed, 1),
                "cog": round(item.course, 1),
                "rot": round(rng.uniform(-5.0, 5.0), 1),
                "heading": round(item.course),
                "navstat": NAV_STATUS_CODES.get(item.nav_status, 15),
                "imo": item.imo,
                "name": item.name,
                "callsign": item.callsign,
                "type": item.vessel_type,
                "a": bow,
                "b": item.length - bow,
                "c": port_side,
                "d": item.width - port_side,
                "draught": round(item.draught, 1),
                "dest": item.destination,
                "eta": int(_eta(rng, now, 5).timestamp()),
                "country": _COUNTRY_BY_FLAG.get(item.flag, item.flag),
            }
        )
    return {"vessels": vessel_rows}


def _chinaports(vessels: Sequence[Vessel], rng: random.Random, now: datetime) -> Payload:
    return {
        "data": [
            {
                "mmsi": item.mmsi,
                "latitude": round(item.latitude, 6),
                "longitude": round(item.longitude, 6),
                "speed": round(item.speed, 1),
                "course": round(item.course, 1),
                "heading": round(item.course),
                "navStatus": item.nav_status,
                "vesselName": item.name,
                "vesselType": item.vessel_type,
                "imo": item.imo,
                "callsign": item.callsign,
                "flag": item.flag,
                "length": item.length,
                "width": item.width,
                "draft": round(item.draught, 1),
                "destination": item.destination,
                "eta": _eta(rng, now, 3).strftime("%Y-%m-%d %H:%M:%S"),
            }
            for item in vessels
        ]
    }


def _marinetrafficv2(vessels: Sequence[Vessel], rng: random.Random, now: datetime) -> Payload:
    return {
        "data": [
            {
                "mmsi": item.mmsi,
                "lat": round(item.latitude, 5),
                "lon": round(item.longitude, 5),
                "speed": round(item.speed, 1),
                "course": round(item.course, 1),
                "heading": round(item.course),
                "navStatus": item.nav_status,
                "shipName": item.name,
                "shipType": item.vessel_type,
                "imo": item.imo,
                "callSign": item.callsign,
                "flag": item.flag,
                "length": item.length,
                "width": item.width,
                "draught": round(item.draught, 1),
                "destination": item.destination,
                "eta": _eta(rng, now, 4).strftime("%Y-%m-%d %H:%M"),
                "lastUpdate": now.strftime("%Y-%m-%d %H:%M:%S"),
            }
            for item in vessels
        ]
    }


SERIALIZERS: dict[str, Serializer] = {
    "flightradar24": _flightradar24,
    "adsbexchange": _adsbexchange,
    "marinetraffic": _marinetraffic,
    "vesselfinder": _vesselfinder,
    "chinaports": _chinaports,
    "marinetrafficv2": _marinetrafficv2,
}


def serialize(
    wire_format: str,
    readings: Sequence[Any],
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> Payload:
    """Render ``readings`` in the named provider shape.

    Raises ``KeyError`` for an unknown format.
    """

    serializer = SERIALIZERS[wire_format]
    return serializer(readings, rng or random.Random(), now or datetime.now(tz=timezone.utc))


__all__ = ["Payload", "SERIALIZERS", "serialize"]
