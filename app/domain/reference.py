"""Static reference tables used to seed plausible traffic."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Location:
    """A named airport or port."""

    code: str
    name: str
    lat: float
    lon: float


@dataclass(frozen=True)
class AircraftType:
    type_code: str
    manufacturer: str
    engines: int
    # Typical cruise band, feet
    cruise_min_ft: float
    cruise_max_ft: float


@dataclass(frozen=True)
class Airline:
    code: str
    name: str
    country: str
    registration_prefix: str


@dataclass(frozen=True)
class VesselType:
    name: str
    min_length_m: int
    max_length_m: int


@dataclass(frozen=True)
class FlagState:
    code: str
    country: str
    # Maritime identification digits, the first three MMSI digits
    mid: int


AIRPORTS: tuple[Location, ...] = (
    Location("SGN", "Tan Son Nhat", 10.8187, 106.6524),
    Location("HAN", "Noi Bai", 21.2214, 105.8077),
    Location("DAD", "Da Nang", 16.0439, 108.1993),
    Location("CXR", "Cam Ranh", 11.9982, 109.2194),
    Location("PQC", "Phu Quoc", 10.1625, 103.9931),
)

PORTS: tuple[Location, ...] = (
    Location("VNSGN", "Ho Chi Minh Port", 10.7500, 106.7500),
    Location("VNHPH", "Hai Phong Port", 20.8650, 106.6838),
    Location("VNDNG", "Da Nang Port", 16.0833, 108.2167),
    Location("VNVUT", "Vung Tau Port", 10.3500, 107.0667),
    Location("VNQNI", "Quy Nhon Port", 13.7667, 109.2333),
)

AIRCRAFT_TYPES: tuple[AircraftType, ...] = (
    AircraftType("B737", "Boeing", 2, 28000, 37000),
    AircraftType("A320", "Airbus", 2, 28000, 37000),
    AircraftType("A321", "Airbus", 2, 28000, 37000),
    AircraftType("B777", "Boeing", 2, 31000, 41000),
    AircraftType("A350", "Airbus", 2, 31000, 41000),
    AircraftType("B787", "Boeing", 2, 31000, 41000),
    AircraftType("ATR72", "ATR", 2, 17000, 25000),
)

AIRLINES: tuple[Airline, ...] = (
    Airline("VN", "Vietnam Airlines", "Vietnam", "VN-A"),
    Airline("VJ", "VietJet Air", "Vietnam", "VN-A"),
    Airline("QH", "Bamboo Airways", "Vietnam", "VN-A"),
    Airline("BL", "Pacific Airlines", "Vietnam", "VN-A"),
    Airline("SQ", "Singapore Airlines", "Singapore", "9V-S"),
    Airline("TG", "Thai Airways", "Thailand", "HS-T"),
    Airline("CX", "Cathay Pacific", "Hong Kong", "B-L"),
    Airline("NH", "All Nippon Airways", "Japan", "JA8"),
    Airline("KE", "Korean Air", "South Korea", "HL7"),
    Airline("OZ", "Asiana Airlines", "South Korea", "HL8"),
)

VESSEL_TYPES: tuple[VesselType, ...] = (
    VesselType("Container Ship", 100, 400),
    VesselType("Bulk Carrier", 150, 350),
    VesselType("Tanker", 200, 400),
    VesselType("Fishing", 20, 100),
    VesselType("Cargo Ship", 100, 300),
    VesselType("Passenger Ship", 50, 350),
)

FLAG_STATES: tuple[FlagState, ...] = (
    FlagState("VN", "Vietnam", 574),
    FlagState("SG", "Singapore", 563),
    FlagState("PA", "Panama", 351),
    FlagState("LR", "Liberia", 636),
    FlagState("MH", "Marshall Islands", 538),
    FlagState("HK", "Hong Kong", 477),
)

SHIP_NAME_PREFIXES = ("HAI PHONG", "SAIGON", "DA NANG", "QUY NHON", "VUNG TAU", "MEKONG")
SHIP_NAME_SUFFIXES = ("STAR", "OCEAN", "WIND", "WAVE", "GLORY", "PRIDE")

NAV_STATUSES = (
    "Under way using engine",
    "At anchor",
    "Moored",
    "Restricted manoeuvrability",
    "Engaged in fishing",
    "Under way sailing",
)

# AIS navigational status codes for the statuses above
NAV_STATUS_CODES = {
    "Under way using engine": 0,
    "At anchor": 1,
    "Moored": 5,
    "Restricted manoeuvrability": 3,
    "Engaged in fishing": 7,
    "Under way sailing": 8,
}


def airport_by_code(code: str) -> Location:
    for airport in AIRPORTS:
        if airport.code == code.upper():
            return airport
    raise ValueError(f"Unknown airport: {code}")


def port_by_code(code: str) -> Location:
    for port in PORTS:
        if port.code == code.upper():
            return port
    raise ValueError(f"Unknown port: {code}")


__all__ = [
    "AIRCRAFT_TYPES",
    "AIRLINES",
    "AIRPORTS",
    "AircraftType",
    "Airline",
    "FLAG_STATES",
    "FlagState",
    "Location",
    "NAV_STATUSES",
    "NAV_STATUS_CODES",
    "PORTS",
    "SHIP_NAME_PREFIXES",
    "SHIP_NAME_SUFFIXES",
    "VESSEL_TYPES",
    "VesselType",
    "airport_by_code",
    "port_by_code",
]
