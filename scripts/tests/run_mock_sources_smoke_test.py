#!/usr/bin/env python
"""
Poll every mock provider of a running simulator and print what came back.

Usage (from repo root, with the server running on port 8000):
    python scripts/tests/run_mock_sources_smoke_test.py [base_url]
"""

import asyncio
import sys

import httpx

BASE_URL = "http://localhost:8000"

# Around Ho Chi Minh City
BOUNDS = "10.0,11.5,106.0,107.5"

ROW_KEYS = {
    "adsbexchange": "aircraft",
    "marinetraffic": "data",
    "vesselfinder": "vessels",
    "chinaports": "data",
    "marinetrafficv2": "data",
}


def _count_rows(source: str, payload: dict) -> int:
    if source == "flightradar24":
        return payload.get("full_count", 0)
    return len(payload.get(ROW_KEYS[source], []))


async def main(base_url: str) -> None:
    async with httpx.AsyncClient(base_url=base_url, timeout=10) as client:
        status = (await client.get("/api/status")).json()
        print(f"=== Simulator at {base_url} (running={status['running']}) ===\n")

        if not status["running"]:
            print("Starting simulation...")
            await client.post("/api/simulation/start")

        sources = (await client.get("/api/mock/status")).json()["sources"]
        for name, stats in sources.items():
            everywhere = (await client.get(f"/api/mock/{name}")).json()
            nearby = (await client.get(f"/api/mock/{name}", params={"bounds": BOUNDS})).json()
            print(
                f"{name:<16} kind={stats['kind']:<8} quality={stats['quality']:.2f} "
                f"rows={_count_rows(name, everywhere):>4} near_sgn={_count_rows(name, nearby):>3}"
            )

        print("\nPer-source counters:")
        for name, stats in (await client.get("/api/mock/status")).json()["sources"].items():
            print(
                f"  {name}: polls={stats['polls']} returned={stats['returned']} "
                f"dropped={stats['dropped']} degraded={stats['degraded']}"
            )


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else BASE_URL))
