from __future__ import annotations

import contextlib
import logging
import time

from fastapi import FastAPI, Request

from app.api import api_router
from app.config import settings
from app.services.simulation import SimulationRuntime

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger("tracksim")


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    """Own the simulation runtime for the lifetime of the application."""

    runtime = SimulationRuntime(settings)
    app.state.runtime = runtime
    await runtime.startup()
    logger.info(
        "Tracksim runtime ready (env=%s, publish_mode=%s, autostart=%s)",
        settings.tracksim_env,
        settings.publish_mode,
        settings.simulation_autostart,
    )

    try:
        yield
    finally:
        await runtime.shutdown()
        app.state.runtime = None
        logger.info("Tracksim runtime shut down")


app = FastAPI(title="Tracksim Data Simulator", lifespan=lifespan)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log basic request information for observability."""

    start_time = time.time()
    response = await call_next(request)
    duration_ms = (time.time() - start_time) * 1000
    logger.info(
        "HTTP %s %s -> %s (%.2f ms)",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response


app.include_router(api_router)


@app.get("/", summary="Root")
def read_root() -> dict[str, str]:
    """Basic root endpoint for quick verification."""

    return {"message": "Tracksim data simulator is running"}
