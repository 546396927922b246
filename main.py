"""
FastAPI Backend for the Fleet Dashboard

Serves the browser dashboard next to the Traccar tracking platform:
- Driver conduct ranking (Traccar events + stored schedule deviations)
- Route stop sequencing for the route planner
- Host metrics for the admin page
- Flat-file JSON storage for stock, alerts, maintenance, schedules, settings
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from logger_config import log_system_info, setup_logging
from routers import include_all_routers
from settings import settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown"""
    setup_logging(
        level=settings.app.log_level.upper(),
        log_to_file=settings.app.log_to_file,
        log_dir=settings.app.log_dir,
    )
    logger.info(f"Starting Fleet Dashboard API v{settings.app.version}")

    for warning in settings.validate():
        logger.warning(warning)

    try:
        log_system_info(logger)
    except Exception as e:
        logger.warning(f"Could not read system info (non-critical): {e}")

    logger.info(f"Storage directory: {settings.storage.data_dir}")
    logger.info("API ready for connections")

    yield  # App runs here

    logger.info("Shutting down Fleet Dashboard API")


app = FastAPI(
    title="Fleet Dashboard API",
    description="Ranking, route planning, host monitoring and storage for the fleet dashboard",
    version=settings.app.version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.app.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
    max_age=3600,
)
logger.info(f"✅ CORS configured with {len(settings.app.allowed_origins)} allowed origins")

include_all_routers(app)


@app.get("/health")
async def health_check():
    """Liveness probe"""
    return {
        "status": "healthy",
        "version": settings.app.version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.app.debug)
