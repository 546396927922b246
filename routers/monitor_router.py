"""
Monitor Router
Host metrics for the admin page (/api/monitor/stats)
"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from settings import settings
from system_monitor import collect_stats

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/monitor", tags=["System Monitor"])


@router.get("/stats")
def get_monitor_stats():
    """
    CPU load, memory, real disks, Docker containers and OS info.

    Docker failures only empty the `docker` list; anything else is a 500.
    """
    try:
        return collect_stats(
            min_disk_bytes=settings.monitor.min_disk_bytes,
            include_docker=settings.monitor.docker_enabled,
            docker_timeout=settings.monitor.docker_timeout_seconds,
        )
    except Exception as e:
        logger.error(f"Monitor stats failed: {e}")
        return JSONResponse(status_code=500, content={"error": str(e)})
