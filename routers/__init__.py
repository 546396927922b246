"""
╔═══════════════════════════════════════════════════════════════════════════════╗
║                         ROUTERS PACKAGE                                        ║
╠═══════════════════════════════════════════════════════════════════════════════╣
║  ┌─────────────────────────┬───────────────────────────────────────────────┐   ║
║  │ Router                  │ Endpoints                                     │   ║
║  ├─────────────────────────┼───────────────────────────────────────────────┤   ║
║  │ ranking_router          │ /api/ranking, /api/ranking/calculate          │   ║
║  │ routing_router          │ /api/routes/optimize                          │   ║
║  │ monitor_router          │ /api/monitor/stats                            │   ║
║  │ storage_router          │ /storage/{resource}, /storage/settings/{key}  │   ║
║  └─────────────────────────┴───────────────────────────────────────────────┘   ║
╚═══════════════════════════════════════════════════════════════════════════════╝
"""

from .monitor_router import router as monitor_router
from .ranking_router import router as ranking_router
from .routing_router import router as routing_router
from .storage_router import router as storage_router

__all__ = [
    "monitor_router",
    "ranking_router",
    "routing_router",
    "storage_router",
    "include_all_routers",
]


def include_all_routers(app):
    """Include all routers in the FastAPI app."""
    app.include_router(ranking_router)  # /api/ranking/*
    app.include_router(routing_router)  # /api/routes/*
    app.include_router(monitor_router)  # /api/monitor/*
    app.include_router(storage_router)  # /storage/*
