# transit_planner/main.py

from contextlib import asynccontextmanager

from fastapi import FastAPI

from transit_planner.api.v1 import routes_health, routes_planner, routes_stops
from transit_planner.api.v1.dependencies import graph_manager
from transit_planner.core.config import settings
from transit_planner.core.logger import logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Load the transit network once at startup; queries share the snapshot.
    """
    logger.info("Loading transit network from {}", settings.DATA_FILE)
    graph_manager.load_from_files(settings.DATA_FILE, settings.KEY_POINTS_FILE)
    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Transfer-aware trip planning over a city transit network.",
        lifespan=lifespan,
    )

    # Routers
    app.include_router(routes_health.router, prefix="", tags=["health"])
    app.include_router(routes_health.network_router, prefix="", tags=["health"])
    app.include_router(routes_planner.router, prefix="", tags=["planner"])
    app.include_router(routes_stops.router, prefix="", tags=["stops"])

    return app


app = create_app()
