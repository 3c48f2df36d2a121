"""FastAPI application setup; owns the background poller through the lifespan."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .api import router as api_router
from .components import Components, build_components
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="main")


def create_app(components: Optional[Components] = None) -> FastAPI:
    """Build the app; components are created on start-up unless supplied."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        comps = components or build_components()
        app.state.components = comps
        if comps.settings.enable_poller:
            comps.scheduler.start()
        else:
            logger.info("Background poller disabled (WEATHER_ENABLE_POLLER=false)")
        try:
            yield
        finally:
            comps.scheduler.stop(timeout=5)

    app = FastAPI(title="Weather Monitor", lifespan=lifespan)
    if components is not None:
        app.state.components = components

    @app.get("/health")
    def health():
        """Liveness check."""
        return {"status": "ok"}

    app.include_router(api_router, prefix="/api")
    return app


app = create_app()
