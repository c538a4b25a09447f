import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import PlainTextResponse

from inrow_exporter import __version__
from inrow_exporter.api import metrics
from inrow_exporter.config import Settings, get_default_settings
from inrow_exporter.models.descriptors import build_descriptor_table

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the exporter application for the given settings.

    Without settings the process settings are loaded, so the app can also be
    served with `uvicorn --factory inrow_exporter.main:create_app`.
    """
    settings = settings or get_default_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting APC inrow exporter (Version: {__version__})")
        logger.info(f"Polling {len(settings.target_list)} targets: {', '.join(settings.target_list) or '-'}")
        yield
        logger.info("APC inrow exporter shutting down")

    app = FastAPI(
        title="APC InRow Exporter",
        description="Prometheus exporter for APC InRow cooling units",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
    )

    app.state.settings = settings
    # Built once and shared read-only by every scrape
    app.state.descriptors = build_descriptor_table()

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(f"Error while serving {request.url.path}: {exc}", exc_info=exc)
        return PlainTextResponse(
            f"An error has occurred while serving metrics:\n\n{exc}",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    app.include_router(metrics.router)
    app.add_api_route(
        settings.METRICS_PATH,
        metrics.scrape_metrics,
        methods=["GET"],
        include_in_schema=False,
    )
    return app
