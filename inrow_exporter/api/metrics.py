"""
Exporter API - Landing page, scrape endpoint and liveness check.

The scrape handler is registered by ``create_app`` at the configured
metrics path, so it is not decorated here.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest

from inrow_exporter import EXPORTER_NAME, __version__
from inrow_exporter.config import Settings
from inrow_exporter.deps import get_session_factory, get_settings
from inrow_exporter.services.collectors import InRowCollector
from inrow_exporter.services.snmp import SessionFactory

logger = logging.getLogger(__name__)

router = APIRouter()

PROJECT_URL = "https://github.com/l3akage/apc_inrow_exporter"

LANDING_PAGE = """<html>
<head><title>APC inrow Exporter (Version {version})</title></head>
<body>
<h1>APC inrow Exporter</h1>
<p><a href="{metrics_path}">Metrics</a></p>
<h2>More information:</h2>
<p><a href="{project_url}">{project_name}</a></p>
</body>
</html>"""


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
def landing_page(settings: Settings = Depends(get_settings)):
    return LANDING_PAGE.format(
        version=__version__,
        metrics_path=settings.METRICS_PATH,
        project_url=PROJECT_URL,
        project_name=PROJECT_URL.split("://", 1)[1],
    )


@router.get("/-/healthy")
def healthy():
    """Liveness check. Does not contact any device."""
    return {"status": "healthy", "exporter": EXPORTER_NAME, "version": __version__}


def scrape_metrics(
    request: Request,
    settings: Settings = Depends(get_settings),
    session_factory: SessionFactory = Depends(get_session_factory),
):
    """
    Poll every configured InRow unit and return Prometheus text format.

    A fresh registry is built for every request so nothing carries over
    between scrapes. Unreachable units show up as ``apc_inrow_up 0``.
    """
    registry = CollectorRegistry()
    registry.register(
        InRowCollector.from_settings(settings, request.app.state.descriptors, session_factory)
    )
    return Response(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)
