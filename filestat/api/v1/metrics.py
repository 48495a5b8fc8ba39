"""Scrape endpoint serving the Prometheus text exposition.

Each request triggers one synchronous walk of every configured tree.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest

from filestat.services.metrics.instance import get_metrics_registry


def get_registry() -> Optional[CollectorRegistry]:
    """FastAPI dependency for registry injection."""
    return get_metrics_registry()


def scrape_metrics(registry: Optional[CollectorRegistry] = Depends(get_registry)) -> Response:
    """Collect every file statistic and render it in the Prometheus text format.

    Declared as a plain function so FastAPI runs the filesystem walk in its
    worker thread pool instead of the event loop.

    Raises:
        HTTPException: 503 if no files collector has been configured
    """
    if registry is None:
        raise HTTPException(
            status_code=503,
            detail="Files collector is not configured."
        )
    return Response(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)


def build_metrics_router(metrics_path: str) -> APIRouter:
    """Create the router exposing the scrape endpoint at ``metrics_path``."""
    router = APIRouter(tags=["metrics"])
    router.add_api_route(metrics_path, scrape_metrics, methods=["GET"], include_in_schema=False)
    return router
