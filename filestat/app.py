from contextlib import asynccontextmanager

from fastapi import FastAPI

from filestat.api.v1 import build_metrics_router, system_router
from filestat.core.config import DEFAULT_METRICS_PATH, settings
from filestat.core.logging_config import get_logger
from filestat.services.metrics.instance import get_files_collector

logger = get_logger("filestat")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    collector = get_files_collector()
    if collector is None:
        logger.warning("No files collector configured, scrapes will be refused")
    else:
        logger.info(f"Collector ready to collect files in {len(collector.trees)} tree(s)")
    logger.info(f"Path to metrics: {app.state.metrics_path}")

    yield

    # Shutdown
    logger.info(f"Stopping {settings.PROJECT_NAME}")


def create_app(metrics_path: str = DEFAULT_METRICS_PATH) -> FastAPI:
    """Build the HTTP surface: index page, status and the scrape endpoint.

    Args:
        metrics_path: Cleaned absolute URL path of the scrape endpoint
    """
    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Prometheus exporter of file statistics",
        version=settings.VERSION,
        lifespan=lifespan,
    )
    app.state.metrics_path = metrics_path

    # scrape route first so it wins if the metrics path is "/"
    app.include_router(build_metrics_router(metrics_path))
    app.include_router(system_router)
    return app
