from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from filestat.core.config import settings
from filestat.services.metrics.instance import get_files_collector
from filestat.services.metrics.models import ExporterStatusModel, TreeStatusModel

router = APIRouter()

INDEX_HTML = """<html>
  <head><title>{title}</title></head>
  <body>
    <h1>{title}</h1>
    <p><a href="{metrics_path}">Metrics</a></p>
  </body>
</html>
"""


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def index(request: Request):
    """Landing page linking to the metrics path"""
    return INDEX_HTML.format(title=settings.PROJECT_NAME, metrics_path=request.app.state.metrics_path)


@router.get("/status", response_model=ExporterStatusModel)
async def get_status(request: Request):
    """Exporter status endpoint"""
    collector = get_files_collector()
    trees = []
    metric_names = []
    if collector is not None:
        metric_names = [descriptor.name for descriptor in collector.descriptors]
        trees = [
            TreeStatusModel(
                tree_name=name,
                collector_count=len(tree.collectors),
                pattern_count=sum(len(leaf.patterns) for leaf in tree.collectors),
            )
            for name, tree in collector.trees.items()
        ]

    return ExporterStatusModel(
        version=settings.VERSION,
        metrics_path=request.app.state.metrics_path,
        collector_ready=collector is not None,
        metric_names=metric_names,
        trees=trees,
    )
