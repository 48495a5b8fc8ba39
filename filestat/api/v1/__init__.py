from .metrics import build_metrics_router
from .system import router as system_router

__all__ = ["build_metrics_router", "system_router"]
