"""Module-level singleton accessor for the files collector.

The collector is built once at startup from the merged configuration and
shared read-only by every scrape request.
"""

from typing import Optional

from prometheus_client import CollectorRegistry

from .collector import FilesCollector

_collector: Optional[FilesCollector] = None
_registry: Optional[CollectorRegistry] = None


def get_files_collector() -> Optional[FilesCollector]:
    """Get the active files collector, None until startup has configured one."""
    return _collector


def get_metrics_registry() -> Optional[CollectorRegistry]:
    """Get the registry the active files collector is registered in."""
    return _registry


def set_files_collector(collector: Optional[FilesCollector]) -> Optional[CollectorRegistry]:
    """Replace the active files collector.

    A fresh registry is created for each collector so that descriptors of a
    previous configuration never leak into the exposition.

    Args:
        collector: The collector to expose, or None to clear

    Returns:
        The registry now serving the collector (None when cleared)
    """
    global _collector, _registry
    _collector = collector
    if collector is None:
        _registry = None
    else:
        _registry = CollectorRegistry()
        _registry.register(collector)
    return _registry
