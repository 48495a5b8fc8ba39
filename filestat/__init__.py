"""File status exporter: file statistics served as Prometheus gauges."""

__version__ = "1.3.0"
