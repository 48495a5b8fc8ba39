"""File statistics collection engine.

Templater and glob matcher resolve what to visit, the scanner reads file
content, and FilesCollector turns a full walk into Prometheus gauges.
"""

from .registry import DescriptorSet, MetricDescriptor, Sample
from .collector import FileStatCollector, FilesCollector, TreeCollector
from .scanner import ContentScan, scan_content
from .templater import PatternTemplater, TemplateExpansionError
from .instance import get_files_collector, get_metrics_registry, set_files_collector

__all__ = [
    "DescriptorSet",
    "MetricDescriptor",
    "Sample",
    "FileStatCollector",
    "FilesCollector",
    "TreeCollector",
    "ContentScan",
    "scan_content",
    "PatternTemplater",
    "TemplateExpansionError",
    "get_files_collector",
    "get_metrics_registry",
    "set_files_collector",
]
