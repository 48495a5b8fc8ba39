"""Configuration document loading and the three-level merge.

Scopes, narrowest first: pattern group > tree > general (exporter) > command line.
"""

from .errors import ConfigError, NothingToCollectError
from .models import (
    TriState, CollectorMetricConfig, CollectorConfig, TreeConfig, ExporterConfig, ConfigContent
)
from .loader import read_config_file, parse_config
from .merger import cli_defaults, merge_config, iter_file_stat_collectors, generate_collector

__all__ = [
    "ConfigError",
    "NothingToCollectError",
    "TriState",
    "CollectorMetricConfig",
    "CollectorConfig",
    "TreeConfig",
    "ExporterConfig",
    "ConfigContent",
    "read_config_file",
    "parse_config",
    "cli_defaults",
    "merge_config",
    "iter_file_stat_collectors",
    "generate_collector",
]
