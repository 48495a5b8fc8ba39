"""Configuration Merger: resolves command line, general, tree and group scopes.

Every optional field left unset in a narrower scope takes the value of the
nearest enclosing scope. Explicit values, including ``false``, are never
overwritten.
"""

from typing import Iterator, List, Optional, Tuple

from filestat.core.logging_config import get_logger
from filestat.services.metrics.collector import FileStatCollector, FilesCollector

from .errors import NothingToCollectError
from .models import CollectorConfig, CollectorMetricConfig, ConfigContent, TreeConfig, TriState

logger = get_logger(__name__)


def cli_defaults(
    patterns: List[str],
    enable_crc32: bool = False,
    enable_nb_lines: bool = False,
    tree_name: Optional[str] = None,
    tree_root: Optional[str] = None,
) -> TreeConfig:
    """Build the lowest-precedence scope from command line arguments."""
    return TreeConfig(
        patterns=list(patterns),
        enable_crc32_metric=TriState.of(enable_crc32),
        enable_nb_line_metric=TriState.of(enable_nb_lines),
        tree_name=tree_name,
        tree_root=tree_root,
    )


def merge_collector_metrics(collector: CollectorMetricConfig, default: CollectorMetricConfig) -> None:
    collector.enable_crc32_metric = collector.enable_crc32_metric.or_else(default.enable_crc32_metric)
    collector.enable_nb_line_metric = collector.enable_nb_line_metric.or_else(default.enable_nb_line_metric)


def merge_tree_config(tree: TreeConfig, default: TreeConfig) -> None:
    """Fill unset fields of ``tree`` and of its pattern groups from ``default``."""
    merge_collector_metrics(tree, default)
    if tree.tree_name is None and default.tree_name is not None:
        tree.tree_name = default.tree_name
    if tree.tree_root is None and default.tree_root is not None:
        tree.tree_root = default.tree_root

    for collector in tree.files:
        merge_collector_metrics(collector, tree)


def _log_origin(field: str, general_value, default_value) -> None:
    if general_value is not None:
        logger.info(f"Config from general: {field}={general_value}")
    elif default_value is not None:
        logger.info(f"Config from parameter: {field}={default_value}")


def merge_config(file_config: Optional[ConfigContent], defaults: TreeConfig) -> ConfigContent:
    """Merge the decoded document with command line defaults.

    The input document is left untouched; a merged copy is returned.

    Args:
        file_config: Decoded configuration document, None when absent
        defaults: Scope built from command line arguments (see cli_defaults)

    Returns:
        The merged configuration, every pattern group carrying concrete toggles

    Raises:
        NothingToCollectError: If no pattern group remains after merge
    """
    cfg = file_config.model_copy(deep=True) if file_config is not None else ConfigContent()
    general = cfg.exporter

    _log_origin("tree_name", general.tree_name, defaults.tree_name)
    _log_origin("tree_root", general.tree_root or None, defaults.tree_root)
    for field in ("enable_crc32_metric", "enable_nb_line_metric"):
        value: TriState = getattr(general, field)
        _log_origin(field, value.value if value.is_set else None, getattr(defaults, field).value)

    merge_tree_config(general, defaults)

    has_tree_name = general.tree_name is not None
    for tree in general.trees:
        merge_tree_config(tree, general)
        if tree.tree_name is not None:
            has_tree_name = True

    # patterns given on the command line keep the command line toggles
    if defaults.patterns:
        logger.info("Adding collection of patterns from command line")
        general.files.append(CollectorConfig(
            patterns=list(defaults.patterns),
            enable_crc32_metric=defaults.enable_crc32_metric,
            enable_nb_line_metric=defaults.enable_nb_line_metric,
        ))

    # tree labelling is all-or-nothing across the deployment
    if has_tree_name and general.tree_name is None:
        logger.info("Config from default: tree_name=<empty>")
        general.tree_name = ""
        for tree in general.trees:
            if tree.tree_name is None:
                tree.tree_name = ""

    group_count = len(general.files) + sum(len(tree.files) for tree in general.trees)
    if group_count == 0:
        raise NothingToCollectError(
            "filestat_exporter requires a config file with patterns or trees "
            "or at least one argument file to match"
        )

    logger.debug(f"Success config: {cfg.model_dump(mode='json')}")
    return cfg


def _create_file_stat_collector(tree: TreeConfig, group: CollectorConfig) -> FileStatCollector:
    return FileStatCollector(
        patterns=tuple(group.patterns) + tuple(tree.patterns),
        tree_root=tree.tree_root or "",
        enable_crc32=group.enable_crc32_metric.resolve(),
        enable_nb_lines=group.enable_nb_line_metric.resolve(),
        labels=(tree.tree_name,) if tree.tree_name is not None else (),
    )


def iter_file_stat_collectors(cfg: ConfigContent) -> Iterator[Tuple[str, FileStatCollector]]:
    """Yield (tree key, leaf collector) pairs, general scope first."""
    general = cfg.exporter
    scopes: List[TreeConfig] = [general, *general.trees]
    for tree in scopes:
        for group in tree.files:
            yield tree.tree_name or "", _create_file_stat_collector(tree, group)


def generate_collector(cfg: ConfigContent, namespace: str = "file") -> FilesCollector:
    """Build the process-lifetime collector from a merged configuration.

    Two phases: leaf collectors are resolved first, then the descriptor set is
    fixed from what the leaves request as a whole.
    """
    leaves = list(iter_file_stat_collectors(cfg))
    collector = FilesCollector.from_leaves(
        leaves,
        has_tree=cfg.exporter.tree_name is not None,
        namespace=namespace,
    )
    logger.debug(
        f"Collector creation: crc32 metric {'enabled' if collector.enable_crc32 else 'disabled'}, "
        f"line number metric {'enabled' if collector.enable_nb_lines else 'disabled'}"
    )
    return collector
