"""Tree traversal and the Prometheus collector exposing file statistics.

A scrape walks every tree from scratch. Within one tree, identical resolved
patterns are matched once and every file is stat-ed once; a file matched by
several patterns still counts toward each pattern's match number. The sets
used for this are local to a single ``collect_tree`` call.
"""

import os
from dataclasses import dataclass, field
from stat import S_ISDIR
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

from prometheus_client.core import GaugeMetricFamily

from filestat.core.logging_config import get_logger

from .glob_matcher import iter_matches, join_clean, split_pattern
from .registry import DescriptorSet, MetricDescriptor, Sample
from .scanner import scan_content
from .templater import PatternTemplater, TemplateExpansionError

logger = get_logger(__name__)


@dataclass(frozen=True)
class FileStatCollector:
    """Leaf collector with concrete settings, built once from merged config."""
    patterns: Tuple[str, ...]
    tree_root: str = ""
    enable_crc32: bool = False
    enable_nb_lines: bool = False
    labels: Tuple[str, ...] = ()

    @property
    def wants_content(self) -> bool:
        return self.enable_crc32 or self.enable_nb_lines


@dataclass(frozen=True)
class TreeCollector:
    """Ordered leaf collectors sharing one tree name."""
    collectors: Tuple[FileStatCollector, ...] = field(default_factory=tuple)


class FilesCollector:
    """Aggregate collector over all trees.

    Implements the prometheus_client custom collector protocol (``describe`` and
    ``collect``). The engine itself produces plain Sample records through
    ``iter_samples`` so it can be driven and tested without a registry.
    """

    def __init__(
        self,
        descriptors: DescriptorSet,
        trees: Dict[str, TreeCollector],
        templater: Optional[PatternTemplater] = None,
    ):
        self.descriptors = descriptors
        self.trees = trees
        self.templater = templater or PatternTemplater()

    @classmethod
    def from_leaves(
        cls,
        leaves: Iterable[Tuple[str, FileStatCollector]],
        has_tree: bool = False,
        namespace: str = "file",
        templater: Optional[PatternTemplater] = None,
    ) -> "FilesCollector":
        """Group leaf collectors by tree and fix the descriptor set.

        Args:
            leaves: (tree name, leaf collector) pairs in configuration order
            has_tree: Whether the ``tree`` label is present on every metric
            namespace: Prefix of every metric name
            templater: Templater used for roots and patterns
        """
        grouped: Dict[str, List[FileStatCollector]] = {}
        for tree_name, leaf in leaves:
            grouped.setdefault(tree_name, []).append(leaf)

        all_leaves = [leaf for group in grouped.values() for leaf in group]
        descriptors = DescriptorSet.build(
            namespace=namespace,
            has_tree=has_tree,
            enable_crc32=any(leaf.enable_crc32 for leaf in all_leaves),
            enable_nb_lines=any(leaf.enable_nb_lines for leaf in all_leaves),
        )
        trees = {name: TreeCollector(tuple(group)) for name, group in grouped.items()}
        return cls(descriptors, trees, templater)

    @property
    def enable_crc32(self) -> bool:
        return self.descriptors.content_hash_crc32 is not None

    @property
    def enable_nb_lines(self) -> bool:
        return self.descriptors.content_line_number is not None

    def iter_samples(self) -> Iterator[Sample]:
        """Run one full scrape, yielding samples as files are visited."""
        for tree in self.trees.values():
            yield from self.collect_tree(tree)

    def collect_tree(self, tree: TreeCollector) -> Iterator[Sample]:
        pattern_set: Set[str] = set()
        file_set: Dict[str, bool] = {}

        for collector in tree.collectors:
            try:
                tree_root = self.templater.expand(collector.tree_root)
            except TemplateExpansionError as e:
                logger.warning(f"Error applying template on tree root {collector.tree_root}: {e}")
                continue

            if tree_root and not _root_exists(tree_root):
                logger.debug(f"Skip collecting file stats because tree root not found: {tree_root}")
                continue

            for pattern in collector.patterns:
                try:
                    real_pattern = self.templater.expand(pattern)
                except TemplateExpansionError as e:
                    logger.warning(f"Error applying template on file pattern {pattern}: {e}")
                    continue

                # only collect pattern once
                full_pattern = join_clean(tree_root, real_pattern)
                if full_pattern in pattern_set:
                    continue
                pattern_set.add(full_pattern)

                matching_file_nb = 0
                base_path, pattern_part = split_pattern(real_pattern)
                pattern_root = join_clean(tree_root, base_path)

                try:
                    for rel_file_path in iter_matches(pattern_root, pattern_part):
                        real_file_path = join_clean(pattern_root, rel_file_path)
                        file_path = join_clean(base_path, rel_file_path)

                        # only collect files once
                        is_processable = file_set.get(real_file_path)
                        if is_processable is not None:
                            if is_processable:
                                matching_file_nb += 1
                            continue

                        stat = _stat_file(real_file_path)
                        file_set[real_file_path] = stat is not None
                        if stat is None:
                            continue

                        matching_file_nb += 1
                        yield from self._file_samples(file_path, stat, collector.labels)
                        if collector.wants_content:
                            yield from self._content_samples(file_path, real_file_path, collector)
                except (OSError, ValueError) as e:
                    # unreadable directories are skipped by the matcher, only
                    # paths the OS rejects outright (e.g. an embedded NUL) land here
                    logger.debug(f"Error getting matches for glob {pattern}: {e}")

                yield Sample(
                    self.descriptors.glob_match_number,
                    (pattern,) + collector.labels,
                    float(matching_file_nb),
                )

    def _file_samples(self, file_path: str, stat: os.stat_result, labels: Tuple[str, ...]) -> Iterator[Sample]:
        label_values = (file_path,) + labels
        yield Sample(self.descriptors.stat_size_bytes, label_values, float(stat.st_size))
        yield Sample(self.descriptors.stat_modif_time_seconds, label_values, stat.st_mtime_ns / 1e9)

    def _content_samples(self, file_path: str, real_file_path: str, collector: FileStatCollector) -> Iterator[Sample]:
        try:
            scan = scan_content(real_file_path, collector.enable_crc32, collector.enable_nb_lines)
        except OSError as e:
            logger.debug(f"Error reading content of file {real_file_path}: {e}")
            return

        label_values = (file_path,) + collector.labels
        if scan.crc32 is not None:
            yield Sample(self.descriptors.content_hash_crc32, label_values, float(scan.crc32))
        if scan.line_number is not None:
            yield Sample(self.descriptors.content_line_number, label_values, float(scan.line_number))

    def describe(self) -> Iterator[GaugeMetricFamily]:
        for descriptor in self.descriptors:
            yield _family(descriptor)

    def collect(self) -> Iterator[GaugeMetricFamily]:
        families = {descriptor.name: _family(descriptor) for descriptor in self.descriptors}
        for sample in self.iter_samples():
            families[sample.name].add_metric(list(sample.label_values), sample.value)
        yield from families.values()


def _family(descriptor: MetricDescriptor) -> GaugeMetricFamily:
    return GaugeMetricFamily(descriptor.name, descriptor.documentation, labels=list(descriptor.labels))


def _root_exists(tree_root: str) -> bool:
    try:
        os.stat(tree_root)
    except FileNotFoundError:
        return False
    except OSError:
        # other failures surface later, per pattern and per file
        return True
    return True


def _stat_file(real_file_path: str) -> Optional[os.stat_result]:
    """Stat a matched path; directories and failures are not processable."""
    try:
        stat = os.stat(real_file_path)
    except OSError as e:
        logger.debug(f"Error getting file info {real_file_path}: {e}")
        return None
    if S_ISDIR(stat.st_mode):
        return None
    return stat
