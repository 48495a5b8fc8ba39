"""Metric descriptors and the samples emitted during a scrape.

The descriptor set is decided once, when the collector is built: the content
metrics (CRC32 hash, line number) exist only if at least one leaf collector
asks for them. Nothing here changes after construction.
"""

from dataclasses import dataclass
from typing import Iterator, Optional, Tuple


@dataclass(frozen=True)
class MetricOpts:
    subsystem: str
    name: str
    documentation: str


GLOB_MATCH_NUMBER = MetricOpts("glob", "match_number", "Number of files matching pattern")
STAT_SIZE_BYTES = MetricOpts("stat", "size_bytes", "Size of file in bytes")
STAT_MODIF_TIME_SECONDS = MetricOpts("stat", "modif_time_seconds", "Last modification time of file in epoch time")
CONTENT_HASH_CRC32 = MetricOpts("content", "hash_crc32", "CRC32 hash of file content using the IEEE polynomial")
CONTENT_LINE_NUMBER = MetricOpts("content", "line_number", "Number of lines in file")


def build_fq_name(namespace: str, subsystem: str, name: str) -> str:
    """Join the non-empty parts with underscores (namespace_subsystem_name)."""
    return "_".join(part for part in (namespace, subsystem, name) if part)


@dataclass(frozen=True)
class MetricDescriptor:
    """Fully qualified gauge name, help text and ordered label names."""
    name: str
    documentation: str
    labels: Tuple[str, ...]

    @classmethod
    def from_opts(cls, namespace: str, opts: MetricOpts, labels: Tuple[str, ...]) -> "MetricDescriptor":
        return cls(
            name=build_fq_name(namespace, opts.subsystem, opts.name),
            documentation=opts.documentation,
            labels=labels,
        )


@dataclass(frozen=True)
class Sample:
    """One gauge value; never stored beyond the scrape that produced it."""
    descriptor: MetricDescriptor
    label_values: Tuple[str, ...]
    value: float

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def labels(self) -> dict:
        return dict(zip(self.descriptor.labels, self.label_values))


@dataclass(frozen=True)
class DescriptorSet:
    glob_match_number: MetricDescriptor
    stat_size_bytes: MetricDescriptor
    stat_modif_time_seconds: MetricDescriptor
    content_hash_crc32: Optional[MetricDescriptor] = None
    content_line_number: Optional[MetricDescriptor] = None

    @classmethod
    def build(
        cls,
        namespace: str = "file",
        has_tree: bool = False,
        enable_crc32: bool = False,
        enable_nb_lines: bool = False,
    ) -> "DescriptorSet":
        """Create the descriptors; the ``tree`` label is added everywhere or nowhere."""
        common: Tuple[str, ...] = ("tree",) if has_tree else ()
        pattern_labels = ("pattern",) + common
        path_labels = ("path",) + common

        return cls(
            glob_match_number=MetricDescriptor.from_opts(namespace, GLOB_MATCH_NUMBER, pattern_labels),
            stat_size_bytes=MetricDescriptor.from_opts(namespace, STAT_SIZE_BYTES, path_labels),
            stat_modif_time_seconds=MetricDescriptor.from_opts(namespace, STAT_MODIF_TIME_SECONDS, path_labels),
            content_hash_crc32=(
                MetricDescriptor.from_opts(namespace, CONTENT_HASH_CRC32, path_labels) if enable_crc32 else None
            ),
            content_line_number=(
                MetricDescriptor.from_opts(namespace, CONTENT_LINE_NUMBER, path_labels) if enable_nb_lines else None
            ),
        )

    def __iter__(self) -> Iterator[MetricDescriptor]:
        for descriptor in (
            self.glob_match_number,
            self.stat_size_bytes,
            self.stat_modif_time_seconds,
            self.content_hash_crc32,
            self.content_line_number,
        ):
            if descriptor is not None:
                yield descriptor
