"""Pydantic models for the exporter configuration document.

The document is decoded strictly: any unknown key is rejected so that operator
typos surface at startup instead of silently disabling a collector.

Metric toggles are tri-state. A toggle left out of a scope is UNSET and is
filled from the enclosing scope during merge; an explicit ``false`` is kept.
"""

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TriState(str, Enum):
    """Three-valued toggle distinguishing 'not specified' from 'false'."""
    UNSET = "unset"
    TRUE = "true"
    FALSE = "false"

    @classmethod
    def of(cls, value: Optional[bool]) -> "TriState":
        if value is None:
            return cls.UNSET
        return cls.TRUE if value else cls.FALSE

    @property
    def is_set(self) -> bool:
        return self is not TriState.UNSET

    def or_else(self, default: "TriState") -> "TriState":
        """Return self when set, otherwise the enclosing scope's value."""
        return self if self.is_set else default

    def resolve(self) -> bool:
        """Collapse to a concrete boolean; UNSET means disabled."""
        return self is TriState.TRUE


class CollectorMetricConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    enable_crc32_metric: TriState = TriState.UNSET
    enable_nb_line_metric: TriState = TriState.UNSET

    @field_validator("enable_crc32_metric", "enable_nb_line_metric", mode="before")
    @classmethod
    def coerce_toggle(cls, value: Any) -> TriState:
        if isinstance(value, TriState):
            return value
        if value is None or isinstance(value, bool):
            return TriState.of(value)
        raise ValueError("expected a boolean")


class CollectorConfig(CollectorMetricConfig):
    """A pattern group: glob patterns sharing the same metric toggles."""
    patterns: List[str] = Field(default_factory=list)


class TreeConfig(CollectorConfig):
    """A named root under which pattern groups are evaluated."""
    tree_name: Optional[str] = None
    tree_root: Optional[str] = None
    files: List[CollectorConfig] = Field(default_factory=list)


class ExporterConfig(TreeConfig):
    """General scope: tree-level fields plus process-level settings."""
    working_directory: Optional[str] = None
    listen_address: Optional[str] = None
    metrics_path: Optional[str] = None
    trees: List[TreeConfig] = Field(default_factory=list)


class ConfigContent(BaseModel):
    model_config = ConfigDict(extra="forbid")

    exporter: ExporterConfig = Field(default_factory=ExporterConfig)
