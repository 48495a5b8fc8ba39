"""Pydantic models for the exporter's JSON responses."""

from typing import List

from pydantic import BaseModel, ConfigDict


class TreeStatusModel(BaseModel):
    """One tree of the resolved configuration."""
    model_config = ConfigDict(from_attributes=True)

    tree_name: str
    collector_count: int
    pattern_count: int


class ExporterStatusModel(BaseModel):
    """Lightweight status response for readiness checks."""
    model_config = ConfigDict(from_attributes=True)

    version: str
    metrics_path: str
    collector_ready: bool
    metric_names: List[str]
    trees: List[TreeStatusModel]
