"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class FeedConfig:
    """Change feed (list + watch) configuration."""

    watch_timeout_seconds: int = 290
    initial_backoff: float = 1.0
    max_backoff: float = 30.0
    warm_start: bool = True


@dataclass
class NodeMetricsConfig:
    """Node metrics enrichment configuration."""

    enabled: bool = True
    interval_seconds: int = 180
    probe_timeout_seconds: float = 3.0
    sample_gap_seconds: float = 1.0
    max_concurrency: int = 8


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"


@dataclass
class KubeMirrorConfig:
    """Top-level kubemirror configuration.

    An empty ``kinds`` list means every kind in the kind table is tracked.
    """

    kinds: list[str] = field(default_factory=list)
    feed: FeedConfig = field(default_factory=FeedConfig)
    node_metrics: NodeMetricsConfig = field(default_factory=NodeMetricsConfig)
    status_interval_seconds: int = 60
    log: LogConfig = field(default_factory=LogConfig)
