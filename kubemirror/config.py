"""Configuration loading from environment variables."""

from __future__ import annotations

import os

from kubemirror.models.config import (
    FeedConfig,
    KubeMirrorConfig,
    LogConfig,
    NodeMetricsConfig,
)
from kubemirror.sync.kinds import KINDS


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"KUBEMIRROR_{key}", default)


def _env_bool(key: str, default: bool = False) -> bool:
    val = _env(key, str(default).lower())
    return val.lower() in ("true", "1", "yes")


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    val = int(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _env_float(key: str, default: float, min_val: float | None = None) -> float:
    val = float(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    return val


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def _parse_kinds(value: str) -> list[str]:
    kinds = [k.strip() for k in value.split(",") if k.strip()]
    unknown = [k for k in kinds if k not in KINDS]
    if unknown:
        raise ValueError(f"Unknown kinds: {', '.join(unknown)}. Must be among {sorted(KINDS)}")
    return kinds


def load_config() -> KubeMirrorConfig:
    """Load configuration from KUBEMIRROR_* environment variables."""
    initial_backoff = _env_float("FEED_INITIAL_BACKOFF", 1.0, min_val=0.1)
    return KubeMirrorConfig(
        kinds=_parse_kinds(_env("KINDS", "")),
        feed=FeedConfig(
            watch_timeout_seconds=_env_int("WATCH_TIMEOUT", 290, min_val=60, max_val=3600),
            initial_backoff=initial_backoff,
            max_backoff=_env_float("FEED_MAX_BACKOFF", 30.0, min_val=initial_backoff),
            warm_start=_env_bool("WARM_START", True),
        ),
        node_metrics=NodeMetricsConfig(
            enabled=_env_bool("NODE_METRICS_ENABLED", True),
            interval_seconds=_env_int("NODE_METRICS_INTERVAL", 180, min_val=10, max_val=3600),
            probe_timeout_seconds=_env_float("NODE_METRICS_TIMEOUT", 3.0, min_val=0.5),
            sample_gap_seconds=_env_float("NODE_METRICS_SAMPLE_GAP", 1.0, min_val=0.1),
            max_concurrency=_env_int("NODE_METRICS_CONCURRENCY", 8, min_val=1, max_val=64),
        ),
        status_interval_seconds=_env_int("STATUS_INTERVAL", 60, min_val=0),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
        ),
    )
