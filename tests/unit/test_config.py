"""Tests for environment-based configuration loading."""

from __future__ import annotations

import os

import pytest

from kubemirror.config import load_config


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith("KUBEMIRROR_"):
            monkeypatch.delenv(key)


class TestDefaults:
    def test_defaults(self) -> None:
        config = load_config()
        assert config.kinds == []
        assert config.feed.watch_timeout_seconds == 290
        assert config.feed.initial_backoff == 1.0
        assert config.feed.max_backoff == 30.0
        assert config.feed.warm_start is True
        assert config.node_metrics.enabled is True
        assert config.node_metrics.interval_seconds == 180
        assert config.node_metrics.probe_timeout_seconds == 3.0
        assert config.node_metrics.sample_gap_seconds == 1.0
        assert config.node_metrics.max_concurrency == 8
        assert config.status_interval_seconds == 60
        assert config.log.level == "info"


class TestOverrides:
    def test_kinds_list(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KUBEMIRROR_KINDS", "Pod, Node ,,Deployment")
        assert load_config().kinds == ["Pod", "Node", "Deployment"]

    def test_unknown_kind_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KUBEMIRROR_KINDS", "Pod,Widget")
        with pytest.raises(ValueError, match="Widget"):
            load_config()

    def test_booleans(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KUBEMIRROR_WARM_START", "no")
        monkeypatch.setenv("KUBEMIRROR_NODE_METRICS_ENABLED", "0")
        config = load_config()
        assert config.feed.warm_start is False
        assert config.node_metrics.enabled is False

    def test_integer_clamping(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KUBEMIRROR_WATCH_TIMEOUT", "5")
        monkeypatch.setenv("KUBEMIRROR_NODE_METRICS_INTERVAL", "99999")
        monkeypatch.setenv("KUBEMIRROR_NODE_METRICS_CONCURRENCY", "0")
        config = load_config()
        assert config.feed.watch_timeout_seconds == 60
        assert config.node_metrics.interval_seconds == 3600
        assert config.node_metrics.max_concurrency == 1

    def test_max_backoff_not_below_initial(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KUBEMIRROR_FEED_INITIAL_BACKOFF", "5")
        monkeypatch.setenv("KUBEMIRROR_FEED_MAX_BACKOFF", "2")
        config = load_config()
        assert config.feed.max_backoff == 5.0

    def test_status_interval_zero_disables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KUBEMIRROR_STATUS_INTERVAL", "0")
        assert load_config().status_interval_seconds == 0

    def test_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KUBEMIRROR_LOG_LEVEL", "DEBUG")
        assert load_config().log.level == "debug"

    def test_invalid_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KUBEMIRROR_LOG_LEVEL", "verbose")
        with pytest.raises(ValueError, match="Invalid log level"):
            load_config()
