"""Tests for the node metrics probe and enricher."""

from __future__ import annotations

import asyncio
import json
from dataclasses import replace
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from kubernetes_asyncio.client import ApiException

from kubemirror.cache.shared_cache import SharedCache
from kubemirror.converters.cluster import convert_node
from kubemirror.enrichment.node_metrics import OWNED_FIELDS, NodeMetricsEnricher, NodeMetricsProbe
from kubemirror.models.entries import NodeEntry
from kubemirror.models.resources import Identity
from tests.conftest import make_node

_GIB = 1024**3
_BASE_NANOS = 1_000_000_000_000


def _node(name: str = "node-1") -> NodeEntry:
    entry = convert_node(make_node(name, cpu="4", memory="16Gi"))
    assert entry is not None
    return entry


def _response(cpu_nanos: int | None = _BASE_NANOS) -> MagicMock:
    node: dict[str, Any] = {
        "memory": {"workingSetBytes": 4 * _GIB},
        "fs": {"usedBytes": 10 * _GIB, "capacityBytes": 100 * _GIB},
    }
    if cpu_nanos is not None:
        node["cpu"] = {"usageCoreNanoSeconds": cpu_nanos}
    resp = MagicMock()
    resp.read = AsyncMock(return_value=json.dumps({"node": node}).encode())
    return resp


def _malformed_response() -> MagicMock:
    resp = MagicMock()
    resp.read = AsyncMock(return_value=json.dumps({"node": {"cpu": {"usageCoreNanoSeconds": [1]}}}).encode())
    return resp


def _probe(*responses: Any) -> tuple[NodeMetricsProbe, MagicMock]:
    core_v1 = MagicMock()
    core_v1.connect_get_node_proxy_with_path = AsyncMock(side_effect=list(responses))
    return NodeMetricsProbe(core_v1, timeout_seconds=1.0, sample_gap_seconds=1.0), core_v1


_FIELDS = {
    "cpu_used": 1.0,
    "cpu_percent": 25.0,
    "mem_used": 4.0,
    "mem_percent": 25.0,
    "storage_used": 10.0,
    "storage_total": 100.0,
    "storage_percent": 10.0,
}


# ---------------------------------------------------------------------------
# Probe
# ---------------------------------------------------------------------------


class TestProbe:
    async def test_full_probe(self) -> None:
        probe, core_v1 = _probe(_response(), _response(), _response(_BASE_NANOS + 2_000_000_000))

        with patch("kubemirror.enrichment.node_metrics.asyncio.sleep", new=AsyncMock()):
            fields = await probe.probe(_node())

        assert fields == {
            "cpu_used": 2.0,
            "cpu_percent": 50.0,
            "mem_used": 4.0,
            "mem_percent": 25.0,
            "storage_used": 10.0,
            "storage_total": 100.0,
            "storage_percent": 10.0,
        }
        assert set(fields) == set(OWNED_FIELDS)
        core_v1.connect_get_node_proxy_with_path.assert_awaited_with(
            "node-1", "stats/summary", _preload_content=False
        )

    async def test_failed_first_sample_counts_as_zero(self) -> None:
        probe, _ = _probe(_response(), ApiException(status=503), _response(3_000_000_000))

        with patch("kubemirror.enrichment.node_metrics.asyncio.sleep", new=AsyncMock()):
            fields = await probe.probe(_node())

        assert fields["cpu_used"] == 3.0
        assert fields["cpu_percent"] == 75.0

    async def test_failed_second_sample_reuses_first(self) -> None:
        probe, _ = _probe(_response(), _response(), TimeoutError())

        with patch("kubemirror.enrichment.node_metrics.asyncio.sleep", new=AsyncMock()):
            fields = await probe.probe(_node())

        assert fields["cpu_used"] == 0.0

    async def test_unknown_capacity_uses_raw_cores(self) -> None:
        probe, _ = _probe(_response(), _response(), _response(_BASE_NANOS + 500_000_000))
        node = replace(_node(), cpu_total=None, mem_total=None)

        with patch("kubemirror.enrichment.node_metrics.asyncio.sleep", new=AsyncMock()):
            fields = await probe.probe(node)

        assert fields["cpu_percent"] == 50.0
        assert fields["mem_percent"] is None

    async def test_summary_failure_raises(self) -> None:
        probe, _ = _probe(ApiException(status=404, reason="Not Found"))
        with pytest.raises(ApiException):
            await probe.probe(_node())

    async def test_zero_cpu_capacity_reports_zero_percent(self) -> None:
        probe, _ = _probe(_response(), _response(), _response(_BASE_NANOS + 2_000_000_000))
        node = replace(_node(), cpu_total=0.0)

        with patch("kubemirror.enrichment.node_metrics.asyncio.sleep", new=AsyncMock()):
            fields = await probe.probe(node)

        assert fields["cpu_used"] == 2.0
        assert fields["cpu_percent"] == 0.0

    async def test_non_numeric_cpu_usage_counts_as_failed_sample(self) -> None:
        probe, _ = _probe(_malformed_response())
        assert await probe.cpu_sample("node-1") is None

    async def test_response_released_when_read_times_out(self) -> None:
        resp = MagicMock()
        resp.read = AsyncMock(side_effect=TimeoutError())
        probe, _ = _probe(resp)

        with pytest.raises(TimeoutError):
            await probe.summary("node-1")
        resp.release.assert_called_once()

    async def test_response_released_after_read(self) -> None:
        resp = _response()
        probe, _ = _probe(resp)
        await probe.summary("node-1")
        resp.release.assert_called_once()


# ---------------------------------------------------------------------------
# Enricher
# ---------------------------------------------------------------------------


class TestEnricher:
    async def test_refresh_merges_fields(self) -> None:
        cache: SharedCache[NodeEntry] = SharedCache("Node")
        cache.publish([_node()])
        probe = MagicMock()
        probe.probe = AsyncMock(return_value=_FIELDS)
        enricher = NodeMetricsEnricher(cache, probe)

        assert await enricher.refresh_all() == 1

        entry = cache.get(Identity("Node", None, "node-1"))
        assert entry.cpu_used == 1.0
        assert entry.status == "Ready"

    async def test_empty_cache_is_a_noop(self) -> None:
        probe = MagicMock()
        probe.probe = AsyncMock()
        enricher = NodeMetricsEnricher(SharedCache("Node"), probe)
        assert await enricher.refresh_all() == 0
        probe.probe.assert_not_awaited()

    async def test_failed_node_is_skipped(self) -> None:
        cache: SharedCache[NodeEntry] = SharedCache("Node")
        cache.publish([_node("node-1"), _node("node-2")])

        async def _probe_one(node: NodeEntry) -> dict[str, Any]:
            if node.name == "node-2":
                raise ApiException(status=500, reason="kubelet down")
            return _FIELDS

        probe = MagicMock()
        probe.probe = AsyncMock(side_effect=_probe_one)
        enricher = NodeMetricsEnricher(cache, probe)

        assert await enricher.refresh_all() == 1
        assert cache.get(Identity("Node", None, "node-2")).cpu_used is None

    async def test_node_deleted_during_probe(self) -> None:
        cache: SharedCache[NodeEntry] = SharedCache("Node")
        node = _node()
        cache.publish([node])

        async def _probe_and_delete(probed: NodeEntry) -> dict[str, Any]:
            cache.remove(probed.identity)
            return _FIELDS

        probe = MagicMock()
        probe.probe = AsyncMock(side_effect=_probe_and_delete)
        enricher = NodeMetricsEnricher(cache, probe)

        assert await enricher.refresh_all() == 0
        assert cache.read() == ()

    async def test_concurrency_is_bounded(self) -> None:
        cache: SharedCache[NodeEntry] = SharedCache("Node")
        cache.publish([_node(f"node-{i}") for i in range(6)])
        active = 0
        peak = 0

        async def _slow(node: NodeEntry) -> dict[str, Any]:
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.01)
            active -= 1
            return _FIELDS

        probe = MagicMock()
        probe.probe = AsyncMock(side_effect=_slow)
        enricher = NodeMetricsEnricher(cache, probe, max_concurrency=2)

        assert await enricher.refresh_all() == 6
        assert peak <= 2

    async def test_request_refresh_starts_cycle_early(self) -> None:
        cache: SharedCache[NodeEntry] = SharedCache("Node")
        cache.publish([_node()])
        probe = MagicMock()
        probe.probe = AsyncMock(return_value=_FIELDS)
        enricher = NodeMetricsEnricher(cache, probe, interval_seconds=3600)

        task = asyncio.create_task(enricher.run())
        try:
            for _ in range(100):
                if probe.probe.await_count >= 1:
                    break
                await asyncio.sleep(0.01)
            enricher.request_refresh()
            for _ in range(100):
                if probe.probe.await_count >= 2:
                    break
                await asyncio.sleep(0.01)
            assert probe.probe.await_count == 2
        finally:
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

    async def test_run_survives_malformed_summary(self) -> None:
        cache: SharedCache[NodeEntry] = SharedCache("Node")
        cache.publish([_node()])
        core_v1 = MagicMock()
        core_v1.connect_get_node_proxy_with_path = AsyncMock(side_effect=lambda *a, **kw: _malformed_response())
        probe = NodeMetricsProbe(core_v1, timeout_seconds=1.0, sample_gap_seconds=0.0)
        enricher = NodeMetricsEnricher(cache, probe, interval_seconds=3600)

        task = asyncio.create_task(enricher.run())
        try:
            for _ in range(100):
                if core_v1.connect_get_node_proxy_with_path.await_count >= 3:
                    break
                await asyncio.sleep(0.01)
            await asyncio.sleep(0.05)
            assert not task.done()
            assert cache.get(Identity("Node", None, "node-1")).cpu_used == 0.0
        finally:
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

    async def test_run_survives_unexpected_cycle_failure(self) -> None:
        cache: SharedCache[NodeEntry] = SharedCache("Node")
        cache.publish([_node()])
        probe = MagicMock()
        probe.probe = AsyncMock(side_effect=[RuntimeError("boom"), _FIELDS])
        enricher = NodeMetricsEnricher(cache, probe, interval_seconds=3600)

        task = asyncio.create_task(enricher.run())
        try:
            for _ in range(100):
                if probe.probe.await_count >= 1:
                    break
                await asyncio.sleep(0.01)
            await asyncio.sleep(0.01)
            assert not task.done()
            enricher.request_refresh()
            for _ in range(100):
                if probe.probe.await_count >= 2:
                    break
                await asyncio.sleep(0.01)
            await asyncio.sleep(0.01)
            assert cache.get(Identity("Node", None, "node-1")).cpu_used == 1.0
        finally:
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task
