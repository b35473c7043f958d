"""Node metrics enrichment.

Periodically reads the kubelet summary (``/api/v1/nodes/{name}/proxy/stats/summary``)
of every cached node through the API server proxy and merges the usage
fields into the node's cache entry.  The merge goes through
``SharedCache.merge`` so the fields are kept as an overlay that survives
later primary upserts of the same node.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

import aiohttp
from kubernetes_asyncio.client import ApiException  # type: ignore[import-untyped]

from kubemirror.cache.shared_cache import SharedCache
from kubemirror.converters.common import percent, to_gib
from kubemirror.models.entries import NodeEntry
from kubemirror.observability.logging import get_logger

_NANOS = 1_000_000_000.0

# Fields owned by the probe; nothing else on a NodeEntry is ever touched.
OWNED_FIELDS = (
    "cpu_used",
    "cpu_percent",
    "mem_used",
    "mem_percent",
    "storage_used",
    "storage_total",
    "storage_percent",
)

_PROBE_ERRORS = (ApiException, aiohttp.ClientError, OSError, TimeoutError, TypeError, ValueError)


class NodeMetricsProbe:
    """Reads one node's usage from the kubelet summary API."""

    def __init__(
        self,
        core_v1: Any,
        *,
        timeout_seconds: float = 3.0,
        sample_gap_seconds: float = 1.0,
    ) -> None:
        self._core_v1 = core_v1
        self._timeout = timeout_seconds
        self._gap = sample_gap_seconds
        self._log = get_logger("node_metrics_probe")

    async def summary(self, node_name: str) -> dict[str, Any]:
        """Fetch and decode the summary document, bounded by the probe timeout."""
        resp = await asyncio.wait_for(
            self._core_v1.connect_get_node_proxy_with_path(
                node_name, "stats/summary", _preload_content=False
            ),
            timeout=self._timeout,
        )
        try:
            body = await asyncio.wait_for(resp.read(), timeout=self._timeout)
        finally:
            resp.release()
        doc = json.loads(body)
        if not isinstance(doc, dict):
            raise ValueError("summary is not a JSON object")
        return doc

    async def cpu_sample(self, node_name: str) -> int | None:
        """Cumulative CPU usage in nanoseconds, or None when the sample failed."""
        try:
            doc = await self.summary(node_name)
        except _PROBE_ERRORS as exc:
            self._log.debug("cpu sample failed", node=node_name, error=str(exc))
            return None
        usage = _number(((doc.get("node") or {}).get("cpu") or {}).get("usageCoreNanoSeconds"))
        return int(usage) if usage is not None else None

    async def probe(self, node: NodeEntry) -> dict[str, Any]:
        """Return the owned fields for *node*.

        Raises when the summary itself cannot be fetched.  CPU sampling
        degrades instead: a failed first sample counts as zero and a failed
        second sample reuses the first.
        """
        doc = await self.summary(node.name)
        stats = doc.get("node") or {}

        fs = stats.get("fs") or {}
        storage_used = to_gib(_number(fs.get("usedBytes")))
        storage_total = to_gib(_number(fs.get("capacityBytes")))

        memory = stats.get("memory") or {}
        mem_used = to_gib(_number(memory.get("workingSetBytes")))

        first = await self.cpu_sample(node.name)
        if first is None:
            first = 0
        await asyncio.sleep(self._gap)
        second = await self.cpu_sample(node.name)
        if second is None:
            second = first
        cores = max(second - first, 0) / _NANOS / self._gap
        if node.cpu_total == 0:
            cpu_percent = 0.0
        elif node.cpu_total is not None:
            cpu_percent = round(cores / node.cpu_total * 100.0, 2)
        else:
            cpu_percent = round(cores * 100.0, 2)

        return {
            "cpu_used": round(cores, 2),
            "cpu_percent": cpu_percent,
            "mem_used": mem_used,
            "mem_percent": percent(mem_used, node.mem_total),
            "storage_used": storage_used,
            "storage_total": storage_total,
            "storage_percent": percent(storage_used, storage_total),
        }


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return float(value)


class NodeMetricsEnricher:
    """Runs the probe over the node cache on a timer or on request."""

    SOURCE = "node-metrics"

    def __init__(
        self,
        cache: SharedCache[NodeEntry],
        probe: NodeMetricsProbe,
        *,
        interval_seconds: float = 180,
        max_concurrency: int = 8,
    ) -> None:
        self._cache = cache
        self._probe = probe
        self._interval = interval_seconds
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._wakeup = asyncio.Event()
        self._log = get_logger("node_metrics")

    def request_refresh(self) -> None:
        """Start the next cycle now instead of waiting for the interval."""
        self._wakeup.set()

    async def run(self) -> None:
        while True:
            try:
                await self.refresh_all()
            except Exception as exc:
                self._log.warning("node metrics refresh failed", error=str(exc))
            try:
                await asyncio.wait_for(self._wakeup.wait(), timeout=self._interval)
            except TimeoutError:
                pass
            self._wakeup.clear()

    async def refresh_all(self) -> int:
        """Probe every cached node once.  Returns the number of entries updated."""
        nodes = self._cache.read()
        if not nodes:
            return 0
        results = await asyncio.gather(*(self._refresh_one(node) for node in nodes))
        updated = sum(results)
        self._log.info("node metrics refreshed", nodes=len(nodes), updated=updated)
        return updated

    async def _refresh_one(self, node: NodeEntry) -> bool:
        async with self._semaphore:
            try:
                fields = await self._probe.probe(node)
            except _PROBE_ERRORS as exc:
                self._log.warning("node probe failed", node=node.name, error=str(exc))
                return False
        return self._cache.merge(node.identity, self.SOURCE, fields)
