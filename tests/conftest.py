"""Shared helpers for kubemirror tests.

Provides raw payload factories (camelCase, as the API server sends them) and
an in-memory change feed so synchronizers and the registry can be exercised
without a Kubernetes cluster.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Iterable
from typing import Any

import pytest

from kubemirror.cache.shared_cache import SharedCache
from kubemirror.models.resources import ChangeNotification
from kubemirror.sync.kinds import KINDS
from kubemirror.sync.synchronizer import Synchronizer

_CREATED = "2024-01-15T10:30:00Z"


# ---------------------------------------------------------------------------
# Raw payload factories
# ---------------------------------------------------------------------------


def make_meta(name: str, namespace: str | None = "default", **extra: Any) -> dict[str, Any]:
    meta: dict[str, Any] = {"name": name, "creationTimestamp": _CREATED, "resourceVersion": "1"}
    if namespace is not None:
        meta["namespace"] = namespace
    meta.update(extra)
    return meta


def make_pod(
    name: str = "web-0",
    namespace: str = "default",
    phase: str = "Running",
    ready: bool = True,
    restarts: int = 0,
    node_name: str = "node-1",
    waiting_reason: str | None = None,
) -> dict[str, Any]:
    """Create a single-container Pod payload."""
    state: dict[str, Any] = {"running": {"startedAt": _CREATED}}
    if waiting_reason is not None:
        state = {"waiting": {"reason": waiting_reason, "message": f"{waiting_reason} for web"}}
    return {
        "apiVersion": "v1",
        "kind": "Pod",
        "metadata": make_meta(
            name,
            namespace,
            ownerReferences=[{"kind": "ReplicaSet", "name": "web-abc", "controller": True}],
        ),
        "spec": {"nodeName": node_name, "containers": [{"name": "web", "image": "nginx:1.25"}]},
        "status": {
            "phase": phase,
            "qosClass": "BestEffort",
            "containerStatuses": [
                {"name": "web", "ready": ready, "restartCount": restarts, "state": state},
            ],
        },
    }


def make_node(
    name: str = "node-1",
    ready: str = "True",
    cpu: str = "4",
    memory: str = "16Gi",
    unschedulable: bool = False,
) -> dict[str, Any]:
    return {
        "apiVersion": "v1",
        "kind": "Node",
        "metadata": make_meta(
            name,
            None,
            labels={
                "node-role.kubernetes.io/control-plane": "",
                "kubernetes.io/hostname": name,
                "topology.example.com/zone": "a",
            },
        ),
        "spec": {
            "unschedulable": unschedulable,
            "taints": [{"key": "dedicated", "value": "infra", "effect": "NoSchedule"}],
        },
        "status": {
            "conditions": [{"type": "Ready", "status": ready}],
            "capacity": {"cpu": cpu, "memory": memory},
            "nodeInfo": {"kubeletVersion": "v1.29.2"},
        },
    }


def make_deployment(
    name: str = "web",
    namespace: str = "default",
    replicas: int = 3,
    ready: int = 3,
    unavailable: int = 0,
) -> dict[str, Any]:
    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": make_meta(name, namespace),
        "spec": {"replicas": replicas},
        "status": {
            "replicas": replicas,
            "readyReplicas": ready,
            "availableReplicas": ready,
            "unavailableReplicas": unavailable,
            "updatedReplicas": replicas,
        },
    }


def make_configmap(
    name: str = "settings",
    namespace: str = "default",
    data: dict[str, str] | None = None,
) -> dict[str, Any]:
    return {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": make_meta(name, namespace),
        "data": data if data is not None else {"a": "1"},
    }


# ---------------------------------------------------------------------------
# Fake change feed
# ---------------------------------------------------------------------------


class FakeFeed:
    """In-memory change feed that yields a fixed notification sequence.

    ``list_result`` is returned by ``list_all()``; an exception instance is
    raised instead.  When ``hold`` is set the stream blocks at the end until
    the test releases it, mimicking a live watch.
    """

    def __init__(
        self,
        notifications: Iterable[ChangeNotification] = (),
        list_result: list[dict[str, Any]] | Exception | None = None,
        hold: bool = False,
    ) -> None:
        self.notifications = list(notifications)
        self.list_result = list_result if list_result is not None else []
        self.list_calls = 0
        self.release = asyncio.Event()
        self._hold = hold

    async def stream(self) -> AsyncIterator[ChangeNotification]:
        for notification in self.notifications:
            await asyncio.sleep(0)
            yield notification
        if self._hold:
            await self.release.wait()

    async def list_all(self) -> list[dict[str, Any]]:
        self.list_calls += 1
        if isinstance(self.list_result, Exception):
            raise self.list_result
        return list(self.list_result)


def snapshot(*payloads: dict[str, Any]) -> list[ChangeNotification]:
    """``init``, one ``init_item`` per payload, ``init_done``."""
    return [
        ChangeNotification.init(),
        *(ChangeNotification.init_item(p) for p in payloads),
        ChangeNotification.init_done(),
    ]


def make_synchronizer(
    kind: str = "ConfigMap",
    feed: FakeFeed | None = None,
    warm_start: bool = False,
) -> Synchronizer:
    return Synchronizer(KINDS[kind], SharedCache(kind), feed, warm_start=warm_start)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def configmap_sync() -> Synchronizer:
    return make_synchronizer("ConfigMap")


@pytest.fixture
def pod_sync() -> Synchronizer:
    return make_synchronizer("Pod")
