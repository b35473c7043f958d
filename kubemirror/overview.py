"""Cluster overview counters derived from the published caches."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from kubemirror.models.entries import (
    DaemonSetEntry,
    DeploymentEntry,
    PodEntry,
    ReplicaSetEntry,
    StatefulSetEntry,
)
from kubemirror.sync.registry import Registry


@dataclass
class OverviewStats:
    nodes: int = 0
    namespaces: int = 0
    pods_running: int = 0
    pods_pending: int = 0
    deployments_running: int = 0
    deployments_pending: int = 0
    daemonsets_running: int = 0
    daemonsets_pending: int = 0
    statefulsets_running: int = 0
    statefulsets_pending: int = 0
    replicasets_running: int = 0
    replicasets_pending: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _read(registry: Registry, kind: str) -> tuple[Any, ...]:
    if kind not in registry.kinds():
        return ()
    return registry.read(kind)


def compute_overview_stats(registry: Registry) -> OverviewStats:
    """Count ready and pending workloads.  Untracked kinds count as zero.

    A pod is pending until all its containers are ready; a deployment while
    any replica is unavailable; daemonsets, statefulsets and replicasets
    while fewer replicas are ready than desired.
    """
    stats = OverviewStats(
        nodes=len(_read(registry, "Node")),
        namespaces=len(_read(registry, "Namespace")),
    )

    pod: PodEntry
    for pod in _read(registry, "Pod"):
        if pod.ready_containers < pod.total_containers:
            stats.pods_pending += 1
        else:
            stats.pods_running += 1

    deployment: DeploymentEntry
    for deployment in _read(registry, "Deployment"):
        if deployment.unavailable_replicas > 0:
            stats.deployments_pending += 1
        else:
            stats.deployments_running += 1

    daemonset: DaemonSetEntry
    for daemonset in _read(registry, "DaemonSet"):
        if daemonset.ready < daemonset.desired:
            stats.daemonsets_pending += 1
        else:
            stats.daemonsets_running += 1

    statefulset: StatefulSetEntry
    for statefulset in _read(registry, "StatefulSet"):
        if statefulset.ready_replicas < statefulset.replicas:
            stats.statefulsets_pending += 1
        else:
            stats.statefulsets_running += 1

    replicaset: ReplicaSetEntry
    for replicaset in _read(registry, "ReplicaSet"):
        if replicaset.ready < replicaset.desired:
            stats.replicasets_pending += 1
        else:
            stats.replicasets_running += 1

    return stats
