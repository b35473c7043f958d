"""The table of tracked kinds.

One row per kind: its entry type, converter, and whether a one-shot list is
published ahead of the watch snapshot for a faster first display.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from kubemirror.converters import CONVERTERS, Converter
from kubemirror.converters.common import identity_from_raw
from kubemirror.models import entries
from kubemirror.models.entries import CacheEntry
from kubemirror.models.resources import Identity


@dataclass(frozen=True)
class KindSpec:
    """Static description of one tracked kind."""

    kind: str
    entry_cls: type[CacheEntry]
    convert: Converter
    warm_start: bool = False

    @property
    def namespaced(self) -> bool:
        return self.entry_cls.NAMESPACED

    def identity_of(self, raw: dict[str, Any]) -> Identity | None:
        """Identity of a raw payload, used for deletes without conversion."""
        return identity_from_raw(self.kind, raw, self.namespaced)


def _spec(entry_cls: type[CacheEntry], warm_start: bool = False) -> KindSpec:
    return KindSpec(
        kind=entry_cls.KIND,
        entry_cls=entry_cls,
        convert=CONVERTERS[entry_cls.KIND],
        warm_start=warm_start,
    )


KINDS: dict[str, KindSpec] = {
    spec.kind: spec
    for spec in (
        _spec(entries.PodEntry, warm_start=True),
        _spec(entries.NodeEntry),
        _spec(entries.NamespaceEntry),
        _spec(entries.EventEntry),
        _spec(entries.ServiceEntry, warm_start=True),
        _spec(entries.EndpointsEntry, warm_start=True),
        _spec(entries.ConfigMapEntry, warm_start=True),
        _spec(entries.SecretEntry, warm_start=True),
        _spec(entries.ServiceAccountEntry, warm_start=True),
        _spec(entries.PersistentVolumeEntry),
        _spec(entries.PersistentVolumeClaimEntry, warm_start=True),
        _spec(entries.DeploymentEntry, warm_start=True),
        _spec(entries.StatefulSetEntry, warm_start=True),
        _spec(entries.DaemonSetEntry, warm_start=True),
        _spec(entries.ReplicaSetEntry, warm_start=True),
        _spec(entries.JobEntry, warm_start=True),
        _spec(entries.CronJobEntry, warm_start=True),
        _spec(entries.IngressEntry, warm_start=True),
        _spec(entries.NetworkPolicyEntry, warm_start=True),
        _spec(entries.RoleEntry, warm_start=True),
        _spec(entries.RoleBindingEntry, warm_start=True),
        _spec(entries.ClusterRoleEntry, warm_start=True),
        _spec(entries.ClusterRoleBindingEntry, warm_start=True),
        _spec(entries.StorageClassEntry),
        _spec(entries.CSIDriverEntry),
        _spec(entries.PodDisruptionBudgetEntry),
        _spec(entries.LeaseEntry),
        _spec(entries.CustomResourceDefinitionEntry),
    )
}
