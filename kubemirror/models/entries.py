"""Typed cache entries, one frozen dataclass per tracked kind.

Entries are produced only by the payload converters in
``kubemirror.converters``.  Every entry carries its name, namespace (None for
cluster-scoped kinds) and creation timestamp; the remaining attributes are
the columns the presentation layer lists for that kind.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar

from kubemirror.models.resources import Identity


@dataclass(frozen=True)
class CacheEntry:
    """Base for all cache entries."""

    KIND: ClassVar[str] = ""
    NAMESPACED: ClassVar[bool] = True

    name: str
    namespace: str | None
    creation_timestamp: datetime | None

    @property
    def identity(self) -> Identity:
        return Identity(self.KIND, self.namespace if self.NAMESPACED else None, self.name)


# ---------------------------------------------------------------------------
# Workloads
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ContainerStatus:
    """Condensed state of one container inside a pod."""

    name: str
    state: str | None  # "Running", "Waiting", "Terminated"
    message: str | None


@dataclass(frozen=True)
class PodEntry(CacheEntry):
    KIND: ClassVar[str] = "Pod"

    phase: str | None
    ready_containers: int
    total_containers: int
    containers: tuple[ContainerStatus, ...]
    restart_count: int
    node_name: str | None
    crash_loop: bool
    terminating: bool
    controller: str | None  # kind of the controlling owner
    qos_class: str | None


@dataclass(frozen=True)
class DeploymentEntry(CacheEntry):
    KIND: ClassVar[str] = "Deployment"

    replicas: int
    ready_replicas: int
    available_replicas: int
    unavailable_replicas: int
    updated_replicas: int


@dataclass(frozen=True)
class StatefulSetEntry(CacheEntry):
    KIND: ClassVar[str] = "StatefulSet"

    replicas: int
    ready_replicas: int
    service_name: str


@dataclass(frozen=True)
class DaemonSetEntry(CacheEntry):
    KIND: ClassVar[str] = "DaemonSet"

    desired: int
    current: int
    ready: int


@dataclass(frozen=True)
class ReplicaSetEntry(CacheEntry):
    KIND: ClassVar[str] = "ReplicaSet"

    desired: int
    current: int
    ready: int


@dataclass(frozen=True)
class JobEntry(CacheEntry):
    KIND: ClassVar[str] = "Job"

    completions: int
    condition: str  # "Complete", "Failed", "Running", "Unknown"


@dataclass(frozen=True)
class CronJobEntry(CacheEntry):
    KIND: ClassVar[str] = "CronJob"

    schedule: str
    suspend: bool
    active: int
    last_schedule: str


@dataclass(frozen=True)
class PodDisruptionBudgetEntry(CacheEntry):
    KIND: ClassVar[str] = "PodDisruptionBudget"

    min_available: str | None
    max_unavailable: str | None
    allowed_disruptions: int
    current_healthy: int
    desired_healthy: int


# ---------------------------------------------------------------------------
# Cluster
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NodeEntry(CacheEntry):
    """A cluster node.

    The usage fields at the bottom are owned by the node metrics probe and
    are None until the first probe for this node has been merged.
    """

    KIND: ClassVar[str] = "Node"
    NAMESPACED: ClassVar[bool] = False

    status: str  # "Ready", "NotReady", "Unknown"
    roles: tuple[str, ...]
    labels: tuple[str, ...]
    scheduling_disabled: bool
    taints: tuple[str, ...]
    version: str | None
    cpu_total: float | None  # cores
    mem_total: float | None  # GiB
    cpu_used: float | None = None
    cpu_percent: float | None = None
    mem_used: float | None = None
    mem_percent: float | None = None
    storage_used: float | None = None
    storage_total: float | None = None
    storage_percent: float | None = None


@dataclass(frozen=True)
class NamespaceEntry(CacheEntry):
    KIND: ClassVar[str] = "Namespace"
    NAMESPACED: ClassVar[bool] = False

    phase: str | None
    labels: tuple[tuple[str, str], ...]


@dataclass(frozen=True)
class EventEntry(CacheEntry):
    KIND: ClassVar[str] = "Event"

    message: str
    reason: str
    involved_object: str  # "<kind>/<name>"
    event_type: str
    timestamp: str


@dataclass(frozen=True)
class LeaseEntry(CacheEntry):
    KIND: ClassVar[str] = "Lease"

    holder: str | None


@dataclass(frozen=True)
class CustomResourceDefinitionEntry(CacheEntry):
    KIND: ClassVar[str] = "CustomResourceDefinition"
    NAMESPACED: ClassVar[bool] = False

    group: str
    version: str
    scope: str
    resource_kind: str
    plural: str


# ---------------------------------------------------------------------------
# Network
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ServiceEntry(CacheEntry):
    KIND: ClassVar[str] = "Service"

    svc_type: str
    cluster_ip: str
    ports: str
    external_ip: str
    selector: str


@dataclass(frozen=True)
class EndpointsEntry(CacheEntry):
    KIND: ClassVar[str] = "Endpoints"

    addresses: str
    ports: str


@dataclass(frozen=True)
class IngressEntry(CacheEntry):
    KIND: ClassVar[str] = "Ingress"

    host: str
    paths: str
    service: str
    tls: str


@dataclass(frozen=True)
class NetworkPolicyEntry(CacheEntry):
    KIND: ClassVar[str] = "NetworkPolicy"

    pod_selector: str
    policy_types: str


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ConfigMapEntry(CacheEntry):
    KIND: ClassVar[str] = "ConfigMap"

    keys: tuple[str, ...]


@dataclass(frozen=True)
class SecretEntry(CacheEntry):
    """A secret.  Only key names are mirrored, never values."""

    KIND: ClassVar[str] = "Secret"

    labels: str
    keys: str
    secret_type: str


# ---------------------------------------------------------------------------
# Access control
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ServiceAccountEntry(CacheEntry):
    KIND: ClassVar[str] = "ServiceAccount"


@dataclass(frozen=True)
class RoleEntry(CacheEntry):
    KIND: ClassVar[str] = "Role"


@dataclass(frozen=True)
class RoleBindingEntry(CacheEntry):
    KIND: ClassVar[str] = "RoleBinding"


@dataclass(frozen=True)
class ClusterRoleEntry(CacheEntry):
    KIND: ClassVar[str] = "ClusterRole"
    NAMESPACED: ClassVar[bool] = False


@dataclass(frozen=True)
class ClusterRoleBindingEntry(CacheEntry):
    KIND: ClassVar[str] = "ClusterRoleBinding"
    NAMESPACED: ClassVar[bool] = False


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PersistentVolumeEntry(CacheEntry):
    KIND: ClassVar[str] = "PersistentVolume"
    NAMESPACED: ClassVar[bool] = False

    storage_class: str
    capacity: str
    reclaim_policy: str
    claim: str
    status: str


@dataclass(frozen=True)
class PersistentVolumeClaimEntry(CacheEntry):
    KIND: ClassVar[str] = "PersistentVolumeClaim"

    storage_class: str
    size: str
    volume_name: str
    status: str


@dataclass(frozen=True)
class StorageClassEntry(CacheEntry):
    KIND: ClassVar[str] = "StorageClass"
    NAMESPACED: ClassVar[bool] = False

    provisioner: str
    reclaim_policy: str
    volume_binding_mode: str
    is_default: bool


@dataclass(frozen=True)
class CSIDriverEntry(CacheEntry):
    KIND: ClassVar[str] = "CSIDriver"
    NAMESPACED: ClassVar[bool] = False

    attach_required: str
    pod_info_on_mount: str
    storage_capacity: str
    fs_group_policy: str
