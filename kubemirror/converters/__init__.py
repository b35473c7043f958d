"""Payload converters: raw API payload -> typed cache entry, or None.

Every converter is a pure function.  None means a required field is missing
and the item must be dropped by the caller.

Submodules:
    workloads      -- Pod, Deployment, StatefulSet, DaemonSet, ReplicaSet, Job,
                      CronJob, PodDisruptionBudget.
    cluster        -- Node, Namespace, Event, Lease, CustomResourceDefinition.
    network        -- Service, Endpoints, Ingress, NetworkPolicy.
    configuration  -- ConfigMap, Secret.
    rbac           -- ServiceAccount, Role, RoleBinding, ClusterRole, ClusterRoleBinding.
    storage        -- PersistentVolume, PersistentVolumeClaim, StorageClass, CSIDriver.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from kubemirror.converters.cluster import (
    convert_crd,
    convert_event,
    convert_lease,
    convert_namespace,
    convert_node,
)
from kubemirror.converters.configuration import convert_configmap, convert_secret
from kubemirror.converters.network import (
    convert_endpoints,
    convert_ingress,
    convert_network_policy,
    convert_service,
)
from kubemirror.converters.rbac import (
    convert_cluster_role,
    convert_cluster_role_binding,
    convert_role,
    convert_role_binding,
    convert_service_account,
)
from kubemirror.converters.storage import (
    convert_csi_driver,
    convert_pv,
    convert_pvc,
    convert_storage_class,
)
from kubemirror.converters.workloads import (
    convert_cronjob,
    convert_daemonset,
    convert_deployment,
    convert_job,
    convert_pdb,
    convert_pod,
    convert_replicaset,
    convert_statefulset,
)
from kubemirror.models.entries import CacheEntry

Converter = Callable[[dict[str, Any]], CacheEntry | None]

CONVERTERS: dict[str, Converter] = {
    "Pod": convert_pod,
    "Node": convert_node,
    "Namespace": convert_namespace,
    "Event": convert_event,
    "Service": convert_service,
    "Endpoints": convert_endpoints,
    "ConfigMap": convert_configmap,
    "Secret": convert_secret,
    "ServiceAccount": convert_service_account,
    "PersistentVolume": convert_pv,
    "PersistentVolumeClaim": convert_pvc,
    "Deployment": convert_deployment,
    "StatefulSet": convert_statefulset,
    "DaemonSet": convert_daemonset,
    "ReplicaSet": convert_replicaset,
    "Job": convert_job,
    "CronJob": convert_cronjob,
    "Ingress": convert_ingress,
    "NetworkPolicy": convert_network_policy,
    "Role": convert_role,
    "RoleBinding": convert_role_binding,
    "ClusterRole": convert_cluster_role,
    "ClusterRoleBinding": convert_cluster_role_binding,
    "StorageClass": convert_storage_class,
    "CSIDriver": convert_csi_driver,
    "PodDisruptionBudget": convert_pdb,
    "Lease": convert_lease,
    "CustomResourceDefinition": convert_crd,
}

__all__ = ["CONVERTERS", "Converter"]
