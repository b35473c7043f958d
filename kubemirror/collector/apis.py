"""Mapping from tracked kinds to their kubernetes-asyncio list calls."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from kubernetes_asyncio import client as k8s_client  # type: ignore[import-untyped]

from kubemirror.collector.feed import KubeChangeFeed
from kubemirror.models.config import FeedConfig

# kind -> (API class name, list method)
KIND_APIS: dict[str, tuple[str, str]] = {
    "Pod": ("CoreV1Api", "list_pod_for_all_namespaces"),
    "Node": ("CoreV1Api", "list_node"),
    "Namespace": ("CoreV1Api", "list_namespace"),
    "Event": ("CoreV1Api", "list_event_for_all_namespaces"),
    "Service": ("CoreV1Api", "list_service_for_all_namespaces"),
    "Endpoints": ("CoreV1Api", "list_endpoints_for_all_namespaces"),
    "ConfigMap": ("CoreV1Api", "list_config_map_for_all_namespaces"),
    "Secret": ("CoreV1Api", "list_secret_for_all_namespaces"),
    "ServiceAccount": ("CoreV1Api", "list_service_account_for_all_namespaces"),
    "PersistentVolume": ("CoreV1Api", "list_persistent_volume"),
    "PersistentVolumeClaim": ("CoreV1Api", "list_persistent_volume_claim_for_all_namespaces"),
    "Deployment": ("AppsV1Api", "list_deployment_for_all_namespaces"),
    "StatefulSet": ("AppsV1Api", "list_stateful_set_for_all_namespaces"),
    "DaemonSet": ("AppsV1Api", "list_daemon_set_for_all_namespaces"),
    "ReplicaSet": ("AppsV1Api", "list_replica_set_for_all_namespaces"),
    "Job": ("BatchV1Api", "list_job_for_all_namespaces"),
    "CronJob": ("BatchV1Api", "list_cron_job_for_all_namespaces"),
    "Ingress": ("NetworkingV1Api", "list_ingress_for_all_namespaces"),
    "NetworkPolicy": ("NetworkingV1Api", "list_network_policy_for_all_namespaces"),
    "Role": ("RbacAuthorizationV1Api", "list_role_for_all_namespaces"),
    "RoleBinding": ("RbacAuthorizationV1Api", "list_role_binding_for_all_namespaces"),
    "ClusterRole": ("RbacAuthorizationV1Api", "list_cluster_role"),
    "ClusterRoleBinding": ("RbacAuthorizationV1Api", "list_cluster_role_binding"),
    "StorageClass": ("StorageV1Api", "list_storage_class"),
    "CSIDriver": ("StorageV1Api", "list_csi_driver"),
    "PodDisruptionBudget": ("PolicyV1Api", "list_pod_disruption_budget_for_all_namespaces"),
    "Lease": ("CoordinationV1Api", "list_lease_for_all_namespaces"),
    "CustomResourceDefinition": ("ApiextensionsV1Api", "list_custom_resource_definition"),
}


def build_feeds(
    kinds: Iterable[str],
    api_client: Any,
    config: FeedConfig,
) -> dict[str, KubeChangeFeed]:
    """Create one :class:`KubeChangeFeed` per kind, sharing API objects per group."""
    apis: dict[str, Any] = {}
    feeds: dict[str, KubeChangeFeed] = {}
    for kind in kinds:
        api_name, method = KIND_APIS[kind]
        api = apis.get(api_name)
        if api is None:
            api = getattr(k8s_client, api_name)(api_client)
            apis[api_name] = api
        feeds[kind] = KubeChangeFeed(
            kind,
            getattr(api, method),
            api_client,
            watch_timeout_seconds=config.watch_timeout_seconds,
            initial_backoff=config.initial_backoff,
            max_backoff=config.max_backoff,
        )
    return feeds
