"""Converters for ServiceAccount and the rbac.authorization.k8s.io kinds.

These entries carry nothing beyond name, namespace and age.
"""

from __future__ import annotations

from typing import Any, TypeVar

from kubemirror.converters.common import created_at, name_of, namespace_of
from kubemirror.models.entries import (
    CacheEntry,
    ClusterRoleBindingEntry,
    ClusterRoleEntry,
    RoleBindingEntry,
    RoleEntry,
    ServiceAccountEntry,
)

E = TypeVar("E", bound=CacheEntry)


def _named(entry_cls: type[E], raw: dict[str, Any]) -> E | None:
    name = name_of(raw)
    if name is None:
        return None
    namespace = namespace_of(raw) if entry_cls.NAMESPACED else None
    return entry_cls(name=name, namespace=namespace, creation_timestamp=created_at(raw))


def convert_service_account(raw: dict[str, Any]) -> ServiceAccountEntry | None:
    return _named(ServiceAccountEntry, raw)


def convert_role(raw: dict[str, Any]) -> RoleEntry | None:
    return _named(RoleEntry, raw)


def convert_role_binding(raw: dict[str, Any]) -> RoleBindingEntry | None:
    return _named(RoleBindingEntry, raw)


def convert_cluster_role(raw: dict[str, Any]) -> ClusterRoleEntry | None:
    return _named(ClusterRoleEntry, raw)


def convert_cluster_role_binding(raw: dict[str, Any]) -> ClusterRoleBindingEntry | None:
    return _named(ClusterRoleBindingEntry, raw)
