"""Converters for cluster-level kinds: Node, Namespace, Event, Lease, CRD."""

from __future__ import annotations

from typing import Any

from kubemirror.converters.common import (
    created_at,
    metadata,
    name_of,
    namespace_of,
    parse_quantity,
    section,
    to_gib,
)
from kubemirror.models.entries import (
    CustomResourceDefinitionEntry,
    EventEntry,
    LeaseEntry,
    NamespaceEntry,
    NodeEntry,
)

_ROLE_PREFIX = "node-role.kubernetes.io/"


def _node_status(status: dict[str, Any]) -> str:
    for cond in status.get("conditions") or []:
        if cond.get("type") == "Ready":
            return {"True": "Ready", "False": "NotReady"}.get(cond.get("status"), "Unknown")
    return "Unknown"


def _node_roles(labels: dict[str, str]) -> tuple[str, ...]:
    roles = []
    for key, value in labels.items():
        if key.startswith(_ROLE_PREFIX):
            roles.append(key[len(_ROLE_PREFIX) :])
        elif key == "kubernetes.io/role":
            roles.append(value)
    return tuple(roles)


def _taint(taint: dict[str, Any]) -> str:
    key = taint.get("key", "")
    value = taint.get("value")
    effect = taint.get("effect", "")
    return f"{key}={value}:{effect}" if value else f"{key}:{effect}"


def convert_node(raw: dict[str, Any]) -> NodeEntry | None:
    name = name_of(raw)
    if name is None:
        return None
    labels = metadata(raw).get("labels") or {}
    spec = section(raw, "spec") or {}
    status = section(raw, "status") or {}
    capacity = status.get("capacity") or {}
    node_info = status.get("nodeInfo") or {}

    cpu_total = parse_quantity(capacity.get("cpu"))
    return NodeEntry(
        name=name,
        namespace=None,
        creation_timestamp=created_at(raw),
        status=_node_status(status),
        roles=_node_roles(labels),
        # Well-known kubernetes.io labels are noise in the node list.
        labels=tuple(f"{k}={v}" for k, v in labels.items() if "kubernetes" not in k),
        scheduling_disabled=bool(spec.get("unschedulable", False)),
        taints=tuple(_taint(t) for t in spec.get("taints") or []),
        version=node_info.get("kubeletVersion"),
        cpu_total=round(cpu_total, 2) if cpu_total is not None else None,
        mem_total=to_gib(parse_quantity(capacity.get("memory"))),
    )


def convert_namespace(raw: dict[str, Any]) -> NamespaceEntry | None:
    name = name_of(raw)
    if name is None:
        return None
    labels = metadata(raw).get("labels") or {}
    return NamespaceEntry(
        name=name,
        namespace=None,
        creation_timestamp=created_at(raw),
        phase=(section(raw, "status") or {}).get("phase"),
        labels=tuple(sorted((str(k), str(v)) for k, v in labels.items())),
    )


def convert_event(raw: dict[str, Any]) -> EventEntry | None:
    name = name_of(raw)
    if name is None:
        return None
    involved = section(raw, "involvedObject") or {}
    timestamp = raw.get("eventTime") or raw.get("lastTimestamp") or "N/A"
    return EventEntry(
        name=name,
        namespace=namespace_of(raw),
        creation_timestamp=created_at(raw),
        message=raw.get("message") or "Empty",
        reason=raw.get("reason") or "Unknown",
        involved_object=f"{involved.get('kind') or 'Unknown'}/{involved.get('name') or 'Unknown'}",
        event_type=raw.get("type") or "Normal",
        timestamp=str(timestamp),
    )


def convert_lease(raw: dict[str, Any]) -> LeaseEntry | None:
    name = name_of(raw)
    spec = section(raw, "spec")
    if name is None or spec is None:
        return None
    return LeaseEntry(
        name=name,
        namespace=namespace_of(raw),
        creation_timestamp=created_at(raw),
        holder=spec.get("holderIdentity"),
    )


def convert_crd(raw: dict[str, Any]) -> CustomResourceDefinitionEntry | None:
    name = name_of(raw)
    spec = section(raw, "spec")
    if name is None or spec is None:
        return None
    names = spec.get("names") or {}
    versions = spec.get("versions") or []
    group = spec.get("group")
    scope = spec.get("scope")
    version = versions[0].get("name") if versions else None
    resource_kind = names.get("kind")
    plural = names.get("plural")
    if not (group and scope and version and resource_kind and plural):
        return None
    return CustomResourceDefinitionEntry(
        name=name,
        namespace=None,
        creation_timestamp=created_at(raw),
        group=group,
        version=version,
        scope=scope,
        resource_kind=resource_kind,
        plural=plural,
    )
