"""Converters for Service, Endpoints, Ingress and NetworkPolicy."""

from __future__ import annotations

from typing import Any

from kubemirror.converters.common import (
    created_at,
    join_or,
    label_pairs,
    name_of,
    namespace_of,
    section,
)
from kubemirror.models.entries import (
    EndpointsEntry,
    IngressEntry,
    NetworkPolicyEntry,
    ServiceEntry,
)


def _service_port(port: dict[str, Any]) -> str:
    target = port.get("targetPort")
    protocol = port.get("protocol") or "TCP"
    return f"{port.get('port')}/{protocol}→{'' if target is None else target}"


def _external_ip(spec: dict[str, Any], status: dict[str, Any]) -> str:
    external_ips = spec.get("externalIPs")
    if external_ips:
        return ", ".join(external_ips)
    ingress = (status.get("loadBalancer") or {}).get("ingress")
    if ingress:
        return ", ".join(i.get("ip") or i.get("hostname") or "" for i in ingress)
    return "None"


def convert_service(raw: dict[str, Any]) -> ServiceEntry | None:
    name = name_of(raw)
    spec = section(raw, "spec")
    if name is None or spec is None:
        return None
    status = section(raw, "status") or {}
    return ServiceEntry(
        name=name,
        namespace=namespace_of(raw),
        creation_timestamp=created_at(raw),
        svc_type=spec.get("type") or "ClusterIP",
        cluster_ip=spec.get("clusterIP") or "None",
        ports=join_or(_service_port(p) for p in spec.get("ports") or []),
        external_ip=_external_ip(spec, status),
        selector=join_or(label_pairs(spec.get("selector"))),
    )


def convert_endpoints(raw: dict[str, Any]) -> EndpointsEntry | None:
    name = name_of(raw)
    if name is None:
        return None
    addresses: list[str] = []
    ports: list[str] = []
    for subset in raw.get("subsets") or []:
        addresses.extend(str(a.get("ip")) for a in subset.get("addresses") or [])
        ports.extend(f"{p.get('name') or '-'}:{p.get('port')}" for p in subset.get("ports") or [])
    return EndpointsEntry(
        name=name,
        namespace=namespace_of(raw),
        creation_timestamp=created_at(raw),
        addresses=join_or(addresses),
        ports=join_or(ports),
    )


def convert_ingress(raw: dict[str, Any]) -> IngressEntry | None:
    name = name_of(raw)
    if name is None:
        return None
    spec = section(raw, "spec") or {}
    hosts: list[str] = []
    paths: list[str] = []
    services: list[str] = []
    for rule in spec.get("rules") or []:
        if rule.get("host"):
            hosts.append(rule["host"])
        for path in (rule.get("http") or {}).get("paths") or []:
            paths.append(path.get("path") or "/")
            backend = (path.get("backend") or {}).get("service")
            if backend:
                services.append(backend.get("name", ""))
    tls_hosts = [host for entry in spec.get("tls") or [] for host in entry.get("hosts") or []]
    return IngressEntry(
        name=name,
        namespace=namespace_of(raw),
        creation_timestamp=created_at(raw),
        host=join_or(hosts),
        paths=join_or(paths),
        service=join_or(services),
        tls=join_or(tls_hosts),
    )


def convert_network_policy(raw: dict[str, Any]) -> NetworkPolicyEntry | None:
    name = name_of(raw)
    if name is None:
        return None
    spec = section(raw, "spec") or {}
    match_labels = (spec.get("podSelector") or {}).get("matchLabels")
    return NetworkPolicyEntry(
        name=name,
        namespace=namespace_of(raw),
        creation_timestamp=created_at(raw),
        pod_selector=join_or(label_pairs(match_labels), "None"),
        policy_types=join_or(spec.get("policyTypes") or [], "None"),
    )
