"""Helpers shared by the payload converters.

Raw payloads are the camelCase JSON objects the API server sends, either
straight from a watch event or serialized from a list response.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from kubemirror.models.resources import Identity

_GIB = 1_073_741_824.0

_BINARY_SUFFIXES = {
    "Ki": 1024.0,
    "Mi": 1024.0**2,
    "Gi": 1024.0**3,
    "Ti": 1024.0**4,
    "Pi": 1024.0**5,
    "Ei": 1024.0**6,
}
_DECIMAL_SUFFIXES = {
    "n": 1e-9,
    "u": 1e-6,
    "m": 1e-3,
    "k": 1e3,
    "M": 1e6,
    "G": 1e9,
    "T": 1e12,
    "P": 1e15,
    "E": 1e18,
}
_QUANTITY_RE = re.compile(r"^([+-]?[0-9.]+(?:[eE][+-]?[0-9]+)?)([a-zA-Z]*)$")


def metadata(raw: dict[str, Any]) -> dict[str, Any]:
    meta = raw.get("metadata")
    return meta if isinstance(meta, dict) else {}


def section(raw: dict[str, Any], key: str) -> dict[str, Any] | None:
    """Return ``raw[key]`` if it is a mapping, else None."""
    value = raw.get(key)
    return value if isinstance(value, dict) else None


def name_of(raw: dict[str, Any]) -> str | None:
    name = metadata(raw).get("name")
    return str(name) if name else None


def namespace_of(raw: dict[str, Any]) -> str | None:
    ns = metadata(raw).get("namespace")
    return str(ns) if ns else None


def created_at(raw: dict[str, Any]) -> datetime | None:
    return parse_timestamp(metadata(raw).get("creationTimestamp"))


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an RFC 3339 timestamp; None when absent or malformed."""
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def identity_from_raw(kind: str, raw: dict[str, Any], namespaced: bool) -> Identity | None:
    """Build the identity of a raw payload without converting it."""
    name = name_of(raw)
    if name is None:
        return None
    return Identity(kind, namespace_of(raw) if namespaced else None, name)


def join_or(items: Iterable[str], default: str = "-") -> str:
    joined = ", ".join(items)
    return joined or default


def label_pairs(labels: Any) -> list[str]:
    if not isinstance(labels, dict):
        return []
    return [f"{k}={v}" for k, v in labels.items()]


def int_or_string(value: Any) -> str | None:
    """Render an IntOrString field (e.g. ``minAvailable``)."""
    if value is None:
        return None
    return str(value)


def yes_no(value: Any) -> str:
    if value is None:
        return "Unknown"
    return "Yes" if value else "No"


def parse_quantity(value: Any) -> float | None:
    """Parse a Kubernetes resource quantity ("3800m", "16Gi", "1e9") to a float."""
    if isinstance(value, int | float):
        return float(value)
    if not isinstance(value, str):
        return None
    match = _QUANTITY_RE.match(value.strip())
    if match is None:
        return None
    number, suffix = match.groups()
    try:
        base = float(number)
    except ValueError:
        return None
    if not suffix:
        return base
    if suffix in _BINARY_SUFFIXES:
        return base * _BINARY_SUFFIXES[suffix]
    if suffix in _DECIMAL_SUFFIXES:
        return base * _DECIMAL_SUFFIXES[suffix]
    return None


def to_gib(num_bytes: float | None) -> float | None:
    if num_bytes is None:
        return None
    return round(num_bytes / _GIB, 2)


def percent(used: float | None, total: float | None) -> float | None:
    if used is None or total is None or total <= 0:
        return None
    return round(used / total * 100.0, 2)
