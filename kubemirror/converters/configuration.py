"""Converters for ConfigMap and Secret.  Values are never mirrored."""

from __future__ import annotations

from typing import Any

from kubemirror.converters.common import (
    created_at,
    join_or,
    label_pairs,
    metadata,
    name_of,
    namespace_of,
)
from kubemirror.models.entries import ConfigMapEntry, SecretEntry


def convert_configmap(raw: dict[str, Any]) -> ConfigMapEntry | None:
    name = name_of(raw)
    if name is None:
        return None
    return ConfigMapEntry(
        name=name,
        namespace=namespace_of(raw),
        creation_timestamp=created_at(raw),
        keys=tuple(raw.get("data") or {}),
    )


def convert_secret(raw: dict[str, Any]) -> SecretEntry | None:
    name = name_of(raw)
    if name is None:
        return None
    return SecretEntry(
        name=name,
        namespace=namespace_of(raw),
        creation_timestamp=created_at(raw),
        labels=", ".join(label_pairs(metadata(raw).get("labels"))),
        keys=join_or(raw.get("data") or {}),
        secret_type=raw.get("type") or "-",
    )
