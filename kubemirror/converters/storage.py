"""Converters for PersistentVolume, PersistentVolumeClaim, StorageClass, CSIDriver."""

from __future__ import annotations

from typing import Any

from kubemirror.converters.common import (
    created_at,
    metadata,
    name_of,
    namespace_of,
    section,
    yes_no,
)
from kubemirror.models.entries import (
    CSIDriverEntry,
    PersistentVolumeClaimEntry,
    PersistentVolumeEntry,
    StorageClassEntry,
)

_DEFAULT_CLASS_ANNOTATION = "storageclass.kubernetes.io/is-default-class"


def convert_pv(raw: dict[str, Any]) -> PersistentVolumeEntry | None:
    name = name_of(raw)
    if name is None:
        return None
    spec = section(raw, "spec") or {}
    claim_ref = spec.get("claimRef")
    claim = f"{claim_ref.get('namespace', '')}/{claim_ref.get('name', '')}" if claim_ref else "-"
    return PersistentVolumeEntry(
        name=name,
        namespace=None,
        creation_timestamp=created_at(raw),
        storage_class=spec.get("storageClassName") or "-",
        capacity=str((spec.get("capacity") or {}).get("storage") or "-"),
        reclaim_policy=spec.get("persistentVolumeReclaimPolicy") or "-",
        claim=claim,
        status=(section(raw, "status") or {}).get("phase") or "Unknown",
    )


def convert_pvc(raw: dict[str, Any]) -> PersistentVolumeClaimEntry | None:
    name = name_of(raw)
    if name is None:
        return None
    spec = section(raw, "spec") or {}
    requests = (spec.get("resources") or {}).get("requests") or {}
    return PersistentVolumeClaimEntry(
        name=name,
        namespace=namespace_of(raw),
        creation_timestamp=created_at(raw),
        storage_class=spec.get("storageClassName") or "-",
        size=str(requests.get("storage") or ""),
        volume_name=spec.get("volumeName") or "-",
        status=(section(raw, "status") or {}).get("phase") or "Unknown",
    )


def convert_storage_class(raw: dict[str, Any]) -> StorageClassEntry | None:
    name = name_of(raw)
    if name is None:
        return None
    annotations = metadata(raw).get("annotations") or {}
    return StorageClassEntry(
        name=name,
        namespace=None,
        creation_timestamp=created_at(raw),
        provisioner=str(raw.get("provisioner", "")),
        reclaim_policy=raw.get("reclaimPolicy") or "-",
        volume_binding_mode=raw.get("volumeBindingMode") or "-",
        is_default=annotations.get(_DEFAULT_CLASS_ANNOTATION) == "true",
    )


def convert_csi_driver(raw: dict[str, Any]) -> CSIDriverEntry | None:
    name = name_of(raw)
    if name is None:
        return None
    spec = section(raw, "spec") or {}
    return CSIDriverEntry(
        name=name,
        namespace=None,
        creation_timestamp=created_at(raw),
        attach_required=yes_no(spec.get("attachRequired")),
        pod_info_on_mount=yes_no(spec.get("podInfoOnMount")),
        storage_capacity=yes_no(spec.get("storageCapacity")),
        fs_group_policy=spec.get("fsGroupPolicy") or "Unknown",
    )
