"""Core data structures for kubemirror."""

from kubemirror.models.config import KubeMirrorConfig
from kubemirror.models.entries import (
    CacheEntry,
    ContainerStatus,
    NodeEntry,
    PodEntry,
)
from kubemirror.models.resources import (
    ChangeNotification,
    Identity,
    NotificationType,
    Overlay,
    SyncState,
    SyncStats,
)

__all__ = [
    "CacheEntry",
    "ChangeNotification",
    "ContainerStatus",
    "Identity",
    "KubeMirrorConfig",
    "NodeEntry",
    "NotificationType",
    "Overlay",
    "PodEntry",
    "SyncState",
    "SyncStats",
]
