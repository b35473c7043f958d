"""Identity, change-notification and synchronizer-state data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class NotificationType(StrEnum):
    """Tag of a change notification emitted by a change feed."""

    INIT = "init"
    INIT_ITEM = "init_item"
    INIT_DONE = "init_done"
    UPSERT = "upsert"
    DELETE = "delete"
    ERROR = "error"


class SyncState(StrEnum):
    """Per-kind synchronizer state.  BOOTSTRAPPING doubles as the loading flag."""

    BOOTSTRAPPING = "bootstrapping"
    SYNCED = "synced"


@dataclass(frozen=True)
class Identity:
    """Uniquely names one live entry within one kind's cache.

    ``namespace`` is None for cluster-scoped kinds.
    """

    kind: str
    namespace: str | None
    name: str

    def __str__(self) -> str:
        if self.namespace is None:
            return f"{self.kind}/{self.name}"
        return f"{self.kind}/{self.namespace}/{self.name}"


@dataclass(frozen=True)
class ChangeNotification:
    """One item of a change feed.

    ``raw`` holds the camelCase payload for INIT_ITEM / UPSERT / DELETE.
    DELETE may carry an ``identity`` instead of a payload.  ERROR carries
    a human-readable ``error`` string.
    """

    type: NotificationType
    raw: dict[str, Any] | None = None
    identity: Identity | None = None
    error: str = ""

    @classmethod
    def init(cls) -> ChangeNotification:
        return cls(NotificationType.INIT)

    @classmethod
    def init_item(cls, raw: dict[str, Any]) -> ChangeNotification:
        return cls(NotificationType.INIT_ITEM, raw=raw)

    @classmethod
    def init_done(cls) -> ChangeNotification:
        return cls(NotificationType.INIT_DONE)

    @classmethod
    def upsert(cls, raw: dict[str, Any]) -> ChangeNotification:
        return cls(NotificationType.UPSERT, raw=raw)

    @classmethod
    def delete(cls, target: dict[str, Any] | Identity) -> ChangeNotification:
        if isinstance(target, Identity):
            return cls(NotificationType.DELETE, identity=target)
        return cls(NotificationType.DELETE, raw=target)

    @classmethod
    def failure(cls, error: str) -> ChangeNotification:
        return cls(NotificationType.ERROR, error=error)


@dataclass(frozen=True)
class Overlay:
    """Fields owned by one enrichment source for one identity.

    ``revision`` increases monotonically per cache so the most recent merge
    from a source is always the one re-applied.
    """

    source: str
    fields: dict[str, Any] = field(default_factory=dict)
    revision: int = 0


@dataclass
class SyncStats:
    """Counters kept by a synchronizer, reported by the status logger."""

    applied: int = 0
    ignored: int = 0
    dropped: int = 0
    errors: int = 0
    resyncs: int = 0
