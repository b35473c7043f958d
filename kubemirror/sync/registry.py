"""Multi-kind registry: one shared cache and one synchronizer per tracked kind.

Kinds are fully independent.  Each synchronizer runs as its own asyncio task
against its own change feed; the registry only owns their lifecycle and
exposes the read side to the presentation layer.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from kubemirror.cache.shared_cache import SharedCache
from kubemirror.models.entries import CacheEntry
from kubemirror.models.resources import Identity
from kubemirror.observability.logging import get_logger
from kubemirror.sync.kinds import KINDS
from kubemirror.sync.synchronizer import Synchronizer

if TYPE_CHECKING:
    from kubemirror.collector.feed import ChangeFeed


class UnknownKindError(KeyError):
    """Raised when reading a kind the registry does not track."""

    def __init__(self, kind: str) -> None:
        super().__init__(kind)
        self.kind = kind

    def __str__(self) -> str:
        return f"kind not tracked: {self.kind}"


class Registry:
    """Owns the (cache, synchronizer) pair of every enabled kind.

    ``kinds`` defaults to the keys of ``feeds``, or to every kind in the
    kind table when no feeds are given (useful for driving synchronizers
    by hand through :meth:`synchronizer`).
    """

    def __init__(
        self,
        feeds: Mapping[str, ChangeFeed] | None = None,
        kinds: Iterable[str] | None = None,
        *,
        warm_start: bool = True,
    ) -> None:
        feeds = feeds or {}
        if kinds is None:
            kinds = list(feeds) if feeds else list(KINDS)
        self._caches: dict[str, SharedCache[Any]] = {}
        self._synchronizers: dict[str, Synchronizer] = {}
        for kind in kinds:
            spec = KINDS.get(kind)
            if spec is None:
                raise UnknownKindError(kind)
            cache: SharedCache[Any] = SharedCache(kind)
            self._caches[kind] = cache
            self._synchronizers[kind] = Synchronizer(
                spec,
                cache,
                feeds.get(kind),
                warm_start=warm_start,
            )
        self._tasks: list[asyncio.Task[None]] = []
        self._log = get_logger("registry")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> list[asyncio.Task[None]]:
        """Spawn one task per kind.  Must be called from a running loop."""
        if self._tasks:
            return list(self._tasks)
        for kind, sync in self._synchronizers.items():
            self._tasks.append(asyncio.create_task(self._run(sync), name=f"sync-{kind}"))
        self._log.info("registry started", kinds=len(self._tasks))
        return list(self._tasks)

    async def stop(self) -> None:
        """Cancel every synchronizer task and wait for them to finish."""
        for task in self._tasks:
            if not task.done():
                task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()
        self._log.info("registry stopped")

    async def _run(self, sync: Synchronizer) -> None:
        try:
            await sync.run()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self._log.error("synchronizer crashed", kind=sync.spec.kind, error=str(exc))

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    def kinds(self) -> list[str]:
        return list(self._caches)

    def cache(self, kind: str) -> SharedCache[Any]:
        try:
            return self._caches[kind]
        except KeyError:
            raise UnknownKindError(kind) from None

    def synchronizer(self, kind: str) -> Synchronizer:
        try:
            return self._synchronizers[kind]
        except KeyError:
            raise UnknownKindError(kind) from None

    def read(self, kind: str) -> tuple[CacheEntry, ...]:
        """Snapshot copy of the published entries of *kind*."""
        return self.cache(kind).read()

    def is_loading(self, kind: str) -> bool:
        return self.synchronizer(kind).loading

    def get(self, kind: str, name: str, namespace: str | None = None) -> CacheEntry | None:
        spec = self.synchronizer(kind).spec
        return self.cache(kind).get(Identity(kind, namespace if spec.namespaced else None, name))

    def status(self) -> dict[str, dict[str, Any]]:
        """Per-kind entry count, loading flag and synchronizer counters."""
        result: dict[str, dict[str, Any]] = {}
        for kind, sync in self._synchronizers.items():
            stats = sync.stats
            result[kind] = {
                "count": len(self._caches[kind]),
                "loading": sync.loading,
                "applied": stats.applied,
                "ignored": stats.ignored,
                "dropped": stats.dropped,
                "errors": stats.errors,
                "resyncs": stats.resyncs,
            }
        return result
