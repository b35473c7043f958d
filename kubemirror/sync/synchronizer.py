"""Cache synchronizer: the per-kind state machine between a change feed and its cache.

States:
    BOOTSTRAPPING -- a snapshot is being transferred; readers keep seeing the
                     previously published contents (empty at startup).
    SYNCED        -- the snapshot was published; incremental upserts and
                     deletes are applied directly to the shared cache.

Transitions:
    start                       -> BOOTSTRAPPING
    init                        -> BOOTSTRAPPING, buffer cleared
    init_item  (BOOTSTRAPPING)  -> buffered
    init_done  (BOOTSTRAPPING)  -> buffer published in one swap, SYNCED
    upsert/delete (BOOTSTRAPPING) -> ignored
    upsert/delete (SYNCED)      -> applied in place
    error                       -> logged, state unchanged
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from kubemirror.cache.buffer import BootstrapBuffer
from kubemirror.cache.shared_cache import SharedCache
from kubemirror.models.entries import CacheEntry
from kubemirror.models.resources import (
    ChangeNotification,
    NotificationType,
    SyncState,
    SyncStats,
)
from kubemirror.observability.logging import get_logger

if TYPE_CHECKING:
    from kubemirror.collector.feed import ChangeFeed
    from kubemirror.sync.kinds import KindSpec


class Synchronizer:
    """Drives one kind's shared cache from its change feed.

    ``on_new_entries`` is called after every snapshot publish and after an
    upsert that inserted a previously unknown identity.
    """

    def __init__(
        self,
        spec: KindSpec,
        cache: SharedCache[Any],
        feed: ChangeFeed | None = None,
        *,
        warm_start: bool = True,
        on_new_entries: Callable[[], None] | None = None,
    ) -> None:
        self.spec = spec
        self.cache = cache
        self.stats = SyncStats()
        self._feed = feed
        self._warm_start = warm_start and spec.warm_start
        self._listeners: list[Callable[[], None]] = []
        if on_new_entries is not None:
            self._listeners.append(on_new_entries)
        self._buffer: BootstrapBuffer[CacheEntry] = BootstrapBuffer()
        self._state = SyncState.BOOTSTRAPPING
        self._published = False
        self._log = get_logger("synchronizer", kind=spec.kind)

    def add_listener(self, listener: Callable[[], None]) -> None:
        """Register a callback for new entries (see class docstring)."""
        self._listeners.append(listener)

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def loading(self) -> bool:
        """True exactly while a snapshot is being transferred."""
        return self._state is SyncState.BOOTSTRAPPING

    # ------------------------------------------------------------------
    # Feed consumption
    # ------------------------------------------------------------------

    async def run(self) -> None:
        """Consume the feed until it ends.

        A feed that ends leaves the cache frozen at its last state and the
        loading flag at its last value.
        """
        if self._feed is None:
            raise RuntimeError(f"synchronizer for {self.spec.kind} has no change feed")
        if self._warm_start:
            await self.warm_start()
        async for notification in self._feed.stream():
            self.apply(notification)
        self._log.warning(
            "change feed ended; cache frozen",
            loading=self.loading,
            count=len(self.cache),
        )

    async def warm_start(self) -> None:
        """Publish a one-shot listing before the first snapshot lands.

        Failure is non-fatal: the watch path remains authoritative.  The
        loading flag stays up until the feed's own ``init_done``.
        """
        assert self._feed is not None
        try:
            items = await self._feed.list_all()
        except Exception as exc:
            self._log.warning("warm start listing failed", error=str(exc))
            return
        if self._published:
            # Only reachable when called directly after a snapshot landed.
            return
        converted = [self._convert(item, count_drop=False) for item in items]
        warm = [entry for entry in converted if entry is not None]
        self.cache.publish(warm)
        self._log.info("warm start published", count=len(warm), skipped=len(items) - len(warm))
        self._notify()

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    def apply(self, notification: ChangeNotification) -> None:
        """Apply one notification.  Never raises for bad payloads."""
        kind = notification.type
        if kind is NotificationType.ERROR:
            self.stats.errors += 1
            self._log.warning("change feed error", error=notification.error)
        elif kind is NotificationType.INIT:
            self._begin_resync()
        elif kind is NotificationType.INIT_ITEM:
            self._buffer_item(notification)
        elif kind is NotificationType.INIT_DONE:
            self._publish()
        elif self._state is SyncState.BOOTSTRAPPING:
            self.stats.ignored += 1
        elif kind is NotificationType.UPSERT:
            self._upsert(notification)
        elif kind is NotificationType.DELETE:
            self._delete(notification)

    def _begin_resync(self) -> None:
        if self._state is SyncState.SYNCED:
            self.stats.resyncs += 1
            self._log.info("resync started", count=len(self.cache))
        self._buffer.clear()
        self._state = SyncState.BOOTSTRAPPING

    def _buffer_item(self, notification: ChangeNotification) -> None:
        if self._state is SyncState.SYNCED:
            self._log.debug("snapshot item without init; starting implicit resync")
            self._begin_resync()
        entry = self._convert(notification.raw)
        if entry is not None:
            self._buffer.add(entry)

    def _publish(self) -> None:
        if self._state is SyncState.SYNCED:
            self._log.debug("init_done without init ignored")
            self.stats.ignored += 1
            return
        snapshot = self._buffer.drain()
        self.cache.publish(snapshot)
        self._published = True
        self._state = SyncState.SYNCED
        self._log.info("snapshot published", count=len(snapshot))
        self._notify()

    def _upsert(self, notification: ChangeNotification) -> None:
        entry = self._convert(notification.raw)
        if entry is None:
            return
        inserted = self.cache.upsert(entry)
        self.stats.applied += 1
        if inserted:
            self._notify()

    def _delete(self, notification: ChangeNotification) -> None:
        identity = notification.identity
        if identity is None and notification.raw is not None:
            identity = self.spec.identity_of(notification.raw)
        if identity is None:
            self.stats.dropped += 1
            return
        self.cache.remove(identity)
        self.stats.applied += 1

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _convert(self, raw: dict[str, Any] | None, *, count_drop: bool = True) -> CacheEntry | None:
        entry: CacheEntry | None = None
        if isinstance(raw, dict):
            try:
                entry = self.spec.convert(raw)
            except (AttributeError, KeyError, TypeError, ValueError) as exc:
                self._log.debug("conversion failed", error=str(exc))
        if entry is None and count_drop:
            self.stats.dropped += 1
        return entry

    def _notify(self) -> None:
        for listener in self._listeners:
            listener()
