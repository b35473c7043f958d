"""Shared cache: the published, lock-protected entries of one kind.

The lock is a ``threading.Lock`` because the presentation layer may read
from another thread than the asyncio loop running the synchronizers.  No
method here is a coroutine, so the lock is never held across an ``await``.

Enrichment sources never overwrite entries directly.  Their fields are
stored as per-identity overlays and re-applied on top of every primary
write, which makes the outcome of a probe racing a watch update independent
of arrival order: the result is always the latest primary payload plus the
latest probe fields.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping
from dataclasses import replace
from typing import Any, Generic, TypeVar

from kubemirror.models.entries import CacheEntry
from kubemirror.models.resources import Identity, Overlay

E = TypeVar("E", bound=CacheEntry)


class SharedCache(Generic[E]):
    """Identity-keyed collection of entries for one kind."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self._entries: dict[Identity, E] = {}
        self._overlays: dict[Identity, dict[str, Overlay]] = {}
        self._revision = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    # ------------------------------------------------------------------
    # Writers (synchronizer and enrichment only)
    # ------------------------------------------------------------------

    def publish(self, entries: Iterable[E]) -> None:
        """Replace the whole contents in one critical section.

        Overlays survive for identities present in the new snapshot and are
        dropped for the rest.
        """
        fresh = {entry.identity: entry for entry in entries}
        with self._lock:
            self._overlays = {ident: ov for ident, ov in self._overlays.items() if ident in fresh}
            self._entries = {ident: self._with_overlays(ident, entry) for ident, entry in fresh.items()}

    def upsert(self, entry: E) -> bool:
        """Replace the entry with the same identity, or insert it.

        Returns True when the identity was not present before.
        """
        identity = entry.identity
        with self._lock:
            inserted = identity not in self._entries
            self._entries[identity] = self._with_overlays(identity, entry)
        return inserted

    def remove(self, identity: Identity) -> bool:
        """Remove the entry for *identity*.  Absence is not an error."""
        with self._lock:
            self._overlays.pop(identity, None)
            return self._entries.pop(identity, None) is not None

    def merge(self, identity: Identity, source: str, fields: Mapping[str, Any]) -> bool:
        """Merge *fields* owned by *source* into an existing entry.

        No-op (returns False) when the identity is no longer present.
        """
        with self._lock:
            current = self._entries.get(identity)
            if current is None:
                return False
            self._revision += 1
            self._overlays.setdefault(identity, {})[source] = Overlay(
                source=source, fields=dict(fields), revision=self._revision
            )
            self._entries[identity] = replace(current, **fields)
        return True

    # ------------------------------------------------------------------
    # Readers
    # ------------------------------------------------------------------

    def read(self) -> tuple[E, ...]:
        """Return a consistent snapshot of the current entries."""
        with self._lock:
            return tuple(self._entries.values())

    def get(self, identity: Identity) -> E | None:
        with self._lock:
            return self._entries.get(identity)

    def overlay(self, identity: Identity, source: str) -> Overlay | None:
        """Return the overlay *source* last merged for *identity*, if any."""
        with self._lock:
            return self._overlays.get(identity, {}).get(source)

    # ------------------------------------------------------------------
    # Internal helpers (caller holds the lock)
    # ------------------------------------------------------------------

    def _with_overlays(self, identity: Identity, entry: E) -> E:
        overlays = self._overlays.get(identity)
        if not overlays:
            return entry
        for overlay in sorted(overlays.values(), key=lambda o: o.revision):
            entry = replace(entry, **overlay.fields)
        return entry
