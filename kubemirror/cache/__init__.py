"""Cache layer for kubemirror.

Provides the per-kind in-memory mirrors fed by Kubernetes watch streams.

Submodules:
    buffer        -- BootstrapBuffer: invisible accumulation of a snapshot.
    shared_cache  -- SharedCache: lock-protected, identity-keyed entries with
                     field overlays for enrichment sources.
"""

from kubemirror.cache.buffer import BootstrapBuffer
from kubemirror.cache.shared_cache import SharedCache

__all__ = ["BootstrapBuffer", "SharedCache"]
