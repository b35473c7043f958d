"""Per-kind synchronizers and the registry that owns them."""

from kubemirror.sync.kinds import KINDS, KindSpec
from kubemirror.sync.registry import Registry, UnknownKindError
from kubemirror.sync.synchronizer import Synchronizer

__all__ = ["KINDS", "KindSpec", "Registry", "Synchronizer", "UnknownKindError"]
