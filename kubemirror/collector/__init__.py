"""Change feeds over the Kubernetes list and watch API."""

from kubemirror.collector.apis import KIND_APIS, build_feeds
from kubemirror.collector.feed import ChangeFeed, KubeChangeFeed

__all__ = ["KIND_APIS", "ChangeFeed", "KubeChangeFeed", "build_feeds"]
