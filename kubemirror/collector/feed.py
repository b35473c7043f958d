"""Change feeds: list-then-watch streams of change notifications for one kind.

A feed emits ``init``, one ``init_item`` per listed object and ``init_done``,
then translates watch events into ``upsert`` / ``delete``.  When the watch
resource version expires (410 Gone) the feed relists and emits a fresh
``init ... init_done`` sequence.  Transient failures are reported in-band as
``error`` notifications; the stream itself never ends on its own.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any, Protocol

import aiohttp
from kubernetes_asyncio import watch  # type: ignore[import-untyped]
from kubernetes_asyncio.client import ApiException  # type: ignore[import-untyped]

from kubemirror.models.resources import ChangeNotification
from kubemirror.observability.logging import get_logger

_HTTP_GONE = 410

ListFn = Callable[..., Awaitable[Any]]


class ChangeFeed(Protocol):
    """What a synchronizer consumes."""

    def stream(self) -> AsyncIterator[ChangeNotification]: ...

    async def list_all(self) -> list[dict[str, Any]]: ...


class _Relist(Exception):
    """Internal signal: the watch resource version is gone."""


class KubeChangeFeed:
    """List + watch feed backed by a kubernetes-asyncio list method.

    ``list_fn`` is a bound list method such as
    ``CoreV1Api.list_pod_for_all_namespaces``.  Listed models are serialized
    with ``api_client.sanitize_for_serialization`` so converters always see
    the camelCase wire format; watch events carry it already as
    ``raw_object``.
    """

    def __init__(
        self,
        kind: str,
        list_fn: ListFn,
        api_client: Any = None,
        *,
        watch_timeout_seconds: int = 290,
        initial_backoff: float = 1.0,
        max_backoff: float = 30.0,
        watch_factory: Callable[[], Any] = watch.Watch,
    ) -> None:
        self.kind = kind
        self._list_fn = list_fn
        self._api_client = api_client
        self._watch_timeout = watch_timeout_seconds
        self._initial_backoff = initial_backoff
        self._max_backoff = max_backoff
        self._watch_factory = watch_factory
        self._resource_version: str | None = None
        self._log = get_logger("feed", kind=kind)

    @property
    def resource_version(self) -> str | None:
        return self._resource_version

    async def list_all(self) -> list[dict[str, Any]]:
        """One-shot listing of the collection as raw payloads."""
        items, _ = await self._list()
        return items

    async def stream(self) -> AsyncIterator[ChangeNotification]:
        backoff = self._initial_backoff
        while True:
            try:
                if self._resource_version is None:
                    items, resource_version = await self._list()
                    self._log.info("listed", count=len(items), resource_version=resource_version)
                    yield ChangeNotification.init()
                    for item in items:
                        yield ChangeNotification.init_item(item)
                    yield ChangeNotification.init_done()
                    self._resource_version = resource_version or ""
                    backoff = self._initial_backoff
                async for notification in self._watch():
                    yield notification
                continue
            except _Relist:
                self._log.info("resource version expired; relisting")
                self._resource_version = None
                continue
            except ApiException as exc:
                if exc.status == _HTTP_GONE:
                    self._log.info("resource version expired; relisting")
                    self._resource_version = None
                    continue
                error = f"api error {exc.status}: {exc.reason}"
            except (aiohttp.ClientError, OSError, TimeoutError) as exc:
                error = f"{type(exc).__name__}: {exc}"
            except Exception as exc:
                # Undecodable list or watch payload; resync from a fresh list.
                self._resource_version = None
                error = f"{type(exc).__name__}: {exc}"

            self._log.warning("change feed failure", error=error, retry_in=backoff)
            yield ChangeNotification.failure(error)
            await asyncio.sleep(backoff)
            backoff = min(backoff * 2, self._max_backoff)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _list(self) -> tuple[list[dict[str, Any]], str | None]:
        response = self._to_raw(await self._list_fn())
        items = [item for item in response.get("items") or [] if isinstance(item, dict)]
        resource_version = (response.get("metadata") or {}).get("resourceVersion")
        return items, resource_version

    async def _watch(self) -> AsyncIterator[ChangeNotification]:
        """Yield notifications until the server closes the watch."""
        w = self._watch_factory()
        kwargs: dict[str, Any] = {
            "allow_watch_bookmarks": True,
            "timeout_seconds": self._watch_timeout,
        }
        if self._resource_version:
            kwargs["resource_version"] = self._resource_version
        try:
            async for event in w.stream(self._list_fn, **kwargs):
                notification = self._translate(event)
                if notification is not None:
                    yield notification
        finally:
            w.stop()

    def _translate(self, event: dict[str, Any]) -> ChangeNotification | None:
        event_type = event.get("type")
        raw = event.get("raw_object")
        if not isinstance(raw, dict):
            raw = self._to_raw(event.get("object"))

        if event_type == "ERROR":
            code = raw.get("code")
            if code == _HTTP_GONE:
                raise _Relist
            raise ApiException(status=code, reason=raw.get("message") or raw.get("reason"))

        resource_version = (raw.get("metadata") or {}).get("resourceVersion")
        if resource_version:
            self._resource_version = str(resource_version)

        if event_type in ("ADDED", "MODIFIED"):
            return ChangeNotification.upsert(raw)
        if event_type == "DELETED":
            return ChangeNotification.delete(raw)
        # BOOKMARK and unknown types only advance the resource version.
        return None

    def _to_raw(self, obj: Any) -> dict[str, Any]:
        if isinstance(obj, dict):
            return obj
        if obj is None or self._api_client is None:
            return {}
        raw = self._api_client.sanitize_for_serialization(obj)
        return raw if isinstance(raw, dict) else {}
