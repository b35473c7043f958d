"""Application bootstrap for kubemirror.

Wires all components in dependency order and manages the asyncio lifecycle.
Startup order: config → logging → K8s client → registry (feeds + synchronizers)
              → node metrics enrichment → status reporter

Shutdown is graceful: background tasks are cancelled first, then the
registry, then the Kubernetes client.  Each step's error is caught and logged
independently so a single failure does not prevent the rest from stopping.
"""

from __future__ import annotations

import asyncio
import signal
from typing import TYPE_CHECKING, Any

from kubemirror.config import load_config
from kubemirror.models.config import KubeMirrorConfig
from kubemirror.observability.logging import get_logger, setup_logging
from kubemirror.overview import compute_overview_stats

if TYPE_CHECKING:
    import structlog

    from kubemirror.sync.registry import Registry

_SHUTDOWN_GRACE_SECONDS = 15


class _ComponentError(Exception):
    """Raised when a mandatory component fails to start."""

    def __init__(self, component: str, cause: Exception) -> None:
        super().__init__(f"Component '{component}' failed to start: {cause}")
        self.component = component
        self.cause = cause


class KubeMirrorApp:
    """Application root.  Owns every component and coordinates their lifecycle.

    ``stop()`` on an app that was never started (or already stopped) is safe.
    """

    def __init__(self) -> None:
        self.config: KubeMirrorConfig | None = None
        self.registry: Registry | None = None

        self._api_client: Any = None
        self._node_metrics: object | None = None

        # Background tasks that must be cancelled on shutdown
        self._background_tasks: list[asyncio.Task[None]] = []

        self._running = False
        self._log: structlog.stdlib.BoundLogger | None = None

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start all components in dependency order.

        Raises _ComponentError if a mandatory component cannot start.
        """
        # --- 1. Configuration -------------------------------------------
        self.config = load_config()

        # --- 2. Logging -------------------------------------------------
        setup_logging(self.config.log.level)
        self._log = get_logger("app")
        self._log.info("kubemirror starting", version=_kubemirror_version())

        # --- 3. Kubernetes client ----------------------------------------
        await self._start_k8s_client()

        # --- 4. Registry -------------------------------------------------
        await self._start_registry()

        # --- 5. Node metrics enrichment (optional) ------------------------
        await self._start_node_metrics()

        # --- 6. Status reporter (optional) --------------------------------
        await self._start_status_reporter()

        self._running = True
        assert self.registry is not None
        self._log.info("kubemirror started", kinds=len(self.registry.kinds()))

    async def _start_k8s_client(self) -> None:
        """Initialise the kubernetes-asyncio client from in-cluster config or kubeconfig."""
        assert self._log is not None
        self._log.debug("starting k8s client")
        try:
            import kubernetes_asyncio.config as k8s_config  # type: ignore[import-untyped]
            from kubernetes_asyncio import client as k8s_client  # type: ignore[import-untyped]

            try:
                # load_incluster_config() is synchronous in kubernetes-asyncio
                k8s_config.load_incluster_config()
                self._log.info("k8s client configured from in-cluster service account")
            except k8s_config.ConfigException:
                # load_kube_config() is async in kubernetes-asyncio
                await k8s_config.load_kube_config()
                self._log.info("k8s client configured from kubeconfig")

            self._api_client = k8s_client.ApiClient()
        except Exception as exc:
            raise _ComponentError("k8s_client", exc) from exc

    async def _start_registry(self) -> None:
        """Build one feed, cache and synchronizer per kind and start the sync tasks."""
        assert self._log is not None
        assert self.config is not None
        self._log.debug("starting registry")
        try:
            from kubemirror.collector.apis import build_feeds
            from kubemirror.sync.kinds import KINDS
            from kubemirror.sync.registry import Registry

            kinds = self.config.kinds or list(KINDS)
            feeds = build_feeds(kinds, self._api_client, self.config.feed)
            registry = Registry(feeds, kinds, warm_start=self.config.feed.warm_start)
            registry.start()
            self.registry = registry
            self._log.info("registry started", kinds=kinds)
        except Exception as exc:
            raise _ComponentError("registry", exc) from exc

    async def _start_node_metrics(self) -> None:
        """Start the node metrics enricher.

        Non-fatal: without it nodes are listed without usage figures.
        """
        assert self._log is not None
        assert self.config is not None
        assert self.registry is not None
        cfg = self.config.node_metrics
        if not cfg.enabled or "Node" not in self.registry.kinds():
            self._log.info("node metrics disabled")
            return
        try:
            from kubernetes_asyncio import client as k8s_client  # type: ignore[import-untyped]

            from kubemirror.enrichment.node_metrics import NodeMetricsEnricher, NodeMetricsProbe

            probe = NodeMetricsProbe(
                k8s_client.CoreV1Api(self._api_client),
                timeout_seconds=cfg.probe_timeout_seconds,
                sample_gap_seconds=cfg.sample_gap_seconds,
            )
            enricher = NodeMetricsEnricher(
                self.registry.cache("Node"),
                probe,
                interval_seconds=cfg.interval_seconds,
                max_concurrency=cfg.max_concurrency,
            )
            self.registry.synchronizer("Node").add_listener(enricher.request_refresh)
            task = asyncio.create_task(enricher.run(), name="node-metrics")
            self._background_tasks.append(task)
            self._node_metrics = enricher
            self._log.info("node metrics started", interval=cfg.interval_seconds)
        except Exception as exc:
            self._log.warning("node metrics failed to start; usage disabled", error=str(exc))
            self._node_metrics = None

    async def _start_status_reporter(self) -> None:
        """Log a per-kind status line and the overview counters periodically."""
        assert self._log is not None
        assert self.config is not None
        interval = self.config.status_interval_seconds
        if interval <= 0:
            return

        registry = self.registry
        log = get_logger("status")

        async def _report() -> None:
            while True:
                await asyncio.sleep(interval)
                try:
                    assert registry is not None
                    for kind, status in registry.status().items():
                        log.info("kind status", kind=kind, **status)
                    log.info("overview", **compute_overview_stats(registry).to_dict())
                except Exception as exc:
                    log.warning("status report failed", error=str(exc))

        task = asyncio.create_task(_report(), name="status-reporter")
        self._background_tasks.append(task)
        self._log.info("status reporter started", interval=interval)

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def stop(self) -> None:
        """Gracefully stop all components in reverse startup order."""
        if not self._running and self._log is None:
            # Never started
            return

        log = self._log or get_logger("app")
        log.info("kubemirror shutting down")

        self._running = False

        for task in reversed(self._background_tasks):
            if not task.done():
                task.cancel()
        if self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)
        self._background_tasks.clear()
        self._node_metrics = None

        if self.registry is not None:
            try:
                await asyncio.wait_for(self.registry.stop(), timeout=_SHUTDOWN_GRACE_SECONDS)
            except TimeoutError:
                log.warning("registry stop timed out", timeout=_SHUTDOWN_GRACE_SECONDS)
            except Exception as exc:
                log.error("registry stop raised an error", error=str(exc))

        await self._stop_k8s_client()
        log.info("kubemirror stopped")

    async def _stop_k8s_client(self) -> None:
        """Close the kubernetes-asyncio ApiClient connection pool."""
        if self._api_client is None:
            return
        log = self._log or get_logger("app")
        try:
            await self._api_client.close()
        except Exception as exc:
            log.debug("k8s client close raised (non-fatal)", error=str(exc))
        self._api_client = None


def _kubemirror_version() -> str:
    from kubemirror import __version__

    return __version__


# ---------------------------------------------------------------------------
# Async entrypoint
# ---------------------------------------------------------------------------


async def main() -> None:
    """Create the app, register OS signals, run until shutdown is requested."""
    app = KubeMirrorApp()
    loop = asyncio.get_running_loop()

    shutdown_triggered = False

    def _request_shutdown() -> None:
        nonlocal shutdown_triggered
        if shutdown_triggered:
            return
        shutdown_triggered = True
        asyncio.create_task(app.stop(), name="shutdown")

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, _request_shutdown)

    try:
        await app.start()
        # Block until shutdown is triggered (background tasks run concurrently)
        while app._running:
            await asyncio.sleep(1)
    except _ComponentError as exc:
        log = get_logger("app")
        log.critical(
            "fatal startup error",
            component=exc.component,
            error=str(exc.cause),
        )
        await app.stop()
        raise SystemExit(1) from exc
    finally:
        if app._running:
            await app.stop()
