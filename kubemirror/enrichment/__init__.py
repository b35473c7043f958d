"""Enrichment sources that merge extra fields into cached entries."""

from kubemirror.enrichment.node_metrics import NodeMetricsEnricher, NodeMetricsProbe

__all__ = ["NodeMetricsEnricher", "NodeMetricsProbe"]
