"""Prometheus metrics for the Ollama provider."""

from provider.metrics.collector import (
    GENERATE_LATENCY,
    IN_FLIGHT,
    LINKED_COMPONENTS,
    TOKENS_GENERATED,
    GenerateMetrics,
    MetricsCollector,
)

__all__ = [
    "MetricsCollector",
    "GenerateMetrics",
    "GENERATE_LATENCY",
    "TOKENS_GENERATED",
    "IN_FLIGHT",
    "LINKED_COMPONENTS",
]
