"""Prometheus metrics collector for the Ollama provider."""

import time
from dataclasses import dataclass, field

from prometheus_client import Counter, Gauge, Histogram

# Generation latency histogram with component and status labels
GENERATE_LATENCY = Histogram(
    "provider_generate_latency_seconds",
    "Total generation call latency in seconds",
    labelnames=["component", "status"],
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0),
)

# Tokens reported by Ollama's eval counts
TOKENS_GENERATED = Counter(
    "provider_tokens_generated_total",
    "Total tokens processed by the model server",
    labelnames=["component", "type"],  # type: prompt or completion
)

# Generation calls currently waiting on the model server
IN_FLIGHT = Gauge(
    "provider_generate_in_flight",
    "Generation calls in flight",
    labelnames=["component"],
)

LINKED_COMPONENTS = Gauge(
    "provider_linked_components",
    "Number of components currently linked",
)


@dataclass
class GenerateMetrics:
    """Metrics collected during a single generation call."""

    component: str
    start_time: float = field(default_factory=time.perf_counter)
    end_time: float | None = None
    prompt_tokens: int = 0
    completion_tokens: int = 0
    status: str = "success"

    def record_completion(
        self,
        prompt_tokens: int | None = None,
        completion_tokens: int | None = None,
        status: str = "success",
    ) -> None:
        """Record call completion.

        Args:
            prompt_tokens: Prompt tokens evaluated.
            completion_tokens: Tokens generated.
            status: Call status (success, error).
        """
        self.end_time = time.perf_counter()
        if prompt_tokens is not None:
            self.prompt_tokens = prompt_tokens
        if completion_tokens is not None:
            self.completion_tokens = completion_tokens
        self.status = status

    def emit(self) -> None:
        """Emit all collected metrics to Prometheus."""
        if self.end_time is None:
            self.end_time = time.perf_counter()

        GENERATE_LATENCY.labels(
            component=self.component, status=self.status
        ).observe(self.end_time - self.start_time)

        if self.prompt_tokens > 0:
            TOKENS_GENERATED.labels(component=self.component, type="prompt").inc(
                self.prompt_tokens
            )
        if self.completion_tokens > 0:
            TOKENS_GENERATED.labels(
                component=self.component, type="completion"
            ).inc(self.completion_tokens)


class MetricsCollector:
    """Coordinates metrics collection across the provider."""

    def start_generate(self, component: str) -> GenerateMetrics:
        """Start tracking a generation call.

        Args:
            component: Calling component identity.

        Returns:
            GenerateMetrics instance to track the call.
        """
        IN_FLIGHT.labels(component=component).inc()
        return GenerateMetrics(component=component)

    def end_generate(self, metrics: GenerateMetrics) -> None:
        """End call tracking and emit metrics."""
        IN_FLIGHT.labels(component=metrics.component).dec()
        metrics.emit()

    def set_linked(self, count: int) -> None:
        """Publish the number of linked components."""
        LINKED_COMPONENTS.set(count)
