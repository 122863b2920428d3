"""Prometheus metrics for ring buffer occupancy and throughput."""
from typing import Optional

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge
from prometheus_client import start_http_server as _start_http_server
import structlog

logger = structlog.get_logger()

_default_metrics = None


class BufferMetrics:
    """Counters and gauges shared by any number of named buffers."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """Register metrics.

        Args:
            registry: Collector registry (defaults to the global one; pass a
                fresh CollectorRegistry to keep instances isolated)
        """
        self.registry = registry if registry is not None else REGISTRY
        self.port: Optional[int] = None

        self.pushes = Counter(
            'ringbuf_push_total',
            'Elements pushed into the buffer',
            ['buffer'],
            registry=self.registry
        )

        self.pops = Counter(
            'ringbuf_pop_total',
            'Elements popped from the buffer',
            ['buffer'],
            registry=self.registry
        )

        self.rejected = Counter(
            'ringbuf_rejected_total',
            'Push or pop calls rejected because the buffer was full or empty',
            ['buffer', 'reason'],
            registry=self.registry
        )

        self.occupancy = Gauge(
            'ringbuf_occupancy',
            'Number of live elements in the buffer',
            ['buffer'],
            registry=self.registry
        )

        self.capacity = Gauge(
            'ringbuf_capacity',
            'Fixed capacity of the buffer',
            ['buffer'],
            registry=self.registry
        )

    def start_http_server(self, port: int) -> None:
        """Expose /metrics on ``port`` from a background thread.

        Args:
            port: Port for metrics HTTP server
        """
        if self.port == port:
            return

        try:
            _start_http_server(port, registry=self.registry)
            self.port = port
            logger.info("http_server_started", port=port, endpoints=["/metrics"])
        except OSError as e:
            if "Address already in use" in str(e):
                logger.warning("http_port_already_in_use", port=port)
            else:
                raise

    def record_push(self, buffer: str, count: int = 1) -> None:
        self.pushes.labels(buffer=buffer).inc(count)

    def record_pop(self, buffer: str, count: int = 1) -> None:
        self.pops.labels(buffer=buffer).inc(count)

    def record_rejected(self, buffer: str, reason: str) -> None:
        """Count a rejected operation.

        Args:
            buffer: Buffer name
            reason: "full" or "empty"
        """
        self.rejected.labels(buffer=buffer, reason=reason).inc()

    def set_occupancy(self, buffer: str, length: int) -> None:
        self.occupancy.labels(buffer=buffer).set(length)

    def set_capacity(self, buffer: str, maxlen: int) -> None:
        self.capacity.labels(buffer=buffer).set(maxlen)

    def validate_metrics(self) -> tuple[bool, list[str]]:
        """Check that all expected metrics are registered.

        Returns:
            Tuple of (all_present, missing_metrics)
        """
        metric_to_attr = {
            'ringbuf_push_total': 'pushes',
            'ringbuf_pop_total': 'pops',
            'ringbuf_rejected_total': 'rejected',
            'ringbuf_occupancy': 'occupancy',
            'ringbuf_capacity': 'capacity',
        }

        missing = []
        for metric_name, attr_name in metric_to_attr.items():
            if not hasattr(self, attr_name):
                missing.append(metric_name)
                logger.warning("metric_not_found", metric=metric_name, expected_attr=attr_name)

        return len(missing) == 0, missing

    def __repr__(self) -> str:
        return f"BufferMetrics(port={self.port})"


def get_default_metrics() -> BufferMetrics:
    """Return the process-wide BufferMetrics bound to the global registry."""
    global _default_metrics
    if _default_metrics is None:
        _default_metrics = BufferMetrics()
    return _default_metrics
