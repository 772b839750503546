from __future__ import annotations

from typing import NamedTuple

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest
from prometheus_client.exposition import CONTENT_TYPE_LATEST

from app.brandlog.core.config import settings

LATENCY_BUCKETS_MS = (5, 10, 25, 50, 100, 250, 500, 1000, 2500, 5000, 10000)
_HTTP_LABELS = ("route", "method", "status")


class MetricsSnapshot(NamedTuple):
    content: bytes
    content_type: str


class Metrics:
    """Prometheus instruments on a private registry.

    With metrics disabled nothing is registered and every recorder is a no-op.
    """

    def __init__(self, enabled: bool | None = None) -> None:
        self.enabled = settings.METRICS_ENABLED if enabled is None else enabled
        self.registry: CollectorRegistry | None = None
        if not self.enabled:
            return
        self.registry = CollectorRegistry()
        self.requests = Counter(
            "http_requests_total",
            "HTTP requests by route/method/status.",
            _HTTP_LABELS,
            registry=self.registry,
        )
        self.latency = Histogram(
            "http_request_duration_ms",
            "HTTP request latency in milliseconds.",
            _HTTP_LABELS,
            buckets=LATENCY_BUCKETS_MS,
            registry=self.registry,
        )
        self.denials = Counter(
            "access_denied_total",
            "Authorization denials by error code.",
            ("code",),
            registry=self.registry,
        )
        self.export_rows = Counter(
            "export_rows_total",
            "Login event rows streamed to CSV exports.",
            registry=self.registry,
        )

    def record_http_request(self, *, route: str, method: str, status_code: int, latency_ms: float) -> None:
        if self.enabled:
            labels = (route, method, str(status_code))
            self.requests.labels(*labels).inc()
            self.latency.labels(*labels).observe(latency_ms)

    def increment_access_denied(self, code: str) -> None:
        if self.enabled:
            self.denials.labels(code).inc()

    def increment_export_rows(self, count: int) -> None:
        if self.enabled and count > 0:
            self.export_rows.inc(count)

    def render(self) -> MetricsSnapshot:
        if not self.enabled:
            return MetricsSnapshot(b"metrics_disabled\n", "text/plain")
        return MetricsSnapshot(generate_latest(self.registry), CONTENT_TYPE_LATEST)


metrics = Metrics()
