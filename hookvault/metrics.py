"""
Prometheus metrics for the hookvault service.
"""
from prometheus_client import Counter, Histogram, Gauge, Info, CollectorRegistry


class Metrics:
    """
    Centralized metrics for the hookvault service.

    Each instance owns its registry so several apps can coexist in one
    process (tests build one app per case).
    """

    def __init__(self, service_name: str = "hookvault", version: str = "0.1.0", registry=None):
        self.service_name = service_name
        self.version = version
        self.registry = registry or CollectorRegistry()

        # HTTP Metrics
        self.http_requests_total = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["service", "method", "path", "status"],
            registry=self.registry,
        )

        self.http_request_duration = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["service", "method", "path"],
            registry=self.registry,
        )

        self.http_requests_active = Gauge(
            "http_requests_active",
            "Number of active HTTP requests",
            ["service"],
            registry=self.registry,
        )
        self.http_requests_active.labels(service=service_name).set(0)

        # Application Info
        self.app_info = Info(
            "app",
            "Application information",
            registry=self.registry,
        )
        self.app_info.info({"service": service_name, "version": version})

        self.app_up = Gauge(
            "app_up",
            "Application up status (1=up, 0=down)",
            ["service", "version"],
            registry=self.registry,
        )
        self.app_up.labels(service=service_name, version=version).set(1)

        # Business Metrics
        self.events_ingested_total = Counter(
            "hookvault_events_ingested_total",
            "Total webhook events persisted",
            registry=self.registry,
        )

        self.events_rejected_total = Counter(
            "hookvault_events_rejected_total",
            "Webhook events rejected before persistence",
            ["reason"],
            registry=self.registry,
        )

        self.event_size_bytes = Histogram(
            "hookvault_event_size_bytes",
            "Accepted webhook payload size in bytes",
            buckets=(64, 256, 1024, 4096, 16384, 65536),
            registry=self.registry,
        )

        self.events_deleted_total = Counter(
            "hookvault_events_deleted_total",
            "Delete calls issued by batch deletes",
            registry=self.registry,
        )

        self.store_errors_total = Counter(
            "hookvault_store_errors_total",
            "Key-value backend failures",
            ["operation"],
            registry=self.registry,
        )

        self.namespace_scan_keys = Histogram(
            "hookvault_namespace_scan_keys",
            "Keys examined per namespace discovery scan",
            buckets=(10, 100, 500, 1000, 2000, 5000),
            registry=self.registry,
        )

    def record_ingested(self, size_bytes: int):
        """Record a persisted event."""
        self.events_ingested_total.inc()
        self.event_size_bytes.observe(size_bytes)

    def record_rejected(self, reason: str):
        self.events_rejected_total.labels(reason=reason).inc()

    def record_store_error(self, operation: str):
        self.store_errors_total.labels(operation=operation).inc()
