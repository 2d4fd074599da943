"""
Prometheus metrics for the redirect server.
"""
from prometheus_client import Counter, Histogram, Gauge, Info, CollectorRegistry, ProcessCollector


class Metrics:
    """
    Centralized metrics for the redirect server.
    """

    def __init__(self, service_name: str = "staticshort", version: str = "0.1.0", registry=None):
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

        # Redirect metrics
        self.rules_loaded = Gauge(
            "staticshort_rules_loaded",
            "Number of redirect rules loaded at startup",
            registry=self.registry,
        )

        self.routes_registered = Gauge(
            "staticshort_routes_registered",
            "Number of request paths bound to a redirect rule",
            registry=self.registry,
        )

        self.redirects_served_total = Counter(
            "staticshort_redirects_served_total",
            "Total redirect responses served",
            ["path", "mode"],
            registry=self.registry,
        )

        # Process metrics (cpu, memory, fds) on our own registry
        ProcessCollector(registry=self.registry)

    def set_rule_counts(self, rules: int, routes: int):
        """Record how many rules and routes were compiled at startup."""
        self.rules_loaded.set(rules)
        self.routes_registered.set(routes)

    def record_redirect_served(self, path: str, mode: str):
        """Record one redirect response for ``path`` ("header" or "html")."""
        self.redirects_served_total.labels(path=path, mode=mode).inc()

    def active_requests(self):
        """Gauge child tracking in-flight requests for this service."""
        return self.http_requests_active.labels(service=self.service_name)
