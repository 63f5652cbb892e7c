"""
Metrics Collection with Prometheus.

Counts simulated store calls so a test run can report what it exercised.
"""

from enum import Enum

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Info

from storesim.config import settings


class MetricLabels(str, Enum):
    """Standard metric label names."""

    METHOD = "method"
    OUTCOME = "outcome"
    PRODUCT_TYPE = "product_type"
    ERROR_TYPE = "error_type"


class SimulatorMetrics:
    """
    Centralized metrics for the store simulator.

    Covers:
    - Simulated calls (rate by method and outcome)
    - Purchases (rate by product type)
    - Reloads (success/failure)
    - Errors (by exception type)
    """

    def __init__(self, registry: CollectorRegistry = REGISTRY) -> None:
        """Initialize all Prometheus metrics."""
        self.enabled = settings.metrics_enabled

        self.service_info = Info(
            "storesim_service",
            "Service information",
            registry=registry,
        )
        self.service_info.info(
            {
                "version": settings.service_version,
                "service_name": settings.service_name,
            }
        )

        self.operations_total = Counter(
            "storesim_operations_total",
            "Total simulated store calls",
            [MetricLabels.METHOD, MetricLabels.OUTCOME],
            registry=registry,
        )

        self.purchases_total = Counter(
            "storesim_purchases_total",
            "Total successful simulated purchases",
            [MetricLabels.PRODUCT_TYPE],
            registry=registry,
        )

        self.reloads_total = Counter(
            "storesim_reloads_total",
            "Total simulator state reloads",
            ["success"],
            registry=registry,
        )

        self.errors_total = Counter(
            "storesim_errors_total",
            "Total errors by type",
            [MetricLabels.ERROR_TYPE, MetricLabels.METHOD],
            registry=registry,
        )

    def record_operation(self, method: str, outcome: str) -> None:
        """Record a simulated call and how it ended."""
        if self.enabled:
            self.operations_total.labels(method=method, outcome=outcome).inc()

    def record_purchase(self, product_type: str) -> None:
        """Record a successful simulated purchase ("App" for app purchases)."""
        if self.enabled:
            self.purchases_total.labels(product_type=product_type).inc()

    def record_reload(self, success: bool) -> None:
        """Record a state reload attempt."""
        if self.enabled:
            self.reloads_total.labels(success=str(success)).inc()

    def record_error(self, error_type: str, method: str) -> None:
        """Record error occurrence."""
        if self.enabled:
            self.errors_total.labels(error_type=error_type, method=method).inc()


# Global metrics instance
metrics = SimulatorMetrics()


class track_operation:
    """
    Context manager for tracking a simulated store call.

    Usage:
        with track_operation("RequestProductPurchaseAsync"):
            # ... simulate the call
    """

    def __init__(self, method: str) -> None:
        self.method = method

    def __enter__(self) -> "track_operation":
        return self

    def __exit__(self, exc_type: type | None, exc_val: BaseException | None, exc_tb: object) -> None:
        """Record metrics. Exceptions propagate."""
        if exc_type is None:
            metrics.record_operation(self.method, "success")
            return
        metrics.record_operation(self.method, "failure")
        metrics.record_error(exc_type.__name__, self.method)
