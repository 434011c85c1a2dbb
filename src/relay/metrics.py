"""Prometheus metrics for relay observability.

Metrics Defined:
- relay_registrations_total{outcome}: repository registrations
- relay_webhook_deliveries_total{outcome}: webhook deliveries by result
- relay_build_triggers_total{outcome}: Jenkins build trigger attempts

Each RelayMetrics instance owns its own registry so tests can build
isolated instances without colliding on metric names.
"""

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, generate_latest


REGISTRATION_OUTCOMES = ("success", "client_error", "remote_error", "error")

DELIVERY_OUTCOMES = (
    "ignored",
    "processed",
    "not_registered",
    "invalid_signature",
    "error",
)

TRIGGER_OUTCOMES = ("success", "failure")


class RelayMetrics:
    """Container for the relay's Prometheus counters."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry if registry is not None else CollectorRegistry()

        self.registrations = Counter(
            "relay_registrations_total",
            "Repository registrations by outcome",
            ["outcome"],
            registry=self.registry,
        )
        self.deliveries = Counter(
            "relay_webhook_deliveries_total",
            "GitHub webhook deliveries by outcome",
            ["outcome"],
            registry=self.registry,
        )
        self.build_triggers = Counter(
            "relay_build_triggers_total",
            "Jenkins build trigger attempts by outcome",
            ["outcome"],
            registry=self.registry,
        )

        # Pre-create label sets so every series is exported from the start
        for outcome in REGISTRATION_OUTCOMES:
            self.registrations.labels(outcome=outcome)
        for outcome in DELIVERY_OUTCOMES:
            self.deliveries.labels(outcome=outcome)
        for outcome in TRIGGER_OUTCOMES:
            self.build_triggers.labels(outcome=outcome)

    def record_registration(self, outcome: str) -> None:
        self.registrations.labels(outcome=outcome).inc()

    def record_delivery(self, outcome: str) -> None:
        self.deliveries.labels(outcome=outcome).inc()

    def record_build_trigger(self, success: bool) -> None:
        self.build_triggers.labels(outcome="success" if success else "failure").inc()

    def export(self) -> bytes:
        """Render all metrics in Prometheus text format."""
        return generate_latest(self.registry)
