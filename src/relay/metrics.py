"""Prometheus metrics for the relay.

Metrics Defined:
- relay_webhooks_total{outcome}: Counter of inbound webhooks by outcome
- relay_feishu_delivery_seconds: Histogram of Feishu POST latency

Metrics are registered on the default registry and exposed at ``/metrics``.
"""

from prometheus_client import REGISTRY, Counter, Histogram, generate_latest


class Outcome:
    """Label values for relay_webhooks_total."""

    PROCESSED = "processed"
    IGNORED = "ignored"
    UNAUTHORIZED = "unauthorized"
    MALFORMED = "malformed"
    DELIVERY_FAILED = "delivery_failed"
    ERROR = "error"


# Delivery should finish well inside the client timeout
DELIVERY_BUCKETS = (0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)

WEBHOOKS_TOTAL = Counter(
    "relay_webhooks_total",
    "Inbound GitHub webhooks by outcome",
    ["outcome"],
)

FEISHU_DELIVERY_SECONDS = Histogram(
    "relay_feishu_delivery_seconds",
    "Time spent posting messages to Feishu",
    buckets=DELIVERY_BUCKETS,
)


def record_outcome(outcome: str) -> None:
    """Increment the webhook counter for an outcome."""
    WEBHOOKS_TOTAL.labels(outcome=outcome).inc()


def render_metrics() -> bytes:
    """Render the default registry in Prometheus text format."""
    return generate_latest(REGISTRY)
