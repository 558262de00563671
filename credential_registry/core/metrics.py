"""Prometheus metric inventory for credential-registry.

All metrics are defined here; the modules that own a behaviour import the
metric they need and update it at the point of action.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by the MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, route template, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Registry metrics
# ---------------------------------------------------------------------------

REGISTRY_TRANSACTIONS = Counter(
    "registry_transactions_total",
    "Registry mutations by operation and outcome",
    # outcome: "committed" or a RegistryError code
    ["operation", "outcome"],
)

VERIFICATIONS = Counter(
    "registry_verifications_total",
    "Credential lookups by hash, by result",
    ["result"],  # valid|revoked|unknown
)

QUEUE_DEPTH = Gauge(
    "task_queue_depth",
    "Number of tasks waiting in a queue",
    ["queue_name"],
)
