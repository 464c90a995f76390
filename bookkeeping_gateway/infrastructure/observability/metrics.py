"""Prometheus metrics for monitoring review throughput and hosted-database performance"""

from prometheus_client import Counter, Histogram

# Transition metrics
transition_counter = Counter(
    "bookkeeping_transition_total",
    "Bulk status transitions run",
    ["target", "outcome"],  # APPROVED | REJECTED ; success | failure | partial
)

transitioned_items_counter = Counter(
    "bookkeeping_transitioned_items_total",
    "Transactions moved to a terminal status",
    ["target"],
)

# Hosted database metrics
remote_update_latency_histogram = Histogram(
    "remote_update_latency_seconds",
    "Per-transaction status update response time",
    ["kind"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

remote_update_failures_counter = Counter(
    "remote_update_failures_total",
    "Failed per-transaction status updates",
    ["kind"],  # Income | Expense
)

remote_delete_failures_counter = Counter(
    "remote_delete_failures_total",
    "Failed per-row deletes",
    ["table"],
)

remote_fetch_failures_counter = Counter(
    "remote_fetch_failures_total",
    "Failed reads from the hosted database",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_transition(target: str, processed_count: int, failed_count: int) -> None:
    """Record the outcome of one bulk transition"""
    if failed_count == 0:
        outcome = "success"
    elif processed_count > 0:
        outcome = "partial"
    else:
        outcome = "failure"

    transition_counter.labels(target=target, outcome=outcome).inc()
    if processed_count:
        transitioned_items_counter.labels(target=target).inc(processed_count)
