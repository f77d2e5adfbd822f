"""Prometheus metrics for monitoring submissions, eligibility changes and webhook performance"""

from prometheus_client import Counter, Histogram

# Submission metrics
submission_counter = Counter(
    "sales_submission_total",
    "Purchase submissions by outcome",
    ["outcome", "destination"],  # accepted | rejected | failed ; create | update
)

status_change_counter = Counter(
    "sales_client_status_change_total",
    "Client eligibility changes",
    ["trigger", "status"],  # reviewer | post_create ; apto | no_apto
)

cascade_failure_counter = Counter(
    "sales_post_create_cascade_failures_total",
    "Failed automatic eligibility locks after a successful creation",
)

# Webhook metrics
webhook_latency_histogram = Histogram(
    "webhook_latency_seconds",
    "Remote store webhook response time",
    ["operation"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

webhook_failure_counter = Counter(
    "webhook_failures_total",
    "Failed webhook calls",
    ["operation"],
)

fetch_parse_failures_counter = Counter(
    "fetch_parse_failures_total",
    "List responses that matched no known shape",
    ["operation"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_submission(outcome: str, created: bool) -> None:
    """Record one pipeline outcome"""
    destination = "create" if created else "update"
    submission_counter.labels(outcome=outcome, destination=destination).inc()


def record_status_change(trigger: str, status: str) -> None:
    status_change_counter.labels(trigger=trigger, status=status).inc()
