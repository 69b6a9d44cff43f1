"""Monitoring configuration for the application."""
from prometheus_client import Counter, Histogram, start_http_server

# Sync metrics
sync_runs = Counter(
    "lernwort_sync_runs_total",
    "Total number of sync attempts",
    ["result"],
)

sync_duration = Histogram(
    "lernwort_sync_duration_seconds",
    "Duration of the pull and merge phases of a sync in seconds",
    buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0],
)

records_pulled = Counter(
    "lernwort_records_pulled_total",
    "Total number of records received from the remote store",
)

records_adopted = Counter(
    "lernwort_records_adopted_total",
    "Total number of remote records appended to the local collection",
)

# Push metrics
push_dispatches = Counter(
    "lernwort_push_dispatches_total",
    "Total number of push requests issued to the remote store",
    ["action", "result"],
)

# Speech metrics
speech_requests = Counter(
    "lernwort_speech_requests_total",
    "Total number of speak requests by the source that served them",
    ["source"],
)

speech_attempt_failures = Counter(
    "lernwort_speech_attempt_failures_total",
    "Total number of failed speech generation attempts",
)


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)
