"""Monitoring configuration for the quiz bot."""
from prometheus_client import Counter, Gauge, start_http_server

# Quiz metrics
answers_total = Counter(
    "rangequiz_answers_total",
    "Total number of submitted answers",
    ["result"],
)

misses_recorded = Counter(
    "rangequiz_misses_recorded_total",
    "Total number of misses written to the progress store",
)

items_loaded = Gauge(
    "rangequiz_items_loaded",
    "Number of hands loaded from the reference table by the last bootstrap",
)

# Error metrics
bootstrap_failures = Counter(
    "rangequiz_bootstrap_failures_total",
    "Total number of failed quiz bootstraps",
    ["error_type"],
)

progress_resets = Counter(
    "rangequiz_progress_resets_total",
    "Total number of times stored progress was unreadable and reset",
)

persistence_errors = Counter(
    "rangequiz_persistence_errors_total",
    "Total number of failed progress writes",
)


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)
