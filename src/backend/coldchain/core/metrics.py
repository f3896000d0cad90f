"""Prometheus metrics instrumentation."""

from prometheus_client import Counter, Histogram
from prometheus_fastapi_instrumentator import Instrumentator, metrics

# Store reads that raised
store_read_failures_total = Counter(
    "coldchain_store_read_failures_total",
    "Number of failed reads against the telemetry store",
    ["read"],
)

# Spreadsheet exports
reports_total = Counter(
    "coldchain_reports_total",
    "Number of report export requests",
    ["outcome"],
)

# History points before and after downsampling
history_points = Histogram(
    "coldchain_history_points",
    "Number of history points per request",
    ["stage"],
    buckets=[0, 10, 50, 100, 250, 500, 1000, 2500, 5000, 10000],
)


def setup_metrics(app) -> Instrumentator:
    """Set up Prometheus metrics instrumentation for FastAPI app."""
    instrumentator = Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        should_respect_env_var=True,
        should_instrument_requests_inprogress=True,
        excluded_handlers=["/health", "/health/live", "/health/ready", "/metrics"],
        env_var_name="METRICS_ENABLED",
        inprogress_name="http_requests_inprogress",
        inprogress_labels=True,
    )

    instrumentator.add(
        metrics.default(
            metric_namespace="",
            metric_subsystem="",
            latency_highr_buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
        )
    )

    instrumentator.add(
        metrics.response_size(
            metric_namespace="",
            metric_subsystem="",
            should_include_handler=True,
            should_include_method=True,
            should_include_status=True,
        )
    )

    instrumentator.instrument(app)

    return instrumentator


def expose_metrics(app, instrumentator: Instrumentator) -> None:
    """Expose the /metrics endpoint."""
    instrumentator.expose(app, include_in_schema=False, should_gzip=True)


# Helper functions for updating custom metrics


def record_store_read_failure(read: str) -> None:
    store_read_failures_total.labels(read=read).inc()


def record_report(outcome: str) -> None:
    """Count a report request by outcome (generated, empty, error)."""
    reports_total.labels(outcome=outcome).inc()


def observe_history_points(raw: int, kept: int) -> None:
    history_points.labels(stage="raw").observe(raw)
    history_points.labels(stage="downsampled").observe(kept)
