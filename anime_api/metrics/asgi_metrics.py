"""ASGI and webhook metrics."""

import os

from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, Counter, Gauge, Histogram, generate_latest
from starlette.requests import Request
from starlette.responses import Response

from anime_api.metrics.default_buckets import DEFAULT_BUCKETS
from anime_api.settings import settings

PREFIX = settings.metrics_prefix

REQUESTS = Counter(
    f"{PREFIX}_starlette_requests_total",
    "Total count of requests by method and path.",
    ["method", "path_template"],
)

RESPONSES = Counter(
    f"{PREFIX}_starlette_responses_total",
    "Total count of responses by method, path and status codes.",
    ["method", "path_template", "status_code"],
)

REQUESTS_PROCESSING_TIME = Histogram(
    f"{PREFIX}_starlette_requests_processing_time_seconds",
    "Histogram of requests processing time by path (in seconds)",
    ["method", "path_template"],
    buckets=DEFAULT_BUCKETS,
)

EXCEPTIONS = Counter(
    f"{PREFIX}_starlette_exceptions_total",
    "Total count of exceptions raised by path and exception type",
    ["method", "path_template", "exception_type"],
)

REQUESTS_IN_PROGRESS = Gauge(
    f"{PREFIX}_starlette_requests_in_progress",
    "Gauge of requests by method and path currently being processed",
    ["method", "path_template"],
)

NOTIFICATIONS_PUBLISHED = Counter(
    f"{PREFIX}_notifications_published_total",
    "Total count of notifications handed to the bus by notification type.",
    ["type"],
)

UPDATES_FAILED = Counter(
    f"{PREFIX}_updates_failed_total",
    "Total count of webhook updates that failed by error class.",
    ["error"],
)


def metrics_endpoint(request: Request) -> Response:  # noqa: ARG001
    """Expose the metrics in Prometheus text format.

    Args:
        request: The request.

    Returns:
        Response: The metrics.
    """
    # Multiprocess mode is only known after the worker process boots.
    from prometheus_client import CollectorRegistry  # noqa: PLC0415
    from prometheus_client import multiprocess as prom_mp  # noqa: PLC0415

    if "PROMETHEUS_MULTIPROC_DIR" in os.environ or "prometheus_multiproc_dir" in os.environ:
        registry = CollectorRegistry()
        prom_mp.MultiProcessCollector(registry)  # type: ignore
    else:
        registry = REGISTRY

    return Response(generate_latest(registry), headers={"Content-Type": CONTENT_TYPE_LATEST})
