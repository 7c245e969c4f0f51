"""Prometheus metrics definitions and helpers."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests processed",
    ("method", "route", "status"),
)

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ("method", "route"),
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

LOGIN_COUNTER = Counter(
    "bookhub_logins_total",
    "Number of successful user logins",
)

REGISTRATION_COUNTER = Counter(
    "bookhub_registrations_total",
    "Number of accounts created through the register endpoint",
)

ACCESS_DENIED_COUNTER = Counter(
    "bookhub_access_denied_total",
    "Requests rejected by an access-control decision",
    ("operation", "outcome"),
)

ERROR_COUNTER = Counter(
    "bookhub_internal_errors_total",
    "Number of requests ending in internal server error responses",
    ("method", "route"),
)


def observe_request(
    method: str,
    route: str,
    status_code: int,
    duration_seconds: float,
) -> None:
    """Record metrics for a completed HTTP request."""

    safe_route = route or "unknown"
    safe_method = method or "UNKNOWN"

    REQUEST_COUNT.labels(
        method=safe_method,
        route=safe_route,
        status=str(status_code),
    ).inc()
    REQUEST_LATENCY.labels(
        method=safe_method,
        route=safe_route,
    ).observe(max(duration_seconds, 0))

    if status_code >= 500:
        ERROR_COUNTER.labels(method=safe_method, route=safe_route).inc()


def increment_login() -> None:
    LOGIN_COUNTER.inc()


def increment_registration() -> None:
    REGISTRATION_COUNTER.inc()


def record_access_denied(operation: str, outcome: str) -> None:
    ACCESS_DENIED_COUNTER.labels(operation=operation, outcome=outcome).inc()
