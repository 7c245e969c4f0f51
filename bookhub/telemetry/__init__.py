"""Telemetry helpers and metrics."""

from .metrics import (
    ACCESS_DENIED_COUNTER,
    ERROR_COUNTER,
    LOGIN_COUNTER,
    REGISTRATION_COUNTER,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    increment_login,
    increment_registration,
    observe_request,
    record_access_denied,
)

__all__ = [
    "ACCESS_DENIED_COUNTER",
    "ERROR_COUNTER",
    "LOGIN_COUNTER",
    "REGISTRATION_COUNTER",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "increment_login",
    "increment_registration",
    "observe_request",
    "record_access_denied",
]
