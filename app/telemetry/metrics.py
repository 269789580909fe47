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
    buckets=(
        0.005,
        0.01,
        0.025,
        0.05,
        0.1,
        0.25,
        0.5,
        1.0,
        2.5,
        5.0,
        10.0,
        30.0,
        60.0,
        120.0,
        300.0,
    ),
)

TRANSCRIPTION_COUNTER = Counter(
    "asr_transcriptions_total",
    "Transcription requests by endpoint and outcome",
    ("endpoint", "outcome"),
)

REMOTE_POLL_COUNTER = Counter(
    "asr_remote_status_checks_total",
    "Status requests issued to the remote file service, by observed state",
    ("state",),
)

ERROR_COUNTER = Counter(
    "app_internal_errors_total",
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
    status_label = str(status_code)
    observed_duration = duration_seconds if duration_seconds >= 0 else 0

    REQUEST_COUNT.labels(
        method=safe_method,
        route=safe_route,
        status=status_label,
    ).inc()
    REQUEST_LATENCY.labels(
        method=safe_method,
        route=safe_route,
    ).observe(observed_duration)

    if status_code >= 500:
        ERROR_COUNTER.labels(
            method=safe_method,
            route=safe_route,
        ).inc()


def observe_transcription(endpoint: str, outcome: str) -> None:
    """Record the outcome (success, rejected, failed) of one transcription request."""

    TRANSCRIPTION_COUNTER.labels(endpoint=endpoint, outcome=outcome).inc()


def observe_remote_poll(state: str) -> None:
    """Record one status check against the remote file service."""

    REMOTE_POLL_COUNTER.labels(state=state or "UNKNOWN").inc()
