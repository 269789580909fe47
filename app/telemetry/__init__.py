"""Telemetry helpers and metrics."""

from .metrics import (
    ERROR_COUNTER,
    REMOTE_POLL_COUNTER,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    TRANSCRIPTION_COUNTER,
    observe_remote_poll,
    observe_request,
    observe_transcription,
)

__all__ = [
    "ERROR_COUNTER",
    "REMOTE_POLL_COUNTER",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "TRANSCRIPTION_COUNTER",
    "observe_remote_poll",
    "observe_request",
    "observe_transcription",
]
