"""Error taxonomy for the transcription pipeline.

Every error carries the HTTP status the controller answers with and a
``public_message`` that is safe to return to clients.
"""

from __future__ import annotations

from fastapi import status


class PipelineError(Exception):
    """Base class for failures raised while handling an upload."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error: str = "Processing failed"

    def __init__(self, message: str, cause: Exception | None = None):
        self.cause = cause
        super().__init__(message)

    @property
    def public_message(self) -> str:
        return str(self)


class IntakeError(PipelineError):
    """Raised while the multipart body is read; nothing reaches the remote service."""


class RequestValidationError(IntakeError):
    """Raised when the upload is missing, empty or of a disallowed type."""

    status_code = status.HTTP_400_BAD_REQUEST
    error = "Invalid or missing file"


class MalformedUploadError(IntakeError):
    """Raised when the multipart body cannot be parsed."""


class FileTooLargeError(IntakeError):
    """Raised when the upload exceeds the endpoint byte limit."""

    def __init__(self, limit_bytes: int):
        self.limit_bytes = limit_bytes
        super().__init__(f"Upload exceeds the {limit_bytes} byte limit")


class TranscodeError(PipelineError):
    """Raised when ffmpeg fails to convert the upload to MP3."""

    def __init__(self, path: str, reason: str, cause: Exception | None = None):
        self.path = path
        self.reason = reason
        super().__init__(f"Audio conversion failed: {reason}", cause=cause)

    @property
    def public_message(self) -> str:
        return "Audio conversion failed"


class RemoteProcessingError(PipelineError):
    """Raised when the remote file service reports the file as FAILED."""


class RemoteTimeoutError(RemoteProcessingError):
    """Raised when the remote file stays in PROCESSING past the poll budget."""

    def __init__(self, file_name: str, attempts: int):
        self.file_name = file_name
        self.attempts = attempts
        super().__init__(
            f"Remote file '{file_name}' still processing after {attempts} status checks"
        )


class TransportError(PipelineError):
    """Raised when a call to the remote AI service fails."""

    def __init__(self, operation: str, cause: Exception | None = None):
        self.operation = operation
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Remote {operation} failed{detail}", cause=cause)

    @property
    def public_message(self) -> str:
        return f"Remote {self.operation} failed"


class AdmissionRejectedError(PipelineError):
    """Raised when no pipeline slot frees up within the admission timeout."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error = "Server busy"

    def __init__(self, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(f"No transcription slot available within {timeout_seconds}s")


__all__ = [
    "AdmissionRejectedError",
    "FileTooLargeError",
    "IntakeError",
    "MalformedUploadError",
    "PipelineError",
    "RemoteProcessingError",
    "RemoteTimeoutError",
    "RequestValidationError",
    "TranscodeError",
    "TransportError",
]
