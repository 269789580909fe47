"""Typed containers shared across the transcription pipeline.

These dataclasses live in their own module so the stages (`ingestion`,
`normalization`, `transcription`, `cleanup`) and the Gemini service can
import them without creating circular dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RemoteFileState(str, Enum):
    """Lifecycle of a file held by the remote file service."""

    PROCESSING = "PROCESSING"
    ACTIVE = "ACTIVE"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self is not RemoteFileState.PROCESSING


@dataclass(frozen=True)
class UploadedFile:
    """Upload persisted to temporary storage by the intake stage."""

    path: str
    mime_type: str
    original_name: str
    size_bytes: int

    @property
    def converted_path(self) -> str:
        """Where the normalizer writes (or would write) the MP3 artifact."""

        return f"{self.path}.mp3"


@dataclass(frozen=True)
class NormalizedFile:
    """File handed to the remote service, possibly the upload itself."""

    path: str
    mime_type: str


@dataclass(frozen=True)
class RemoteFileHandle:
    """Reference to a file accepted by the remote file service."""

    name: str
    uri: str
    mime_type: str
    state: RemoteFileState


@dataclass(frozen=True)
class TranscriptionResult:
    """Text produced by the generative model for one request."""

    text: str
