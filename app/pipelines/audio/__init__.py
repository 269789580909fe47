"""Transcription pipeline package.

Modules are organised by the order in which `/api/asr/*` executes:

1. `ingestion` – validate the multipart upload and store it on disk.
2. `normalization` – convert video / WebM uploads to MP3.
3. `transcription` – upload, poll and transcribe via the remote service.
4. `cleanup` – remove temporary artifacts.
5. `flow` – human-readable description of the end-to-end stages.

The FastAPI controller imports from here so contributors can jump straight
to the relevant stage.
"""

from .cleanup import cleanup_paths, cleanup_upload
from .errors import (
    AdmissionRejectedError,
    FileTooLargeError,
    IntakeError,
    MalformedUploadError,
    PipelineError,
    RemoteProcessingError,
    RemoteTimeoutError,
    RequestValidationError,
    TranscodeError,
    TransportError,
)
from .flow import PipelineStage, TranscriptionFlow
from .ingestion import (
    AUDIO_CONTENT_TYPES,
    MEDIA_CONTENT_TYPES,
    ensure_content_length_within,
    receive_upload,
    store_upload,
)
from .interfaces import RemoteFileServiceInterface, TranscoderInterface
from .normalization import NORMALIZED_MIME_TYPE, needs_conversion, normalize_media
from .transcription import TranscriptionPipeline
from .types import (
    NormalizedFile,
    RemoteFileHandle,
    RemoteFileState,
    TranscriptionResult,
    UploadedFile,
)

__all__ = [
    "AUDIO_CONTENT_TYPES",
    "MEDIA_CONTENT_TYPES",
    "NORMALIZED_MIME_TYPE",
    "AdmissionRejectedError",
    "FileTooLargeError",
    "IntakeError",
    "MalformedUploadError",
    "NormalizedFile",
    "PipelineError",
    "PipelineStage",
    "RemoteFileHandle",
    "RemoteFileServiceInterface",
    "RemoteFileState",
    "RemoteProcessingError",
    "RemoteTimeoutError",
    "RequestValidationError",
    "TranscodeError",
    "TranscoderInterface",
    "TranscriptionFlow",
    "TranscriptionPipeline",
    "TranscriptionResult",
    "TransportError",
    "UploadedFile",
    "cleanup_paths",
    "cleanup_upload",
    "ensure_content_length_within",
    "needs_conversion",
    "normalize_media",
    "receive_upload",
    "store_upload",
]
