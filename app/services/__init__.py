"""Service layer helpers for external integrations."""

from .admission import AdmissionController, get_admission_controller
from .gemini import GeminiFileService, get_gemini_service
from .transcoder import FfmpegTranscoder, get_transcoder

__all__ = [
    "AdmissionController",
    "get_admission_controller",
    "GeminiFileService",
    "get_gemini_service",
    "FfmpegTranscoder",
    "get_transcoder",
]
