"""Pydantic schemas used as views in the MVC architecture."""

from .asr import ProcessingErrorResponse, TranscriptionResponse, TranslationResponse
from .health import HealthResponse

__all__ = [
    "HealthResponse",
    "ProcessingErrorResponse",
    "TranscriptionResponse",
    "TranslationResponse",
]
