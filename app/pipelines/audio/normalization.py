"""Media normalization stage (Stage 02) of the transcription pipeline."""

from __future__ import annotations

import logging

from .interfaces import TranscoderInterface
from .types import NormalizedFile, UploadedFile

logger = logging.getLogger("app.services.audio_pipeline")

NORMALIZED_MIME_TYPE = "audio/mp3"


def needs_conversion(mime_type: str) -> bool:
    """Video containers and WebM audio are converted; other audio passes through."""

    return mime_type.startswith("video/") or mime_type == "audio/webm"


async def normalize_media(
    uploaded: UploadedFile,
    transcoder: TranscoderInterface,
) -> NormalizedFile:
    """Convert the upload to MP3 when required, otherwise return it unchanged."""

    if not needs_conversion(uploaded.mime_type):
        return NormalizedFile(path=uploaded.path, mime_type=uploaded.mime_type)

    output_path = await transcoder.convert_to_mp3(uploaded.path, uploaded.converted_path)
    normalized = NormalizedFile(path=output_path, mime_type=NORMALIZED_MIME_TYPE)
    logger.info("Processed file details: path=%s mime=%s", normalized.path, normalized.mime_type)
    return normalized


__all__ = ["NORMALIZED_MIME_TYPE", "needs_conversion", "normalize_media"]
