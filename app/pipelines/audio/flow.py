"""High-level orchestration map for the transcription pipeline.

The HTTP controller in ``app/controllers/asr.py`` owns the asynchronous
choreography, but this module documents the canonical execution order so
contributors can navigate the codebase:

1. ``ingestion`` – validate the multipart upload and store it on disk.
2. ``normalization`` – convert video / WebM uploads to MP3 with ffmpeg.
3. ``transcription`` – upload to the Gemini file service, poll, generate.
4. ``cleanup`` – delete the stored upload and its ``.mp3`` sibling.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List


@dataclass(frozen=True)
class PipelineStage:
    """Human-readable description of one stage in the transcription pipeline."""

    order: int
    name: str
    module: str
    summary: str


class TranscriptionFlow:
    """Utility wrapper for documenting the `/api/asr/*` flow."""

    _STAGES: List[PipelineStage] = [
        PipelineStage(
            1,
            "Intake",
            "app.pipelines.audio.ingestion",
            "Enforce method, size limit and MIME allow-list, store the upload in the temp dir.",
        ),
        PipelineStage(
            2,
            "Normalization",
            "app.pipelines.audio.normalization",
            "Convert video and WebM audio to MP3 once via ffmpeg; pass other audio through.",
        ),
        PipelineStage(
            3,
            "Remote Upload",
            "app.pipelines.audio.transcription",
            "Send the normalized file to the Gemini file service.",
        ),
        PipelineStage(
            4,
            "Status Polling",
            "app.pipelines.audio.transcription",
            "Poll the remote file until ACTIVE or FAILED, bounded by the attempt budget.",
        ),
        PipelineStage(
            5,
            "Transcription",
            "app.pipelines.audio.transcription",
            "Ask the Gemini model to transcribe the referenced file.",
        ),
        PipelineStage(
            6,
            "Response",
            "app.controllers.asr",
            "Map the outcome to an HTTP status and JSON body.",
        ),
        PipelineStage(
            7,
            "Cleanup",
            "app.pipelines.audio.cleanup",
            "Delete the upload and its derived .mp3, whatever the outcome.",
        ),
    ]

    @classmethod
    def describe(cls) -> Iterable[PipelineStage]:
        """Expose the ordered list of stages for debugging and documentation."""

        return tuple(cls._STAGES)


__all__ = ["TranscriptionFlow", "PipelineStage"]
