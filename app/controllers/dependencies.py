"""Common FastAPI dependencies reused across controllers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from app.config.settings import Settings, settings
from app.pipelines.audio import (
    RemoteFileServiceInterface,
    TranscoderInterface,
    TranscriptionPipeline,
)
from app.services import AdmissionController, get_admission_controller, get_gemini_service, get_transcoder


def get_settings() -> Settings:
    """Return the settings instance built at start-up."""

    return settings


SettingsDep = Annotated[Settings, Depends(get_settings)]
FileServiceDep = Annotated[RemoteFileServiceInterface, Depends(get_gemini_service)]
TranscoderDep = Annotated[TranscoderInterface, Depends(get_transcoder)]
AdmissionDep = Annotated[AdmissionController, Depends(get_admission_controller)]


def get_transcription_pipeline(
    file_service: FileServiceDep,
    app_settings: SettingsDep,
) -> TranscriptionPipeline:
    """Assemble the upload → poll → generate pipeline from configuration."""

    return TranscriptionPipeline(
        file_service,
        poll_interval_seconds=app_settings.gemini.poll_interval_seconds,
        poll_max_attempts=app_settings.gemini.poll_max_attempts,
        instruction=app_settings.gemini.instruction,
    )


PipelineDep = Annotated[TranscriptionPipeline, Depends(get_transcription_pipeline)]


__all__ = [
    "AdmissionDep",
    "FileServiceDep",
    "PipelineDep",
    "SettingsDep",
    "TranscoderDep",
    "get_settings",
    "get_transcription_pipeline",
]
