"""Speech transcription endpoints.

For a stage-by-stage map see `app.pipelines.audio.flow.TranscriptionFlow`.
Both POST endpoints run the same pipeline:

1. Intake: parse the multipart body, enforce size and MIME allow-list.
2. Normalization: convert video / WebM uploads to MP3.
3. Upload to the Gemini file service, poll until ready, transcribe.
4. Cleanup of the temporary upload and its `.mp3` sibling, whatever happened.
"""

from __future__ import annotations

import logging
from typing import Iterable

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from app.config.settings import Settings
from app.controllers.dependencies import AdmissionDep, PipelineDep, SettingsDep, TranscoderDep
from app.pipelines.audio import (
    AUDIO_CONTENT_TYPES,
    MEDIA_CONTENT_TYPES,
    IntakeError,
    PipelineError,
    TranscoderInterface,
    TranscriptionFlow,
    TranscriptionPipeline,
    UploadedFile,
    cleanup_upload,
    normalize_media,
    receive_upload,
)
from app.services import AdmissionController
from app.telemetry import observe_transcription
from app.utils import utc_timestamp
from app.views import ProcessingErrorResponse, TranscriptionResponse, TranslationResponse

router = APIRouter(prefix="/api/asr", tags=["asr"])

logger = logging.getLogger(__name__)

PIPELINE_STAGES = tuple(TranscriptionFlow.describe())
"""Ordered pipeline metadata used for quick reference and debugging."""

_REJECTED_METHODS = ["GET", "HEAD", "PUT", "PATCH", "DELETE", "OPTIONS"]
_ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ProcessingErrorResponse},
    status.HTTP_405_METHOD_NOT_ALLOWED: {"model": ProcessingErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ProcessingErrorResponse},
    status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ProcessingErrorResponse},
}


def _error_response(status_code: int, error: str, details: str | None = None) -> JSONResponse:
    body = ProcessingErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def method_not_allowed_response() -> JSONResponse:
    return _error_response(status.HTTP_405_METHOD_NOT_ALLOWED, "Method not allowed")


async def _run_upload_pipeline(
    request: Request,
    *,
    endpoint: str,
    allowed_types: Iterable[str],
    max_bytes: int,
    app_settings: Settings,
    transcoder: TranscoderInterface,
    pipeline: TranscriptionPipeline,
    admission: AdmissionController,
) -> str | JSONResponse:
    """Run intake → normalize → transcribe; return the text or an error response."""

    logger.debug(
        "Running %s pipeline: %s",
        endpoint,
        " -> ".join(stage.name for stage in PIPELINE_STAGES),
    )
    uploaded: UploadedFile | None = None
    try:
        async with admission.slot():
            try:
                uploaded = await receive_upload(
                    request,
                    allowed_types=allowed_types,
                    max_bytes=max_bytes,
                    upload_dir=app_settings.upload.dir,
                    chunk_size=app_settings.upload.chunk_size,
                )
                media = await normalize_media(uploaded, transcoder)
                result = await pipeline.run(media, uploaded.original_name)
            finally:
                if uploaded is not None:
                    await cleanup_upload(uploaded)
    except IntakeError as exc:
        logger.warning("Upload rejected on %s: %s", endpoint, exc)
        observe_transcription(endpoint, "rejected")
        return _error_response(exc.status_code, exc.error, exc.public_message)
    except PipelineError as exc:
        logger.error("Pipeline failed on %s: %s", endpoint, exc, exc_info=exc.cause or exc)
        observe_transcription(endpoint, "failed")
        details = str(exc) if app_settings.expose_error_details else exc.public_message
        return _error_response(exc.status_code, exc.error, details)
    except Exception as exc:
        logger.exception("Unexpected failure on %s", endpoint)
        observe_transcription(endpoint, "failed")
        details = str(exc) if app_settings.expose_error_details and str(exc) else "Unknown error"
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Processing failed", details)

    observe_transcription(endpoint, "success")
    return result.text


@router.post("/transcribe", response_model=TranscriptionResponse, responses=_ERROR_RESPONSES)
async def transcribe_audio(
    request: Request,
    app_settings: SettingsDep,
    transcoder: TranscoderDep,
    pipeline: PipelineDep,
    admission: AdmissionDep,
):
    """Transcribe an uploaded audio file (MP3, WAV or OGG, up to 10 MB by default)."""

    outcome = await _run_upload_pipeline(
        request,
        endpoint="transcribe",
        allowed_types=AUDIO_CONTENT_TYPES,
        max_bytes=app_settings.upload.transcribe_max_bytes,
        app_settings=app_settings,
        transcoder=transcoder,
        pipeline=pipeline,
        admission=admission,
    )
    if isinstance(outcome, JSONResponse):
        return outcome

    body = TranscriptionResponse(generated_content=outcome)
    return JSONResponse(content=body.model_dump(by_alias=True))


@router.post("/translate", response_model=TranslationResponse, responses=_ERROR_RESPONSES)
async def translate_media(
    request: Request,
    app_settings: SettingsDep,
    transcoder: TranscoderDep,
    pipeline: PipelineDep,
    admission: AdmissionDep,
):
    """Transcribe uploaded audio or WebM video (up to 50 MB), converting to MP3 first if needed."""

    outcome = await _run_upload_pipeline(
        request,
        endpoint="translate",
        allowed_types=MEDIA_CONTENT_TYPES,
        max_bytes=app_settings.upload.translate_max_bytes,
        app_settings=app_settings,
        transcoder=transcoder,
        pipeline=pipeline,
        admission=admission,
    )
    if isinstance(outcome, JSONResponse):
        return outcome

    body = TranslationResponse(generated_content=outcome, timestamp=utc_timestamp())
    return JSONResponse(content=body.model_dump(by_alias=True))


@router.api_route("/transcribe", methods=_REJECTED_METHODS, include_in_schema=False)
async def transcribe_method_not_allowed() -> JSONResponse:
    return method_not_allowed_response()


@router.api_route("/translate", methods=_REJECTED_METHODS, include_in_schema=False)
async def translate_method_not_allowed() -> JSONResponse:
    return method_not_allowed_response()
