"""Remote transcription stage (Stage 03) of the pipeline.

Uploads the normalized file to the remote file service, polls until the file
leaves ``PROCESSING`` and asks the generative model for a transcript.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from app.telemetry import observe_remote_poll

from .errors import RemoteProcessingError, RemoteTimeoutError
from .interfaces import RemoteFileServiceInterface
from .types import NormalizedFile, RemoteFileHandle, RemoteFileState, TranscriptionResult

logger = logging.getLogger("app.services.audio_pipeline")

DEFAULT_INSTRUCTION = "transcribe the given audio file"
DEFAULT_DISPLAY_NAME = "audio_file"


class TranscriptionPipeline:
    """Upload → poll → generate, strictly in sequence."""

    def __init__(
        self,
        file_service: RemoteFileServiceInterface,
        *,
        poll_interval_seconds: float = 10.0,
        poll_max_attempts: int = 60,
        instruction: str = DEFAULT_INSTRUCTION,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._file_service = file_service
        self._poll_interval_seconds = poll_interval_seconds
        self._poll_max_attempts = poll_max_attempts
        self._instruction = instruction
        self._sleep = sleep

    async def run(self, media: NormalizedFile, display_name: str | None = None) -> TranscriptionResult:
        uploaded = await self._file_service.upload_file(
            media.path,
            mime_type=media.mime_type,
            display_name=display_name or DEFAULT_DISPLAY_NAME,
        )

        final = await self.wait_until_ready(uploaded.name)
        if final.state is RemoteFileState.FAILED:
            raise RemoteProcessingError("Audio processing failed")

        logger.info("Audio processing completed. Final state: %s", final.state.value)

        text = await self._file_service.generate_content(self._instruction, uploaded)
        logger.info("Generated content for %s (%d chars)", uploaded.name, len(text))
        return TranscriptionResult(text=text)

    async def wait_until_ready(self, name: str) -> RemoteFileHandle:
        """Poll the file state until it is terminal; never polls past a terminal state."""

        attempts = 1
        handle = await self._file_service.get_file(name)
        observe_remote_poll(handle.state.value)
        while not handle.state.is_terminal:
            if attempts >= self._poll_max_attempts:
                logger.error("Remote file %s still processing after %d checks", name, attempts)
                raise RemoteTimeoutError(name, attempts)
            logger.info("Waiting for processing... Current state: %s", handle.state.value)
            await self._sleep(self._poll_interval_seconds)
            handle = await self._file_service.get_file(name)
            attempts += 1
            observe_remote_poll(handle.state.value)
        return handle


__all__ = ["DEFAULT_DISPLAY_NAME", "DEFAULT_INSTRUCTION", "TranscriptionPipeline"]
