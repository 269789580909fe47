"""Process-wide cap on concurrently running transcription pipelines."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from app.config.settings import settings
from app.pipelines.audio.errors import AdmissionRejectedError

logger = logging.getLogger(__name__)


class AdmissionController:
    """Bounded slot pool guarding the upload → transcribe pipeline."""

    def __init__(self, max_concurrent: int, timeout_seconds: float) -> None:
        self._max_concurrent = max_concurrent
        self._timeout_seconds = timeout_seconds
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._active = 0

    @property
    def active(self) -> int:
        return self._active

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        """Hold one pipeline slot for the duration of the block."""

        try:
            await asyncio.wait_for(self._semaphore.acquire(), timeout=self._timeout_seconds)
        except asyncio.TimeoutError as exc:
            logger.warning(
                "Admission rejected: %s/%s pipelines busy", self._active, self._max_concurrent
            )
            raise AdmissionRejectedError(self._timeout_seconds) from exc

        self._active += 1
        try:
            yield
        finally:
            self._active -= 1
            self._semaphore.release()


def get_admission_controller() -> AdmissionController:
    """Return the process-wide admission controller."""
    return _DEFAULT_CONTROLLER


_DEFAULT_CONTROLLER = AdmissionController(
    settings.max_concurrent_jobs,
    settings.admission_timeout_seconds,
)


__all__ = ["AdmissionController", "get_admission_controller"]
