"""Temporary artifact cleanup (final stage) of the transcription pipeline."""

from __future__ import annotations

import logging
import os
from typing import Iterable

from fastapi.concurrency import run_in_threadpool

from .types import UploadedFile

logger = logging.getLogger("app.services.audio_pipeline")


def cleanup_paths(paths: Iterable[str]) -> list[str]:
    """Delete each path independently and return the ones actually removed.

    Missing files are ignored; any other failure is logged and swallowed.
    """

    removed: list[str] = []
    for path in paths:
        try:
            os.remove(path)
        except FileNotFoundError:
            continue
        except OSError as exc:
            logger.error("Error cleaning up file %s: %s", path, exc)
            continue
        removed.append(path)
    return removed


async def cleanup_upload(uploaded: UploadedFile) -> list[str]:
    """Remove the original upload and its derived ``.mp3`` path, if present."""

    logger.info("Cleaning up temporary files for %s", uploaded.path)
    return await run_in_threadpool(cleanup_paths, [uploaded.path, uploaded.converted_path])


__all__ = ["cleanup_paths", "cleanup_upload"]
