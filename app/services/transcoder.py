"""ffmpeg integration used to normalize uploads to MP3."""

from __future__ import annotations

import logging
import subprocess

from fastapi.concurrency import run_in_threadpool

from app.config.settings import settings
from app.pipelines.audio.errors import TranscodeError
from app.pipelines.audio.interfaces import TranscoderInterface

logger = logging.getLogger(__name__)


class FfmpegTranscoder(TranscoderInterface):
    """Run the ffmpeg binary once per conversion, off the event loop."""

    def __init__(self, binary: str = "ffmpeg") -> None:
        self._binary = binary

    async def convert_to_mp3(self, input_path: str, output_path: str) -> str:
        """Convert ``input_path`` to MP3 at ``output_path`` and return the output path."""

        logger.info("Converting file: %s to MP3 format...", input_path)
        await run_in_threadpool(self._convert_sync, input_path, output_path)
        logger.info("Conversion complete: %s -> %s", input_path, output_path)
        return output_path

    def _convert_sync(self, input_path: str, output_path: str) -> None:
        command = [
            self._binary,
            "-y",
            "-i", input_path,
            "-vn",
            "-f", "mp3",
            output_path,
        ]
        try:
            subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=True,
            )
        except subprocess.CalledProcessError as exc:
            error_msg = exc.stderr.decode("utf-8", errors="replace") if exc.stderr else "No stderr"
            logger.error("ffmpeg failed for %s. stderr: %s", input_path, error_msg)
            raise TranscodeError(
                input_path,
                f"ffmpeg exited with status {exc.returncode}",
                cause=exc,
            ) from exc
        except OSError as exc:
            logger.error("Could not run ffmpeg binary %r: %s", self._binary, exc)
            raise TranscodeError(input_path, f"could not run {self._binary}", cause=exc) from exc


def get_transcoder() -> FfmpegTranscoder:
    """Return the process-wide transcoder."""
    return _DEFAULT_TRANSCODER


_DEFAULT_TRANSCODER = FfmpegTranscoder(binary=settings.ffmpeg_binary)


__all__ = ["FfmpegTranscoder", "get_transcoder"]
