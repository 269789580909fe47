"""Google AI (Gemini) file service and model client."""

from __future__ import annotations

import logging
from typing import Any

from google import genai
from google.genai import types

from app.config.settings import GeminiConfig, settings
from app.pipelines.audio.errors import TransportError
from app.pipelines.audio.interfaces import RemoteFileServiceInterface
from app.pipelines.audio.types import RemoteFileHandle, RemoteFileState

logger = logging.getLogger(__name__)


def _to_state(raw_state: Any) -> RemoteFileState:
    """Map the SDK's FileState (or its string form) onto the pipeline enum."""

    value = getattr(raw_state, "value", raw_state)
    try:
        return RemoteFileState(str(value).upper())
    except ValueError:
        # STATE_UNSPECIFIED / None: the file is not ready yet.
        return RemoteFileState.PROCESSING


def _to_handle(remote_file: types.File, fallback_mime_type: str = "") -> RemoteFileHandle:
    return RemoteFileHandle(
        name=remote_file.name or "",
        uri=remote_file.uri or "",
        mime_type=remote_file.mime_type or fallback_mime_type,
        state=_to_state(remote_file.state),
    )


class GeminiFileService(RemoteFileServiceInterface):
    """Upload media to the Gemini file API and transcribe it with a Gemini model."""

    def __init__(
        self,
        model: str,
        *,
        api_key: str | None = None,
        client: genai.Client | None = None,
    ) -> None:
        self._model = model
        self._api_key = api_key
        self._client = client

    @classmethod
    def from_config(cls, config: GeminiConfig) -> "GeminiFileService":
        return cls(config.model, api_key=config.api_key.get_secret_value() or None)

    def _get_client(self) -> genai.Client:
        # Built on first use so a missing key surfaces as a failed remote call.
        if self._client is None:
            self._client = genai.Client(api_key=self._api_key)
        return self._client

    async def upload_file(
        self,
        path: str,
        *,
        mime_type: str,
        display_name: str,
    ) -> RemoteFileHandle:
        try:
            remote_file = await self._get_client().aio.files.upload(
                file=path,
                config=types.UploadFileConfig(
                    mime_type=mime_type,
                    display_name=display_name,
                ),
            )
        except Exception as exc:
            logger.exception("Gemini file upload failed for %s", path)
            raise TransportError("upload", cause=exc) from exc

        handle = _to_handle(remote_file, mime_type)
        logger.info("File uploaded to Gemini file service. File URI: %s", handle.uri)
        return handle

    async def get_file(self, name: str) -> RemoteFileHandle:
        try:
            remote_file = await self._get_client().aio.files.get(name=name)
        except Exception as exc:
            logger.exception("Gemini file status lookup failed for %s", name)
            raise TransportError("status check", cause=exc) from exc
        return _to_handle(remote_file)

    async def generate_content(self, instruction: str, handle: RemoteFileHandle) -> str:
        try:
            response = await self._get_client().aio.models.generate_content(
                model=self._model,
                contents=[
                    instruction,
                    types.Part.from_uri(file_uri=handle.uri, mime_type=handle.mime_type),
                ],
            )
        except Exception as exc:
            logger.exception("Gemini generate_content failed for %s", handle.name)
            raise TransportError("generation", cause=exc) from exc

        if not response.text:
            raise TransportError("generation", cause=ValueError("Gemini returned empty response"))
        return response.text


def get_gemini_service() -> GeminiFileService:
    """Return a lazily-instantiated Gemini service singleton."""

    global _DEFAULT_SERVICE
    if _DEFAULT_SERVICE is None:
        _DEFAULT_SERVICE = GeminiFileService.from_config(settings.gemini)
    return _DEFAULT_SERVICE


_DEFAULT_SERVICE: GeminiFileService | None = None


__all__ = ["GeminiFileService", "get_gemini_service"]
