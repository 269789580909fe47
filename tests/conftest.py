"""Shared fixtures: fake remote service, fake transcoder, isolated upload dir."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from app.config.settings import settings
from app.controllers.dependencies import get_settings
from app.main import app
from app.pipelines.audio import (
    RemoteFileHandle,
    RemoteFileServiceInterface,
    RemoteFileState,
    TranscoderInterface,
)
from app.services import AdmissionController, get_admission_controller, get_gemini_service, get_transcoder


class FakeFileService(RemoteFileServiceInterface):
    """In-memory stand-in for the Gemini file service and model."""

    def __init__(self, states: tuple[str, ...] = ("ACTIVE",), text: str = "Test transcript") -> None:
        self.states = list(states)
        self.text = text
        self.uploads: list[dict[str, Any]] = []
        self.status_checks: list[str] = []
        self.generated: list[tuple[str, RemoteFileHandle]] = []
        self.upload_error: Exception | None = None
        self.generate_error: Exception | None = None

    async def upload_file(self, path: str, *, mime_type: str, display_name: str) -> RemoteFileHandle:
        if self.upload_error is not None:
            raise self.upload_error
        self.uploads.append(
            {
                "path": path,
                "mime_type": mime_type,
                "display_name": display_name,
                "existed": os.path.exists(path),
            }
        )
        return RemoteFileHandle(
            name="files/test-file",
            uri="https://example.com/files/test-file",
            mime_type=mime_type,
            state=RemoteFileState.PROCESSING,
        )

    async def get_file(self, name: str) -> RemoteFileHandle:
        index = min(len(self.status_checks), len(self.states) - 1)
        state = RemoteFileState(self.states[index])
        self.status_checks.append(name)
        return RemoteFileHandle(
            name=name,
            uri="https://example.com/files/test-file",
            mime_type="audio/mp3",
            state=state,
        )

    async def generate_content(self, instruction: str, handle: RemoteFileHandle) -> str:
        if self.generate_error is not None:
            raise self.generate_error
        self.generated.append((instruction, handle))
        return self.text


class FakeTranscoder(TranscoderInterface):
    """Writes a placeholder MP3 instead of running ffmpeg."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []
        self.error: Exception | None = None

    async def convert_to_mp3(self, input_path: str, output_path: str) -> str:
        self.calls.append((input_path, output_path))
        if self.error is not None:
            raise self.error
        Path(output_path).write_bytes(b"ID3 fake mp3")
        return output_path


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "uploads"
    directory.mkdir()
    return directory


@pytest.fixture
def test_settings(upload_dir: Path):
    return settings.model_copy(
        update={
            "upload": settings.upload.model_copy(update={"dir": str(upload_dir)}),
            "gemini": settings.gemini.model_copy(update={"poll_interval_seconds": 0.0}),
        }
    )


@pytest.fixture
def file_service() -> FakeFileService:
    return FakeFileService()


@pytest.fixture
def transcoder() -> FakeTranscoder:
    return FakeTranscoder()


@pytest.fixture
def client(test_settings, file_service: FakeFileService, transcoder: FakeTranscoder):
    """Test client wired to the fakes; no network calls, no ffmpeg."""

    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_gemini_service] = lambda: file_service
    app.dependency_overrides[get_transcoder] = lambda: transcoder
    app.dependency_overrides[get_admission_controller] = lambda: AdmissionController(2, 1.0)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
