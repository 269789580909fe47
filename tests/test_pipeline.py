"""Unit tests for the pipeline stages, driven with asyncio.run."""

from __future__ import annotations

import asyncio
import subprocess
from pathlib import Path
from types import SimpleNamespace

import pytest
from starlette.requests import Request

from app.pipelines.audio import (
    AUDIO_CONTENT_TYPES,
    AdmissionRejectedError,
    FileTooLargeError,
    NormalizedFile,
    RemoteFileHandle,
    RemoteFileState,
    RemoteProcessingError,
    RemoteTimeoutError,
    TranscodeError,
    TranscriptionFlow,
    TranscriptionPipeline,
    TransportError,
    UploadedFile,
    cleanup_paths,
    cleanup_upload,
    needs_conversion,
    normalize_media,
    receive_upload,
)
from app.pipelines.audio.ingestion import build_upload_filename
from app.services import AdmissionController, FfmpegTranscoder, GeminiFileService
from app.services.gemini import _to_state

from conftest import FakeFileService, FakeTranscoder


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def _pipeline(service: FakeFileService, **kwargs) -> tuple[TranscriptionPipeline, RecordingSleep]:
    sleep = RecordingSleep()
    return TranscriptionPipeline(service, sleep=sleep, **kwargs), sleep


def test_polling_stops_at_active_without_extra_calls():
    service = FakeFileService(states=("PROCESSING", "PROCESSING", "ACTIVE"), text="hola")
    pipeline, sleep = _pipeline(service, poll_interval_seconds=10.0)

    result = asyncio.run(pipeline.run(NormalizedFile("/tmp/a.mp3", "audio/mpeg"), "a.mp3"))

    assert result.text == "hola"
    assert len(service.status_checks) == 3
    assert sleep.delays == [10.0, 10.0]


def test_polling_stops_at_failed_and_skips_generation():
    service = FakeFileService(states=("PROCESSING", "FAILED", "ACTIVE"))
    pipeline, _ = _pipeline(service)

    with pytest.raises(RemoteProcessingError, match="Audio processing failed"):
        asyncio.run(pipeline.run(NormalizedFile("/tmp/a.mp3", "audio/mpeg")))

    assert len(service.status_checks) == 2
    assert service.generated == []


def test_polling_is_bounded_by_attempt_budget():
    service = FakeFileService(states=("PROCESSING",))
    pipeline, sleep = _pipeline(service, poll_max_attempts=4)

    with pytest.raises(RemoteTimeoutError) as excinfo:
        asyncio.run(pipeline.wait_until_ready("files/slow"))

    assert excinfo.value.attempts == 4
    assert len(service.status_checks) == 4
    assert len(sleep.delays) == 3


def test_display_name_defaults_when_original_name_missing():
    service = FakeFileService()
    pipeline, _ = _pipeline(service)

    asyncio.run(pipeline.run(NormalizedFile("/tmp/a.mp3", "audio/mp3"), ""))

    assert service.uploads[0]["display_name"] == "audio_file"


@pytest.mark.parametrize(
    ("mime_type", "expected"),
    [
        ("video/webm", True),
        ("video/mp4", True),
        ("audio/webm", True),
        ("audio/mpeg", False),
        ("audio/ogg", False),
    ],
)
def test_needs_conversion(mime_type, expected):
    assert needs_conversion(mime_type) is expected


def test_normalize_media_passes_audio_through(tmp_path: Path):
    transcoder = FakeTranscoder()
    uploaded = UploadedFile(str(tmp_path / "a.wav"), "audio/wav", "a.wav", 10)

    normalized = asyncio.run(normalize_media(uploaded, transcoder))

    assert normalized == NormalizedFile(uploaded.path, "audio/wav")
    assert transcoder.calls == []


def test_normalize_media_converts_video(tmp_path: Path):
    transcoder = FakeTranscoder()
    uploaded = UploadedFile(str(tmp_path / "v.webm"), "video/webm", "v.webm", 10)

    normalized = asyncio.run(normalize_media(uploaded, transcoder))

    assert normalized == NormalizedFile(f"{uploaded.path}.mp3", "audio/mp3")
    assert transcoder.calls == [(uploaded.path, f"{uploaded.path}.mp3")]


def test_ffmpeg_transcoder_runs_binary_once(monkeypatch: pytest.MonkeyPatch):
    calls = []

    def fake_run(command, **kwargs):
        calls.append(command)
        return subprocess.CompletedProcess(command, 0, b"", b"")

    monkeypatch.setattr("app.services.transcoder.subprocess.run", fake_run)

    output = asyncio.run(FfmpegTranscoder("ffmpeg").convert_to_mp3("/tmp/in.webm", "/tmp/in.webm.mp3"))

    assert output == "/tmp/in.webm.mp3"
    assert len(calls) == 1
    assert calls[0][0] == "ffmpeg"
    assert calls[0][-1] == "/tmp/in.webm.mp3"
    assert "mp3" in calls[0]


def test_ffmpeg_transcoder_wraps_process_failure(monkeypatch: pytest.MonkeyPatch):
    def fake_run(command, **kwargs):
        raise subprocess.CalledProcessError(1, command, b"", b"Invalid data found")

    monkeypatch.setattr("app.services.transcoder.subprocess.run", fake_run)

    with pytest.raises(TranscodeError, match="status 1"):
        asyncio.run(FfmpegTranscoder().convert_to_mp3("/tmp/in.webm", "/tmp/in.webm.mp3"))


def test_ffmpeg_transcoder_reports_missing_binary():
    transcoder = FfmpegTranscoder("/nonexistent/ffmpeg-binary")

    with pytest.raises(TranscodeError):
        asyncio.run(transcoder.convert_to_mp3("/tmp/in.webm", "/tmp/in.webm.mp3"))


def test_cleanup_ignores_missing_paths(tmp_path: Path):
    assert cleanup_paths([str(tmp_path / "missing"), str(tmp_path / "missing.mp3")]) == []


def test_cleanup_removes_upload_and_converted_file(tmp_path: Path):
    original = tmp_path / "upload.webm"
    original.write_bytes(b"webm")
    Path(f"{original}.mp3").write_bytes(b"mp3")
    uploaded = UploadedFile(str(original), "video/webm", "upload.webm", 4)

    removed = asyncio.run(cleanup_upload(uploaded))

    assert removed == [str(original), f"{original}.mp3"]
    assert list(tmp_path.iterdir()) == []


def test_cleanup_continues_after_failed_deletion(tmp_path: Path):
    directory = tmp_path / "not-a-file"
    directory.mkdir()
    converted = tmp_path / "other.mp3"
    converted.write_bytes(b"mp3")

    removed = cleanup_paths([str(directory), str(converted)])

    assert removed == [str(converted)]
    assert directory.exists()


def test_upload_filename_is_prefixed_and_sanitized():
    name = build_upload_filename("../../etc/pass wd.mp3")

    timestamp, token, rest = name.split("-", 2)
    assert timestamp.isdigit()
    assert len(token) == 8
    assert rest == "pass_wd.mp3"
    assert "/" not in name


def test_upload_filenames_do_not_collide():
    assert build_upload_filename("a.mp3") != build_upload_filename("a.mp3")


def test_admission_rejects_when_all_slots_are_busy():
    async def scenario():
        controller = AdmissionController(1, 0.01)
        async with controller.slot():
            assert controller.active == 1
            with pytest.raises(AdmissionRejectedError):
                async with controller.slot():
                    pass
        assert controller.active == 0

    asyncio.run(scenario())


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (SimpleNamespace(value="PROCESSING"), RemoteFileState.PROCESSING),
        (SimpleNamespace(value="ACTIVE"), RemoteFileState.ACTIVE),
        ("FAILED", RemoteFileState.FAILED),
        (SimpleNamespace(value="STATE_UNSPECIFIED"), RemoteFileState.PROCESSING),
        (None, RemoteFileState.PROCESSING),
    ],
)
def test_remote_state_mapping(raw, expected):
    assert _to_state(raw) is expected


def _fake_genai_client(*, upload=None, get=None, generate=None):
    async def fail(**kwargs):
        raise AssertionError("unexpected call")

    files = SimpleNamespace(upload=upload or fail, get=get or fail)
    models = SimpleNamespace(generate_content=generate or fail)
    return SimpleNamespace(aio=SimpleNamespace(files=files, models=models))


def test_gemini_service_maps_uploaded_file():
    async def upload(**kwargs):
        assert kwargs["file"] == "/tmp/a.mp3"
        return SimpleNamespace(
            name="files/abc",
            uri="https://generativelanguage.googleapis.com/v1beta/files/abc",
            mime_type="audio/mp3",
            state=SimpleNamespace(value="PROCESSING"),
        )

    service = GeminiFileService("gemini-1.5-flash", client=_fake_genai_client(upload=upload))

    handle = asyncio.run(service.upload_file("/tmp/a.mp3", mime_type="audio/mp3", display_name="a"))

    assert handle.name == "files/abc"
    assert handle.state is RemoteFileState.PROCESSING


def test_gemini_service_wraps_sdk_errors():
    async def get(**kwargs):
        raise RuntimeError("503 backend unavailable")

    service = GeminiFileService("gemini-1.5-flash", client=_fake_genai_client(get=get))

    with pytest.raises(TransportError) as excinfo:
        asyncio.run(service.get_file("files/abc"))

    assert excinfo.value.public_message == "Remote status check failed"
    assert isinstance(excinfo.value.cause, RuntimeError)


def test_gemini_service_rejects_empty_generation():
    async def generate(**kwargs):
        assert kwargs["model"] == "gemini-1.5-flash"
        assert kwargs["contents"][0] == "transcribe the given audio file"
        return SimpleNamespace(text="")

    service = GeminiFileService("gemini-1.5-flash", client=_fake_genai_client(generate=generate))
    handle = RemoteFileHandle("files/abc", "https://example.com/files/abc", "audio/mp3", RemoteFileState.ACTIVE)

    with pytest.raises(TransportError):
        asyncio.run(service.generate_content("transcribe the given audio file", handle))



def _chunked_upload_request(chunks: list[bytes], consumed: list[int]) -> Request:
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/api/asr/transcribe",
        "query_string": b"",
        "headers": [(b"content-type", b"multipart/form-data; boundary=xyz")],
    }
    head = (
        b"--xyz\r\n"
        b'Content-Disposition: form-data; name="file"; filename="long.mp3"\r\n'
        b"Content-Type: audio/mpeg\r\n\r\n"
    )
    messages = [head, *chunks, b"\r\n--xyz--\r\n"]

    async def receive():
        index = len(consumed)
        consumed.append(index)
        return {
            "type": "http.request",
            "body": messages[index],
            "more_body": index < len(messages) - 1,
        }

    return Request(scope, receive)


def test_chunked_upload_stops_streaming_once_over_limit(tmp_path: Path):
    consumed: list[int] = []
    chunks = [b"x" * 8192 for _ in range(100)]
    request = _chunked_upload_request(chunks, consumed)

    with pytest.raises(FileTooLargeError):
        asyncio.run(
            receive_upload(
                request,
                allowed_types=AUDIO_CONTENT_TYPES,
                max_bytes=64,
                upload_dir=str(tmp_path),
            )
        )

    assert len(consumed) < len(chunks) // 2
    assert list(tmp_path.iterdir()) == []


def test_chunked_upload_within_limit_is_stored(tmp_path: Path):
    consumed: list[int] = []
    request = _chunked_upload_request([b"ID3" * 10, b"audio" * 10], consumed)

    uploaded = asyncio.run(
        receive_upload(
            request,
            allowed_types=AUDIO_CONTENT_TYPES,
            max_bytes=1024,
            upload_dir=str(tmp_path),
        )
    )

    assert uploaded.size_bytes == 80
    assert uploaded.mime_type == "audio/mpeg"
    assert Path(uploaded.path).read_bytes() == b"ID3" * 10 + b"audio" * 10


def test_pipeline_stages_run_intake_first_and_cleanup_last():
    names = [stage.name for stage in TranscriptionFlow.describe()]

    assert names[0] == "Intake"
    assert names[-1] == "Cleanup"
    assert [stage.order for stage in TranscriptionFlow.describe()] == list(range(1, len(names) + 1))
