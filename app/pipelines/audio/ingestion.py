"""Request ingestion helpers (Stage 01 of the transcription pipeline)."""

from __future__ import annotations

import logging
import mimetypes
import re
import time
from pathlib import Path
from typing import BinaryIO, Final, Iterable
from uuid import uuid4

from fastapi import Request
from fastapi.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile as StarletteUploadFile
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from starlette.types import Message, Receive

from .errors import FileTooLargeError, MalformedUploadError, RequestValidationError
from .types import UploadedFile

logger = logging.getLogger("app.services.audio_pipeline")

AUDIO_CONTENT_TYPES: Final[frozenset[str]] = frozenset(
    {
        "audio/mpeg",
        "audio/mp3",
        "audio/wav",
        "audio/ogg",
    }
)
MEDIA_CONTENT_TYPES: Final[frozenset[str]] = AUDIO_CONTENT_TYPES | {
    "audio/webm",
    "video/webm",
}

# Room for multipart boundaries and part headers on top of the file itself.
_MULTIPART_OVERHEAD_BYTES: Final[int] = 64 * 1024
_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def resolve_content_type(upload: StarletteUploadFile) -> str | None:
    """Return the bare MIME type of the upload, guessing from the filename if unset."""

    content_type = upload.content_type
    if not content_type and upload.filename:
        content_type, _ = mimetypes.guess_type(upload.filename)
    if not content_type:
        return None
    return content_type.split(";", 1)[0].strip().lower()


def ensure_content_length_within(request: Request, max_bytes: int) -> None:
    """Reject requests whose declared body already exceeds the upload limit."""

    declared = request.headers.get("content-length")
    if not declared:
        return
    try:
        length = int(declared)
    except ValueError:
        return
    if length > max_bytes + _MULTIPART_OVERHEAD_BYTES:
        raise FileTooLargeError(max_bytes)


def build_upload_filename(original_name: str | None) -> str:
    """Timestamp-prefixed, collision-resistant name for the stored upload."""

    base = Path(original_name or "").name
    safe_name = _UNSAFE_FILENAME_CHARS.sub("_", base).strip("._") or "upload"
    return f"{int(time.time() * 1000)}-{uuid4().hex[:8]}-{safe_name}"


def _copy_upload_stream(
    source: BinaryIO,
    target: Path,
    *,
    max_bytes: int,
    chunk_size: int,
) -> int:
    """Copy ``source`` into ``target`` chunk by chunk, enforcing ``max_bytes``."""

    source.seek(0)
    written = 0
    try:
        with target.open("wb") as buffer:
            while True:
                chunk = source.read(chunk_size)
                if not chunk:
                    break
                written += len(chunk)
                if written > max_bytes:
                    raise FileTooLargeError(max_bytes)
                buffer.write(chunk)
    except BaseException:
        target.unlink(missing_ok=True)
        raise
    return written


async def store_upload(
    upload: StarletteUploadFile | None,
    *,
    allowed_types: Iterable[str],
    max_bytes: int,
    upload_dir: str,
    chunk_size: int = 1024 * 1024,
) -> UploadedFile:
    """Validate the multipart file and persist it to temporary storage.

    Disallowed types are never written to disk; oversized or empty payloads
    are removed before the error propagates.
    """

    if upload is None:
        raise RequestValidationError("No file uploaded")

    content_type = resolve_content_type(upload)
    if content_type is None or content_type not in allowed_types:
        logger.warning("Unsupported MIME type: %s", content_type)
        await upload.close()
        raise RequestValidationError(f"Unsupported MIME type: {content_type}")

    directory = Path(upload_dir)
    directory.mkdir(parents=True, exist_ok=True)
    target = directory / build_upload_filename(upload.filename)

    try:
        size = await run_in_threadpool(
            _copy_upload_stream,
            upload.file,
            target,
            max_bytes=max_bytes,
            chunk_size=chunk_size,
        )
    finally:
        await upload.close()

    if size == 0:
        target.unlink(missing_ok=True)
        raise RequestValidationError("Uploaded file is empty")

    uploaded = UploadedFile(
        path=str(target),
        mime_type=content_type,
        original_name=upload.filename or "",
        size_bytes=size,
    )
    logger.info(
        "Uploaded file details: name=%s path=%s mime=%s size=%d",
        uploaded.original_name,
        uploaded.path,
        uploaded.mime_type,
        uploaded.size_bytes,
    )
    return uploaded


def bounded_receive(receive: Receive, max_bytes: int) -> Receive:
    """Wrap an ASGI ``receive`` so the body stream stops once it passes the limit."""

    limit = max_bytes + _MULTIPART_OVERHEAD_BYTES
    received = 0

    async def wrapped() -> Message:
        nonlocal received
        message = await receive()
        if message["type"] == "http.request":
            received += len(message.get("body", b""))
            if received > limit:
                logger.warning("Request body passed %d bytes while streaming", limit)
                raise FileTooLargeError(max_bytes)
        return message

    return wrapped


async def receive_upload(
    request: Request,
    *,
    field: str = "file",
    allowed_types: Iterable[str],
    max_bytes: int,
    upload_dir: str,
    chunk_size: int = 1024 * 1024,
) -> UploadedFile:
    """Parse the multipart body (single file) and hand the file to `store_upload`.

    The byte limit is enforced twice: against the body as it streams in, so a
    chunked upload without ``Content-Length`` cannot fill the spool directory,
    and against the file part itself while it is copied to ``upload_dir``.
    """

    ensure_content_length_within(request, max_bytes)

    limited = Request(request.scope, bounded_receive(request.receive, max_bytes))
    try:
        form = await limited.form(max_files=1)
    except HTTPException as exc:
        raise MalformedUploadError(f"Could not parse form data: {exc.detail}") from exc
    except MultiPartException as exc:
        raise MalformedUploadError(f"Could not parse form data: {exc.message}") from exc

    try:
        candidate = form.get(field)
        upload = candidate if isinstance(candidate, StarletteUploadFile) else None
        return await store_upload(
            upload,
            allowed_types=allowed_types,
            max_bytes=max_bytes,
            upload_dir=upload_dir,
            chunk_size=chunk_size,
        )
    finally:
        await form.close()


__all__ = [
    "AUDIO_CONTENT_TYPES",
    "MEDIA_CONTENT_TYPES",
    "bounded_receive",
    "build_upload_filename",
    "ensure_content_length_within",
    "receive_upload",
    "resolve_content_type",
    "store_upload",
]
