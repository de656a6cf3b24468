"""
Upload client for the Gemini Files API.

The SDK uploads from a path, so every call stages the buffer in its own
temporary directory and removes it again whatever the outcome.
"""

from __future__ import annotations

import asyncio
import logging
import re
import secrets
import shutil
import tempfile
from collections.abc import AsyncIterator, Callable, Mapping, Sequence
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from google import genai
from google.genai import types
from langfuse import observe

from fuku.entities.request_part import FileRefPart, file_ref_part
from fuku.services.UploadService.upload_service_interface import (
    UploadServiceInterface,
)

DEFAULT_MIME_TYPE = "application/octet-stream"

# Field names checked, in order, for the remote file handle.
HANDLE_FIELDS: tuple[str, ...] = ("uri", "file_uri", "name")

TEMP_DIR_PREFIX = "gemini-upload-"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class UploadError(Exception):
    """Raised when a buffer cannot be uploaded or the response has no handle."""


def sanitize_filename(name: str | None) -> str:
    """Restrict ``name`` to ``[A-Za-z0-9_.-]``, falling back to a random name."""
    safe_name = _UNSAFE_FILENAME_CHARS.sub("_", name or "")
    if safe_name in {"", ".", ".."}:
        safe_name = f"upload-{secrets.token_hex(6)}"
    return safe_name


def _field(source: Any, name: str) -> Any:
    if isinstance(source, Mapping):
        return source.get(name)
    return getattr(source, name, None)


def extract_file_handle(
    response: Any, fields: Sequence[str] = HANDLE_FIELDS
) -> tuple[str | None, str | None]:
    """
    Pull the file handle and MIME type out of an upload response.

    Older SDKs wrap the file in ``response.file``; newer ones return it directly.
    """
    uploaded = _field(response, "file") or response
    handle: str | None = None
    for name in fields:
        value = _field(uploaded, name)
        if isinstance(value, str) and value:
            handle = value
            break
    mime_type = _field(uploaded, "mime_type") or _field(uploaded, "mimeType")
    return handle, mime_type if isinstance(mime_type, str) else None


class UploadService(UploadServiceInterface):
    def __init__(
        self,
        logger: logging.Logger,
        client_factory: Callable[[str], genai.Client] | None = None,
        handle_fields: Sequence[str] = HANDLE_FIELDS,
    ) -> None:
        self.logger = logger
        self._client_factory = client_factory or (
            lambda api_key: genai.Client(api_key=api_key)
        )
        self.handle_fields = tuple(handle_fields)
        self._clients: dict[str, genai.Client] = {}

    def _client_for(self, api_key: str) -> genai.Client:
        client = self._clients.get(api_key)
        if client is None:
            client = self._client_factory(api_key)
            self._clients[api_key] = client
        return client

    @asynccontextmanager
    async def _staged_file(self, buffer: bytes, name: str | None) -> AsyncIterator[Path]:
        tmp_dir = Path(tempfile.mkdtemp(prefix=TEMP_DIR_PREFIX))
        file_path = tmp_dir / sanitize_filename(name)
        try:
            await asyncio.to_thread(file_path.write_bytes, buffer)
            yield file_path
        finally:
            self._cleanup(file_path, tmp_dir)

    def _cleanup(self, file_path: Path, tmp_dir: Path) -> None:
        try:
            file_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            self.logger.warning("Failed to remove temp file %s: %s", file_path, e)
        try:
            shutil.rmtree(tmp_dir)
        except FileNotFoundError:
            pass
        except OSError as e:
            self.logger.warning("Failed to remove temp directory %s: %s", tmp_dir, e)

    @observe(capture_input=False)
    async def upload(
        self,
        buffer: bytes,
        mime_type: str | None,
        name: str | None,
        api_key: str | None,
    ) -> FileRefPart:
        if not api_key:
            raise UploadError("Missing Gemini API key for file upload.")

        client = self._client_for(api_key)
        async with self._staged_file(buffer, name) as file_path:
            config = types.UploadFileConfig(
                mime_type=mime_type or DEFAULT_MIME_TYPE,
                display_name=name or file_path.name,
            )
            response = await client.aio.files.upload(file=file_path, config=config)

        file_uri, uploaded_mime = extract_file_handle(response, self.handle_fields)
        if not file_uri:
            raise UploadError("Upload response did not include a file URI.")

        self.logger.info(
            "Uploaded %s (%d bytes) to the Files API: %s",
            name or file_path.name,
            len(buffer),
            file_uri,
        )
        return file_ref_part(file_uri, mime_type or uploaded_mime or DEFAULT_MIME_TYPE)
