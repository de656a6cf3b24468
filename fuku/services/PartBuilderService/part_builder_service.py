"""
Builds the multimodal parts list sent to Gemini for one user message.

Images are inlined as base64 when small enough, otherwise uploaded to the
Files API. Other files are described in text, inlined as text when they are
small text documents, and uploaded when a credential is available. Every
attachment is handled on its own: a failure becomes a text notice in the
output instead of aborting the message.
"""

from __future__ import annotations

import base64
import logging
from typing import Any

from langfuse import observe

from fuku.entities.attachment import ClassifiedAttachment
from fuku.entities.request_part import (
    RequestPart,
    inline_data_part,
    text_part,
)
from fuku.services.AttachmentService.attachment_classifier import (
    DEFAULT_IMAGE_MIME_TYPE,
    DEFAULT_MIME_TYPE,
    format_size,
    is_text_like,
    resolve_mime_type,
    split_attachments,
)
from fuku.services.FetchService.fetch_service_interface import FetchServiceInterface
from fuku.services.PartBuilderService.part_builder_service_interface import (
    PartBuilderServiceInterface,
)
from fuku.services.UploadService.upload_service import UploadError
from fuku.services.UploadService.upload_service_interface import (
    UploadServiceInterface,
)

IMAGE_INLINE_LIMIT_BYTES = 8 * 1024 * 1024
TEXT_INLINE_LIMIT_BYTES = 1 * 1024 * 1024


class PartBuilderService(PartBuilderServiceInterface):
    def __init__(
        self,
        fetch_service: FetchServiceInterface,
        upload_service: UploadServiceInterface,
        logger: logging.Logger,
        api_key: str | None = None,
        image_inline_limit: int = IMAGE_INLINE_LIMIT_BYTES,
    ) -> None:
        """
        Args:
            fetch_service: Downloads attachment bytes
            upload_service: Pushes oversized images and files to the Files API
            logger: Logger instance
            api_key: Default upload credential; ``None`` disables uploads
            image_inline_limit: Largest image (bytes) sent inline
        """
        self.fetch_service = fetch_service
        self.upload_service = upload_service
        self.logger = logger
        self.api_key = api_key
        self.image_inline_limit = image_inline_limit

    def limits(self) -> dict[str, int]:
        return {
            "image_inline_limit_bytes": self.image_inline_limit,
            "text_inline_limit_bytes": TEXT_INLINE_LIMIT_BYTES,
        }

    @observe(capture_output=False)
    async def build(
        self,
        text: str | None,
        images: list[ClassifiedAttachment] | None = None,
        files: list[ClassifiedAttachment] | None = None,
        api_key: str | None = None,
        inline_size_ceiling: int | None = None,
    ) -> list[RequestPart]:
        key = api_key if api_key is not None else self.api_key
        ceiling = (
            inline_size_ceiling
            if inline_size_ceiling is not None
            else self.image_inline_limit
        )

        parts: list[RequestPart] = [text_part(text if isinstance(text, str) else "")]

        for image in images or []:
            label = image.get("name") or "image attachment"
            try:
                await self._add_image(parts, image, label, key, ceiling)
            except Exception as e:
                self.logger.error(
                    "Image handling error for %s: %s", label, e, exc_info=True
                )
                parts.append(
                    text_part(
                        f"Attached image received but preview unavailable: {label}."
                    )
                )

        for file in files or []:
            label = file.get("name") or "file attachment"
            try:
                await self._add_file(parts, file, label, key)
            except Exception as e:
                self.logger.error(
                    "File handling error for %s: %s", label, e, exc_info=True
                )
                mime_type = file.get("mime_type") or "unknown type"
                parts.append(
                    text_part(
                        "Attached file received but preview unavailable: "
                        f"{label} ({mime_type})."
                    )
                )

        self.logger.info(
            "Built %d request parts from %d images and %d files",
            len(parts),
            len(images or []),
            len(files or []),
        )
        return parts

    async def build_from_attachments(
        self,
        text: str | None,
        attachments: Any,
        api_key: str | None = None,
        inline_size_ceiling: int | None = None,
    ) -> list[RequestPart]:
        batch = split_attachments(attachments)
        return await self.build(
            text,
            images=batch["images"],
            files=batch["files"],
            api_key=api_key,
            inline_size_ceiling=inline_size_ceiling,
        )

    async def _download(self, item: ClassifiedAttachment, label: str) -> bytes | None:
        try:
            return await self.fetch_service.fetch(item["url"] or "")
        except Exception as e:
            self.logger.warning("Failed to download %s: %s", label, e)
            return None

    async def _add_image(
        self,
        parts: list[RequestPart],
        image: ClassifiedAttachment,
        label: str,
        api_key: str | None,
        ceiling: int,
    ) -> None:
        if not image.get("url"):
            self.logger.info("Skipping image without URL: %s", label)
            return

        buffer = await self._download(image, label)
        if buffer is None:
            parts.append(text_part(f"Attached image could not be processed ({label})."))
            return

        mime_type = image.get("mime_type") or DEFAULT_IMAGE_MIME_TYPE
        declared_size = image.get("size")
        size = declared_size if declared_size else len(buffer)

        if mime_type.startswith("image/") and size <= ceiling:
            encoded = base64.b64encode(buffer).decode("ascii")
            parts.append(inline_data_part(mime_type, encoded))
            return

        if not api_key:
            reason = (
                "is too large to inline"
                if size > ceiling
                else f"cannot be inlined as {mime_type}"
            )
            self.logger.warning(
                "No upload credential; dropping image %s (%d bytes)", label, size
            )
            parts.append(
                text_part(
                    f"Attached image {label} {reason} and could not be uploaded "
                    "(no upload credential configured)."
                )
            )
            return

        try:
            uploaded = await self.upload_service.upload(
                buffer, mime_type, image.get("name") or None, api_key
            )
        except UploadError as e:
            self.logger.warning("Image upload failed for %s: %s", label, e)
            parts.append(text_part(f"Attached image could not be processed ({label})."))
            return
        parts.append(uploaded)

    async def _add_file(
        self,
        parts: list[RequestPart],
        file: ClassifiedAttachment,
        label: str,
        api_key: str | None,
    ) -> None:
        if not file.get("url"):
            self.logger.info("Skipping file without URL: %s", label)
            return

        buffer = await self._download(file, label)
        if buffer is None:
            parts.append(text_part(f"Attached file could not be processed ({label})."))
            return

        size = len(buffer)
        name = file.get("name") or ""
        mime_type = (
            file.get("mime_type") or resolve_mime_type(name) or DEFAULT_MIME_TYPE
        )
        parts.append(
            text_part(f"Attached file: {label} ({mime_type}, {format_size(size)}).")
        )

        if is_text_like(name, mime_type) and size <= TEXT_INLINE_LIMIT_BYTES:
            content = buffer.decode("utf-8", errors="replace")
            parts.append(text_part(f"Contents of {label}:\n\n{content}"))

        if not api_key:
            self.logger.warning("Gemini API key missing; file upload skipped for %s", label)
            return

        try:
            uploaded = await self.upload_service.upload(buffer, mime_type, label, api_key)
        except UploadError as e:
            self.logger.warning("File upload failed for %s: %s", label, e)
            parts.append(text_part(f"Attached file {label} could not be uploaded."))
            return
        parts.append(uploaded)
