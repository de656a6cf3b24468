"""
Attachment classification helpers.

Decides image vs. file for each attachment and resolves a MIME type from the
signals the chat client gives us (declared content type, file extension and
image dimensions). Nothing here performs I/O and nothing here raises.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from numbers import Real
from pathlib import PurePosixPath
from typing import Any

from fuku.entities.attachment import (
    AttachmentBatch,
    AttachmentDescriptor,
    ClassifiedAttachment,
)

DEFAULT_MIME_TYPE = "application/octet-stream"
DEFAULT_IMAGE_MIME_TYPE = "image/png"

IMAGE_EXTENSIONS = frozenset(
    {".png", ".jpg", ".jpeg", ".webp", ".gif", ".bmp", ".tiff", ".tif"}
)

TEXT_EXTENSIONS = frozenset(
    {".txt", ".md", ".csv", ".json", ".xml", ".log", ".yaml", ".yml"}
)

TEXT_LIKE_MIME_TYPES = frozenset({"application/json", "application/xml"})

MIME_BY_EXTENSION: dict[str, str] = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
    ".tiff": "image/tiff",
    ".tif": "image/tiff",
    ".svg": "image/svg+xml",
    ".pdf": "application/pdf",
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".csv": "text/csv",
    ".json": "application/json",
    ".xml": "application/xml",
    ".log": "text/plain",
    ".yaml": "application/x-yaml",
    ".yml": "application/x-yaml",
}

_SIZE_UNITS = ("B", "KB", "MB", "GB")


def _extension(name: str | None) -> str:
    if not name:
        return ""
    return PurePosixPath(name).suffix.lower()


def _finite_number(value: Any) -> int | float | None:
    if isinstance(value, bool) or not isinstance(value, Real):
        return None
    if not math.isfinite(value):
        return None
    return value


def _read(descriptor: Any, *names: str) -> Any:
    """Read the first non-empty field among ``names`` from an object or mapping."""
    for name in names:
        if isinstance(descriptor, Mapping):
            value = descriptor.get(name)
        else:
            value = getattr(descriptor, name, None)
        if value is not None and value != "":
            return value
    return None


def resolve_mime_type(name: str | None = "", declared: str | None = "") -> str:
    """Declared MIME first, then the extension table. Empty string when unknown."""
    if declared:
        return declared
    return MIME_BY_EXTENSION.get(_extension(name), "")


def has_dimensions(width: Any, height: Any) -> bool:
    return _finite_number(width) is not None and _finite_number(height) is not None


def is_image_attachment(
    name: str | None = "",
    mime_type: str | None = "",
    width: Any = None,
    height: Any = None,
) -> bool:
    if mime_type and mime_type.startswith("image/"):
        return True
    if _extension(name) in IMAGE_EXTENSIONS:
        return True
    return has_dimensions(width, height)


def is_text_like(name: str | None = "", mime_type: str | None = "") -> bool:
    if mime_type and mime_type.startswith("text/"):
        return True
    if _extension(name) in TEXT_EXTENSIONS:
        return True
    return mime_type in TEXT_LIKE_MIME_TYPES


def classify(
    descriptor: AttachmentDescriptor | Mapping[str, Any],
) -> ClassifiedAttachment:
    """
    Classify a raw attachment descriptor.

    Accepts discord.py-style attachment objects (``filename``, ``content_type``)
    as well as plain mappings (``name``, ``contentType``). Always returns a
    result; unknown sizes and dimensions stay ``None``.
    """
    url = _read(descriptor, "url")
    name = str(_read(descriptor, "name", "filename") or "")
    declared = _read(descriptor, "content_type", "contentType", "mime_type")
    declared_mime = declared if isinstance(declared, str) else ""

    size = _finite_number(_read(descriptor, "size"))
    if size is not None and size < 0:
        size = None
    width = _finite_number(_read(descriptor, "width"))
    height = _finite_number(_read(descriptor, "height"))

    mime_type = resolve_mime_type(name, declared_mime)
    if not mime_type and has_dimensions(width, height):
        mime_type = DEFAULT_IMAGE_MIME_TYPE

    return {
        "is_image": is_image_attachment(name, declared_mime, width, height),
        "mime_type": mime_type or DEFAULT_MIME_TYPE,
        "name": name,
        "size": int(size) if size is not None else None,
        "url": str(url) if url else None,
        "width": width,
        "height": height,
    }


def _iter_descriptors(source: Any) -> Iterable[Any]:
    if source is None:
        return ()
    attachments = getattr(source, "attachments", None)
    if attachments is not None and not isinstance(source, Mapping):
        source = attachments
    values = getattr(source, "values", None)
    if callable(values):
        return values()
    return source


def split_attachments(source: Any) -> AttachmentBatch:
    """
    Classify every attachment of a message and split images from files.

    ``source`` may be a message exposing ``.attachments``, a collection with a
    ``.values()`` iterator (discord.py ``Collection`` style) or any iterable of
    descriptors. Order is preserved within each list.
    """
    images: list[ClassifiedAttachment] = []
    files: list[ClassifiedAttachment] = []
    for descriptor in _iter_descriptors(source):
        item = classify(descriptor)
        if item["is_image"]:
            images.append(item)
        else:
            files.append(item)
    return {
        "images": images,
        "files": files,
        "has_images": bool(images),
        "has_files": bool(files),
    }


def format_size(num_bytes: Any) -> str:
    """Human-readable base-1024 size, e.g. ``"1.5 KB"`` or ``"12 MB"``."""
    value = _finite_number(num_bytes)
    if value is None or value < 0:
        return "unknown size"
    if value == 0:
        return "0 B"

    exponent = 0
    scaled = float(value)
    while scaled >= 1024 and exponent < len(_SIZE_UNITS) - 1:
        scaled /= 1024
        exponent += 1
    if scaled < 10 and exponent > 0:
        return f"{scaled:.1f} {_SIZE_UNITS[exponent]}"
    return f"{scaled:.0f} {_SIZE_UNITS[exponent]}"
