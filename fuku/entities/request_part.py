from typing import Literal, TypedDict


class InlineData(TypedDict):
    mimeType: str
    data: str


class FileData(TypedDict):
    fileUri: str
    mimeType: str


class TextPart(TypedDict):
    """Plain text segment of a multimodal request."""

    text: str


class InlineDataPart(TypedDict):
    """Binary segment carried inline as base64."""

    inlineData: InlineData


class FileRefPart(TypedDict):
    """Reference to a file previously uploaded to the Files API."""

    fileData: FileData


RequestPart = TextPart | InlineDataPart | FileRefPart

PartKind = Literal["text", "inline", "file"]


def text_part(text: str) -> TextPart:
    return {"text": text}


def inline_data_part(mime_type: str, data: str) -> InlineDataPart:
    return {"inlineData": {"mimeType": mime_type, "data": data}}


def file_ref_part(file_uri: str, mime_type: str) -> FileRefPart:
    return {"fileData": {"fileUri": file_uri, "mimeType": mime_type}}


def part_kind(part: RequestPart) -> PartKind:
    """Return the tag of a request part, rejecting anything outside the union."""
    if not isinstance(part, dict) or len(part) != 1:
        raise ValueError(f"Not a request part: {part!r}")
    if "text" in part:
        return "text"
    if "inlineData" in part:
        return "inline"
    if "fileData" in part:
        return "file"
    raise ValueError(f"Unknown request part: {sorted(part)}")
