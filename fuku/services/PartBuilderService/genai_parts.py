"""Conversion of request parts and history into google-genai SDK types."""

import base64

from google.genai import types

from fuku.entities.history import HistoryEntry
from fuku.entities.request_part import RequestPart, part_kind


def to_genai_part(part: RequestPart) -> types.Part:
    kind = part_kind(part)
    if kind == "text":
        return types.Part.from_text(text=part["text"])  # type: ignore[typeddict-item]
    if kind == "inline":
        inline = part["inlineData"]  # type: ignore[typeddict-item]
        return types.Part.from_bytes(
            data=base64.b64decode(inline["data"]), mime_type=inline["mimeType"]
        )
    file_data = part["fileData"]  # type: ignore[typeddict-item]
    return types.Part.from_uri(
        file_uri=file_data["fileUri"], mime_type=file_data["mimeType"]
    )


def to_genai_contents(
    history: list[HistoryEntry], parts: list[RequestPart]
) -> list[types.Content]:
    """
    Build the ``contents`` of a generate call: past turns, then the new user turn.

    Assistant turns map to the SDK's ``model`` role; empty history messages
    are skipped.
    """
    contents: list[types.Content] = []
    for entry in history:
        if not entry["content"]:
            continue
        role = "model" if entry["role"] == "assistant" else "user"
        contents.append(
            types.Content(
                role=role, parts=[types.Part.from_text(text=entry["content"])]
            )
        )
    contents.append(
        types.Content(role="user", parts=[to_genai_part(part) for part in parts])
    )
    return contents
