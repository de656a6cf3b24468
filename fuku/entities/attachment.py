from typing import Protocol, TypedDict


class AttachmentDescriptor(Protocol):
    """
    Attachment as exposed by the chat client (e.g. a discord.py Attachment).

    Mappings with ``name`` and ``contentType`` keys are accepted as well.
    """

    url: str
    filename: str
    content_type: str | None
    size: int | None
    width: int | None
    height: int | None


class ClassifiedAttachment(TypedDict):
    """Attachment after classification, ready for the part builder."""

    is_image: bool
    mime_type: str
    name: str
    size: int | None
    url: str | None
    width: int | float | None
    height: int | float | None


class AttachmentBatch(TypedDict):
    images: list[ClassifiedAttachment]
    files: list[ClassifiedAttachment]
    has_images: bool
    has_files: bool
