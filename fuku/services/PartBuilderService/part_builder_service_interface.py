from abc import ABC, abstractmethod
from typing import Any

from fuku.entities.attachment import ClassifiedAttachment
from fuku.entities.request_part import RequestPart


class PartBuilderServiceInterface(ABC):
    @abstractmethod
    async def build(
        self,
        text: str | None,
        images: list[ClassifiedAttachment] | None = None,
        files: list[ClassifiedAttachment] | None = None,
        api_key: str | None = None,
        inline_size_ceiling: int | None = None,
    ) -> list[RequestPart]:
        """
        Turn a message and its classified attachments into request parts.

        The list always starts with the message text and is never empty.
        A failing attachment is replaced by a text notice; it never aborts
        the whole build.
        """

    @abstractmethod
    async def build_from_attachments(
        self,
        text: str | None,
        attachments: Any,
        api_key: str | None = None,
        inline_size_ceiling: int | None = None,
    ) -> list[RequestPart]:
        """Classify raw attachment descriptors, then build the parts."""

    @abstractmethod
    def limits(self) -> dict[str, int]:
        """Inline ceilings currently in effect."""
