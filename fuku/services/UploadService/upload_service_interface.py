from abc import ABC, abstractmethod

from fuku.entities.request_part import FileRefPart


class UploadServiceInterface(ABC):
    @abstractmethod
    async def upload(
        self,
        buffer: bytes,
        mime_type: str | None,
        name: str | None,
        api_key: str | None,
    ) -> FileRefPart:
        """Upload ``buffer`` to remote file storage and return a file reference part."""
