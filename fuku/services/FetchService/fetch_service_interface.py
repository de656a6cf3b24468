from abc import ABC, abstractmethod


class FetchServiceInterface(ABC):
    """Interface for downloading attachment bytes."""

    @abstractmethod
    async def fetch(self, url: str) -> bytes:
        """Download ``url`` and return its body, raising FetchError on failure."""
        pass
