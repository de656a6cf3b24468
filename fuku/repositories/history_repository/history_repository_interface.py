from abc import ABC, abstractmethod

from fuku.entities.history import ConversationKey, HistoryEntry


class StoreInitError(Exception):
    """Raised when the durable history backend cannot be opened."""


class HistoryRepositoryInterface(ABC):
    is_durable: bool = False

    @abstractmethod
    def append(self, key: ConversationKey, entry: HistoryEntry, keep: int) -> None:
        """Store ``entry`` and drop all but the newest ``keep`` entries for ``key``."""

    @abstractmethod
    def read_recent(self, key: ConversationKey, limit: int) -> list[HistoryEntry]:
        """Return up to ``limit`` newest entries for ``key``, oldest first."""

    @abstractmethod
    def clear(self, key: ConversationKey) -> None:
        """Remove every entry stored for ``key``."""
