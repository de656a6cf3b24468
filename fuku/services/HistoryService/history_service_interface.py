from abc import ABC, abstractmethod

from fuku.entities.history import ConversationKey, HistoryEntry, Role


class HistoryServiceInterface(ABC):
    @property
    @abstractmethod
    def is_durable(self) -> bool:
        """True when history survives a process restart."""

    @abstractmethod
    def append(
        self,
        key: ConversationKey,
        role: Role,
        content: str,
        keep: int | None = None,
    ) -> None:
        """Record a message and keep only the newest ``keep`` for the conversation."""

    @abstractmethod
    def read_recent(
        self, key: ConversationKey, limit: int | None = None
    ) -> list[HistoryEntry]:
        """Return up to ``limit`` recent messages, oldest first."""

    @abstractmethod
    def clear(self, key: ConversationKey) -> None:
        """Forget the conversation."""
