from bisect import bisect_right

from fuku.entities.history import ConversationKey, HistoryEntry, conversation_key
from fuku.repositories.history_repository.history_repository_interface import (
    HistoryRepositoryInterface,
)


class InMemoryHistoryRepository(HistoryRepositoryInterface):
    """
    Process-local history used when SQLite is unavailable.

    Entries per key stay sorted by timestamp, with equal timestamps in
    insertion order, which is the order the SQLite backend reads them in.
    """

    def __init__(self) -> None:
        self._messages: dict[ConversationKey, list[HistoryEntry]] = {}

    def append(self, key: ConversationKey, entry: HistoryEntry, keep: int) -> None:
        messages = self._messages.setdefault(conversation_key(*key), [])
        position = bisect_right(
            messages, entry["timestamp"], key=lambda item: item["timestamp"]
        )
        messages.insert(position, HistoryEntry(**entry))
        if len(messages) > keep:
            del messages[: len(messages) - keep]

    def read_recent(self, key: ConversationKey, limit: int) -> list[HistoryEntry]:
        messages = self._messages.get(conversation_key(*key), [])
        return [HistoryEntry(**entry) for entry in messages[-limit:]]

    def clear(self, key: ConversationKey) -> None:
        self._messages.pop(conversation_key(*key), None)
