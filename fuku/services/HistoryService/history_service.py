import logging
import time
from collections.abc import Callable
from typing import Any

from fuku.entities.history import (
    ROLES,
    ConversationKey,
    HistoryEntry,
    Role,
    conversation_key,
)
from fuku.repositories.history_repository.history_repository_interface import (
    HistoryRepositoryInterface,
)
from fuku.services.HistoryService.history_service_interface import (
    HistoryServiceInterface,
)

DEFAULT_HISTORY_LIMIT = 20


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def normalize_count(value: Any, fallback: int) -> int:
    """Positive integers pass through; anything else becomes ``fallback``."""
    if isinstance(value, bool):
        return fallback
    try:
        parsed = int(value)
    except (TypeError, ValueError, OverflowError):
        return fallback
    return parsed if parsed > 0 else fallback


class HistoryService(HistoryServiceInterface):
    """
    Rolling per-conversation transcript.

    The backend repository is picked once at startup (see Components); this
    service behaves the same whichever one it gets.
    """

    def __init__(
        self,
        history_repository: HistoryRepositoryInterface,
        logger: logging.Logger,
        default_limit: int = DEFAULT_HISTORY_LIMIT,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self.history_repository = history_repository
        self.logger = logger
        self.default_limit = normalize_count(default_limit, DEFAULT_HISTORY_LIMIT)
        self._clock = clock

    @property
    def is_durable(self) -> bool:
        return self.history_repository.is_durable

    def append(
        self,
        key: ConversationKey,
        role: Role,
        content: str,
        keep: int | None = None,
    ) -> None:
        if role not in ROLES:
            raise ValueError(f"Unsupported history role: {role!r}")

        entry: HistoryEntry = {
            "role": role,
            "content": content,
            "timestamp": self._clock(),
        }
        keep_count = normalize_count(keep, self.default_limit)
        self.history_repository.append(conversation_key(*key), entry, keep_count)
        self.logger.debug(
            "Stored %s message for %s (keep=%d)", role, tuple(key), keep_count
        )

    def read_recent(
        self, key: ConversationKey, limit: int | None = None
    ) -> list[HistoryEntry]:
        return self.history_repository.read_recent(
            conversation_key(*key), normalize_count(limit, self.default_limit)
        )

    def clear(self, key: ConversationKey) -> None:
        self.history_repository.clear(conversation_key(*key))
        self.logger.info("Cleared history for %s", tuple(key))
