from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Any

Params = tuple | dict | None


class DBInterface(ABC):
    @abstractmethod
    def connect(self) -> None:
        pass

    @abstractmethod
    def close(self) -> None:
        pass

    @abstractmethod
    def execute(self, query: str, params: Params = None) -> None:
        pass

    @abstractmethod
    def execute_and_fetch(self, query: str, params: Params = None) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    def transaction(self) -> AbstractContextManager[None]:
        """
        Group statements into one write transaction.

        Commits when the block exits normally and rolls back when it raises.
        """
