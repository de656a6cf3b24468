import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from fuku.components.database.db_interface import DBInterface, Params


class SqliteDB(DBInterface):
    """
    Single-connection SQLite access in autocommit mode.

    Statements outside ``transaction()`` commit on their own; rows come back
    as plain dicts.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._connection: sqlite3.Connection | None = None

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    def connect(self) -> None:
        if self._connection is not None:
            return
        connection = sqlite3.connect(self.db_path, isolation_level=None)
        connection.row_factory = sqlite3.Row
        self._connection = connection

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def _run(self, query: str, params: Params) -> sqlite3.Cursor:
        if self._connection is None:
            raise ConnectionError(f"SQLite database {self.db_path} is not connected")
        return self._connection.execute(query, params if params is not None else ())

    def execute(self, query: str, params: Params = None) -> None:
        self._run(query, params)

    def execute_and_fetch(self, query: str, params: Params = None) -> list[dict[str, Any]]:
        return [dict(row) for row in self._run(query, params).fetchall()]

    @contextmanager
    def transaction(self) -> Iterator[None]:
        # IMMEDIATE takes the write lock at BEGIN.
        self._run("BEGIN IMMEDIATE", None)
        try:
            yield
        except BaseException:
            self._run("ROLLBACK", None)
            raise
        self._run("COMMIT", None)
