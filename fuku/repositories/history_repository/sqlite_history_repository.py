import sqlite3

from fuku.components.database.db_interface import DBInterface
from fuku.entities.history import ConversationKey, HistoryEntry, conversation_key
from fuku.repositories.history_repository.history_repository_interface import (
    HistoryRepositoryInterface,
    StoreInitError,
)

# ``IS ?`` matches NULL only against NULL, so a missing guild/channel is its
# own bucket and never collides with an empty string.
_KEY_FILTER = "user_id = ? AND guild_id IS ? AND channel_id IS ?"


class SqliteHistoryRepository(HistoryRepositoryInterface):
    is_durable = True

    def __init__(self, db: DBInterface):
        self.db = db
        try:
            self.db.connect()
            self._init_table()
        except (sqlite3.Error, OSError) as e:
            raise StoreInitError(f"Cannot open SQLite history store: {e}") from e

    def _init_table(self):
        self.db.execute("PRAGMA journal_mode = WAL")

        query = """
        CREATE TABLE IF NOT EXISTS messages (
            user_id TEXT NOT NULL,
            guild_id TEXT,
            channel_id TEXT,
            role TEXT CHECK (role IN ('user', 'assistant')) NOT NULL,
            content TEXT NOT NULL,
            ts INTEGER NOT NULL
        );
        """
        self.db.execute(query)

        query_index = """
        CREATE INDEX IF NOT EXISTS ix_user_guild_chan_ts
            ON messages (user_id, guild_id, channel_id, ts);
        """
        self.db.execute(query_index)

    def append(self, key: ConversationKey, entry: HistoryEntry, keep: int) -> None:
        insert = """
        INSERT INTO messages (user_id, guild_id, channel_id, role, content, ts)
        VALUES (?, ?, ?, ?, ?, ?)
        """
        trim = f"""
        DELETE FROM messages
        WHERE rowid IN (
            SELECT rowid FROM messages
            WHERE {_KEY_FILTER}
            ORDER BY ts DESC, rowid DESC
            LIMIT -1 OFFSET ?
        )
        """
        key = conversation_key(*key)
        with self.db.transaction():
            self.db.execute(
                insert,
                (*key, entry["role"], entry["content"], entry["timestamp"]),
            )
            self.db.execute(trim, (*key, keep))

    def read_recent(self, key: ConversationKey, limit: int) -> list[HistoryEntry]:
        query = f"""
        SELECT role, content, ts FROM messages
        WHERE {_KEY_FILTER}
        ORDER BY ts DESC, rowid DESC
        LIMIT ?
        """
        key = conversation_key(*key)
        rows = self.db.execute_and_fetch(query, (*key, limit))
        return [
            {"role": row["role"], "content": row["content"], "timestamp": row["ts"]}
            for row in reversed(rows)
        ]

    def clear(self, key: ConversationKey) -> None:
        self.db.execute(
            f"DELETE FROM messages WHERE {_KEY_FILTER}", tuple(conversation_key(*key))
        )
