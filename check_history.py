import sys

from fuku.dependencies.components import get_components
from fuku.dependencies.services import get_history_service
from fuku.entities.history import ConversationKey

MESSAGE_COUNT = 25
KEEP = 20


def main() -> int:
    components = get_components(env="development")
    history = get_history_service(components)
    key = ConversationKey("test-user", "test-guild", "test-channel")

    history.clear(key)
    for i in range(1, MESSAGE_COUNT + 1):
        history.append(key, "user", f"message-{i}", keep=KEEP)

    entries = history.read_recent(key, limit=KEEP)
    expected = [
        f"message-{i}" for i in range(MESSAGE_COUNT - KEEP + 1, MESSAGE_COUNT + 1)
    ]
    history.clear(key)

    if len(entries) != KEEP:
        print(f"Expected {KEEP} messages, found {len(entries)}")
        return 1

    if [entry["content"] for entry in entries] != expected:
        print("History contents were not trimmed as expected.")
        return 1

    backend = "SQLite" if history.is_durable else "in-memory"
    print(f"{backend} history trimming works as expected.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
