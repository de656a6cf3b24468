from typing import Literal, NamedTuple, TypedDict

Role = Literal["user", "assistant"]

ROLES: tuple[Role, ...] = ("user", "assistant")


class HistoryEntry(TypedDict):
    """One message of a rolling conversation transcript."""

    role: Role
    content: str
    timestamp: int


class ConversationKey(NamedTuple):
    """
    Identifies one history bucket.

    ``None`` guild/channel ids form their own bucket and never match ``""``.
    """

    user_id: str
    guild_id: str | None = None
    channel_id: str | None = None


def _as_id(value: object) -> str | None:
    return None if value is None else str(value)


def conversation_key(
    user_id: object, guild_id: object = None, channel_id: object = None
) -> ConversationKey:
    """
    Build a ``ConversationKey`` with every present id as text.

    Chat clients hand out integer snowflakes; ``123`` and ``"123"`` must name
    the same conversation.
    """
    return ConversationKey(str(user_id), _as_id(guild_id), _as_id(channel_id))
