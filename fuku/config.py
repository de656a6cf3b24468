from typing import Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_HISTORY_LIMIT = 20


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Upload credential for the Gemini Files API. Absent disables uploads.
    GEMINI_API_KEY: str | None = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    )

    # History
    HISTORY_LIMIT: int = DEFAULT_HISTORY_LIMIT
    SQLITE_DB_PATH: str = "./history.db"

    # Attachments
    IMAGE_INLINE_LIMIT_BYTES: int = 8 * 1024 * 1024
    FETCH_TIMEOUT_SECONDS: float = 20.0
    FETCH_MAX_BYTES: int = 50 * 1024 * 1024
    FETCH_MAX_ATTEMPTS: int = 3
    FETCH_BACKOFF_SECONDS: float = 0.5

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"

    @field_validator("GEMINI_API_KEY", mode="before")
    @classmethod
    def _blank_key_is_missing(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("HISTORY_LIMIT", mode="before")
    @classmethod
    def _parse_history_limit(cls, value: Any) -> int:
        # Unparsable values fall back to the default; parsable ones are at least 1.
        try:
            parsed = int(str(value).strip())
        except (TypeError, ValueError):
            return DEFAULT_HISTORY_LIMIT
        return max(1, parsed)
