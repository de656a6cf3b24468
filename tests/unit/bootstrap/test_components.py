import sys
from pathlib import Path

import pytest

from fuku.bootstrap.bootstrapper import bootstrap_ingestion
from fuku.bootstrap.components import Components
from fuku.config import Settings
from fuku.repositories.history_repository.history_repository_interface import (
    HistoryRepositoryInterface,
)
from fuku.repositories.history_repository.in_memory_history_repository import (
    InMemoryHistoryRepository,
)
from fuku.repositories.history_repository.sqlite_history_repository import (
    SqliteHistoryRepository,
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in (
        "GEMINI_API_KEY",
        "GOOGLE_API_KEY",
        "HISTORY_LIMIT",
        "SQLITE_DB_PATH",
        "IMAGE_INLINE_LIMIT_BYTES",
    ):
        monkeypatch.delenv(name, raising=False)
    Components.reset()
    yield
    Components.reset()


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


@pytest.mark.unit
class TestSettings:
    def test_defaults(self):
        settings = _settings()

        assert settings.GEMINI_API_KEY is None
        assert settings.HISTORY_LIMIT == 20
        assert settings.SQLITE_DB_PATH == "./history.db"
        assert settings.IMAGE_INLINE_LIMIT_BYTES == 8 * 1024 * 1024
        assert settings.FETCH_MAX_ATTEMPTS == 3

    def test_google_api_key_is_accepted(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_API_KEY", "google-key")

        assert _settings().GEMINI_API_KEY == "google-key"

    def test_gemini_api_key_wins(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_API_KEY", "google-key")
        monkeypatch.setenv("GEMINI_API_KEY", "gemini-key")

        assert _settings().GEMINI_API_KEY == "gemini-key"

    def test_blank_key_is_missing(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "   ")

        assert _settings().GEMINI_API_KEY is None

    @pytest.mark.parametrize(
        ("raw", "expected"), [("5", 5), ("0", 1), ("-4", 1), ("many", 20)]
    )
    def test_history_limit_parsing(self, monkeypatch, raw, expected):
        monkeypatch.setenv("HISTORY_LIMIT", raw)

        assert _settings().HISTORY_LIMIT == expected


@pytest.mark.unit
class TestComponents:
    def test_invalid_environment(self, tmp_path: Path):
        with pytest.raises(ValueError, match="Invalid environment"):
            Components("qa", _settings(SQLITE_DB_PATH=str(tmp_path / "h.db")))

    def test_uses_sqlite_when_it_opens(self, tmp_path: Path):
        components = Components(
            "test", _settings(SQLITE_DB_PATH=str(tmp_path / "h.db"))
        )

        repository = components.get_component(HistoryRepositoryInterface)
        assert isinstance(repository, SqliteHistoryRepository)
        assert (tmp_path / "h.db").exists()

    def test_falls_back_to_memory(self, tmp_path: Path, caplog):
        settings = _settings(SQLITE_DB_PATH=str(tmp_path / "no" / "such" / "h.db"))

        components = Components("test", settings)

        repository = components.get_component(HistoryRepositoryInterface)
        assert isinstance(repository, InMemoryHistoryRepository)
        assert "falling back to in-memory history store" in caplog.text

    def test_falls_back_to_memory_without_sqlite_module(
        self, tmp_path: Path, monkeypatch, caplog
    ):
        for module in (
            "fuku.components.database.sqlite_db",
            "fuku.repositories.history_repository.sqlite_history_repository",
        ):
            monkeypatch.delitem(sys.modules, module, raising=False)
        monkeypatch.setitem(sys.modules, "sqlite3", None)

        components = Components(
            "test", _settings(SQLITE_DB_PATH=str(tmp_path / "h.db"))
        )

        repository = components.get_component(HistoryRepositoryInterface)
        assert isinstance(repository, InMemoryHistoryRepository)
        assert "SQLite support is unavailable" in caplog.text
        assert not (tmp_path / "h.db").exists()

    def test_one_container_per_environment(self, tmp_path: Path):
        settings = _settings(SQLITE_DB_PATH=str(tmp_path / "h.db"))

        assert Components("test", settings) is Components("test")

    def test_unknown_component(self, tmp_path: Path):
        components = Components(
            "test", _settings(SQLITE_DB_PATH=str(tmp_path / "h.db"))
        )

        with pytest.raises(ValueError, match="not found"):
            components.get_component(dict)


@pytest.mark.unit
def test_bootstrap_ingestion_wires_services(tmp_path: Path):
    settings = _settings(
        SQLITE_DB_PATH=str(tmp_path / "h.db"),
        GEMINI_API_KEY="key",
        HISTORY_LIMIT=3,
        IMAGE_INLINE_LIMIT_BYTES=1024,
    )

    services = bootstrap_ingestion(env="test", settings=settings)

    assert services.history.is_durable is True
    assert services.part_builder.limits()["image_inline_limit_bytes"] == 1024
    for i in range(5):
        services.history.append(("user-1",), "user", f"m{i}")
    assert [e["content"] for e in services.history.read_recent(("user-1",))] == [
        "m2",
        "m3",
        "m4",
    ]
