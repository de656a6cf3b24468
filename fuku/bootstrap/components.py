import logging
from threading import Lock
from typing import Any, TypeVar, cast

from dotenv import load_dotenv

from fuku.config import Settings
from fuku.repositories.history_repository.history_repository_interface import (
    HistoryRepositoryInterface,
    StoreInitError,
)
from fuku.repositories.history_repository.in_memory_history_repository import (
    InMemoryHistoryRepository,
)


load_dotenv()

T = TypeVar("T")


class ComponentsMeta(type):
    _instances: dict[tuple[type, str], "Components"] = {}
    _lock: Lock = Lock()

    def __call__(cls, *args, **kwargs):
        env = args[0] if args else kwargs.get("env")
        if env is None:
            raise ValueError("Environment must be provided")

        env_key = str(env)
        key = (cls, env_key)
        with cls._lock:
            if key not in cls._instances:
                instance = super().__call__(*args, **kwargs)
                cls._instances[key] = instance
        return cls._instances[key]


class Components(metaclass=ComponentsMeta):
    """
    Process-wide container, one per environment.

    The history backend is chosen here, once: SQLite when it opens, otherwise
    an in-memory store for the rest of the process.
    """

    def __init__(self, env: str, settings: Settings | None = None) -> None:
        self.__env: str = env
        self.__components: dict[type[Any], Any] = self.__bootstrap_components(
            settings
        )

    def __bootstrap_components(self, settings: Settings | None) -> dict[type[Any], Any]:
        if self.__env in {"development", "staging", "production", "test"}:
            return self.__get_components(settings or Settings())

        raise ValueError(f"Invalid environment: {self.__env}")

    def __get_components(self, settings: Settings) -> dict[type[Any], Any]:
        logging.basicConfig(format=settings.LOG_FORMAT, level=settings.LOG_LEVEL.upper())
        logger = logging.getLogger("Components")

        db_path = settings.SQLITE_DB_PATH

        history_repository: HistoryRepositoryInterface
        try:
            history_repository = self.__open_sqlite_history(db_path)
            logger.info(
                "Using SQLite history at %s, last=%d per user/channel.",
                db_path,
                settings.HISTORY_LIMIT,
            )
        except StoreInitError as error:
            logger.warning(
                "%s; falling back to in-memory history store for this process.",
                error,
            )
            history_repository = InMemoryHistoryRepository()

        components: dict[type[Any], Any] = {
            Settings: settings,
            HistoryRepositoryInterface: history_repository,
        }

        return components

    @staticmethod
    def __open_sqlite_history(db_path: str) -> HistoryRepositoryInterface:
        # sqlite3 is optional; without it there is no durable store.
        try:
            from fuku.components.database.sqlite_db import SqliteDB
            from fuku.repositories.history_repository.sqlite_history_repository import (
                SqliteHistoryRepository,
            )
        except ImportError as e:
            raise StoreInitError(f"SQLite support is unavailable: {e}") from e

        return SqliteHistoryRepository(SqliteDB(db_path=db_path))

    def get_component(self, component_name: type[T]) -> T:
        if component_name not in self.__components:
            raise ValueError(f"Component {component_name} not found")

        return cast(T, self.__components[component_name])

    def get_logger(self, name: str) -> logging.Logger:
        return logging.getLogger(name)

    @classmethod
    def reset(cls) -> None:
        """Drop cached containers (used by tests and smoke scripts)."""
        with ComponentsMeta._lock:
            ComponentsMeta._instances.clear()
