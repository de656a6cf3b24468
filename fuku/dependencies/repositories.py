from fuku.bootstrap.components import Components
from fuku.repositories.history_repository.history_repository_interface import (
    HistoryRepositoryInterface,
)


def get_history_repository(components: Components) -> HistoryRepositoryInterface:
    return components.get_component(HistoryRepositoryInterface)
