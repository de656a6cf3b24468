from typing import NamedTuple

from fuku.config import Settings
from fuku.dependencies.components import get_components
from fuku.dependencies.services import get_history_service, get_part_builder_service
from fuku.services.HistoryService.history_service_interface import (
    HistoryServiceInterface,
)
from fuku.services.PartBuilderService.part_builder_service_interface import (
    PartBuilderServiceInterface,
)


class IngestionServices(NamedTuple):
    part_builder: PartBuilderServiceInterface
    history: HistoryServiceInterface


def bootstrap_ingestion(
    env: str = "development",
    settings: Settings | None = None,
) -> IngestionServices:
    components = get_components(env=env, settings=settings)
    part_builder: PartBuilderServiceInterface = get_part_builder_service(components)
    history: HistoryServiceInterface = get_history_service(components)
    return IngestionServices(part_builder=part_builder, history=history)
