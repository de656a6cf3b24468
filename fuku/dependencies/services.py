from fuku.bootstrap.components import Components
from fuku.config import Settings
from fuku.dependencies.repositories import get_history_repository
from fuku.services.FetchService.fetch_service import FetchService
from fuku.services.FetchService.fetch_service_interface import FetchServiceInterface
from fuku.services.HistoryService.history_service import HistoryService
from fuku.services.HistoryService.history_service_interface import (
    HistoryServiceInterface,
)
from fuku.services.PartBuilderService.part_builder_service import PartBuilderService
from fuku.services.PartBuilderService.part_builder_service_interface import (
    PartBuilderServiceInterface,
)
from fuku.services.UploadService.upload_service import UploadService
from fuku.services.UploadService.upload_service_interface import (
    UploadServiceInterface,
)


def get_fetch_service(components: Components) -> FetchServiceInterface:
    settings = components.get_component(Settings)
    return FetchService(
        logger=components.get_logger("FetchService"),
        timeout=settings.FETCH_TIMEOUT_SECONDS,
        max_bytes=settings.FETCH_MAX_BYTES,
        max_attempts=settings.FETCH_MAX_ATTEMPTS,
        backoff=settings.FETCH_BACKOFF_SECONDS,
    )


def get_upload_service(components: Components) -> UploadServiceInterface:
    return UploadService(logger=components.get_logger("UploadService"))


def get_part_builder_service(components: Components) -> PartBuilderServiceInterface:
    """
    Create the part builder with the upload credential and image ceiling
    from the environment.

    Environment variables:
        GEMINI_API_KEY / GOOGLE_API_KEY: Files API credential (optional)
        IMAGE_INLINE_LIMIT_BYTES: Largest image sent inline (default 8 MB)
    """
    settings = components.get_component(Settings)
    return PartBuilderService(
        fetch_service=get_fetch_service(components),
        upload_service=get_upload_service(components),
        logger=components.get_logger("PartBuilderService"),
        api_key=settings.GEMINI_API_KEY,
        image_inline_limit=settings.IMAGE_INLINE_LIMIT_BYTES,
    )


def get_history_service(components: Components) -> HistoryServiceInterface:
    settings = components.get_component(Settings)
    return HistoryService(
        history_repository=get_history_repository(components),
        logger=components.get_logger("HistoryService"),
        default_limit=settings.HISTORY_LIMIT,
    )
