"""Dependency container wiring for the photo client."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from photo_uploader.adapters.photo_api_client import (
    HttpxPhotoApiClient,
    PhotoApiClient,
    TokenProvider,
)
from photo_uploader.app_logging import configure_logging
from photo_uploader.config import Settings, parse_content_types
from photo_uploader.domain.photos import PhotoFilters
from photo_uploader.services.notifications import NotificationQueue, TimerScheduler
from photo_uploader.services.photos import PhotoCollectionStore
from photo_uploader.services.uploads import UploadOrchestrator, UploadPolicy


@dataclass
class AppContainer:
    """Holds the client-wide components consumers depend on."""

    settings: Settings
    api_client: PhotoApiClient
    notifications: NotificationQueue
    store: PhotoCollectionStore
    uploads: UploadOrchestrator
    close_resources: Callable[[], Awaitable[None]]


def build_container(
    settings: Settings | None = None,
    token_provider: TokenProvider | None = None,
    scheduler: TimerScheduler | None = None,
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    configure_logging(resolved_settings.log_level)
    api_client = HttpxPhotoApiClient.create(resolved_settings, token_provider)
    notifications = NotificationQueue(
        scheduler=scheduler,
        default_duration_ms=resolved_settings.toast_duration_ms,
    )
    store = PhotoCollectionStore(
        client=api_client,
        notifier=notifications,
        filters=PhotoFilters(size=resolved_settings.default_page_size),
    )
    uploads = UploadOrchestrator(
        client=api_client,
        store=store,
        notifier=notifications,
        policy=UploadPolicy(
            max_bytes=resolved_settings.max_upload_bytes,
            allowed_content_types=parse_content_types(
                resolved_settings.allowed_content_types
            ),
        ),
    )

    async def close_resources() -> None:
        uploads.dispose()
        store.dispose()
        notifications.dispose()
        await api_client.close()

    return AppContainer(
        settings=resolved_settings,
        api_client=api_client,
        notifications=notifications,
        store=store,
        uploads=uploads,
        close_resources=close_resources,
    )
