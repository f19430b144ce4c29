"""Shared test fixtures."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest

from photo_uploader.adapters.photo_api_client import PhotoApiClient, ProgressCallback
from photo_uploader.config import Settings
from photo_uploader.domain.photos import (
    Photo,
    PhotoEvent,
    PhotoFilters,
    PhotoPage,
    PhotoStats,
)
from photo_uploader.domain.toasts import ToastSeverity
from photo_uploader.domain.uploads import UploadFile
from photo_uploader.errors import NotFoundError
from photo_uploader.services.notifications import NotificationQueue

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


def make_photo(photo_id: int, status: str = "UPLOADED", **overrides: object) -> Photo:
    """Build a photo record with sensible defaults."""
    uploaded_at = BASE_TIME + timedelta(minutes=photo_id)
    values: dict[str, object] = {
        "id": photo_id,
        "user_id": "user-123",
        "original_file_name": f"photo-{photo_id}.jpg",
        "content_type": "image/jpeg",
        "file_size": 2 * 1024 * 1024,
        "status": status,
        "uploaded_at": uploaded_at,
        "updated_at": uploaded_at,
    }
    values.update(overrides)
    return Photo(**values)


def photo_payload(photo_id: int, status: str = "UPLOADED") -> dict[str, object]:
    """Server-shaped JSON for a photo."""
    return {
        "id": photo_id,
        "userId": "user-123",
        "originalFileName": f"photo-{photo_id}.jpg",
        "contentType": "image/jpeg",
        "fileSize": 2048,
        "status": status,
        "uploadedAt": "2024-05-01T12:00:00Z",
        "updatedAt": "2024-05-01T12:00:05Z",
    }


def make_file(
    name: str = "beach.jpg",
    size: int = 2 * 1024 * 1024,
    content_type: str = "image/jpeg",
) -> UploadFile:
    return UploadFile(filename=name, content_type=content_type, content=b"x" * size)


@dataclass
class FakeTimer:
    """Timer recorded by the fake scheduler."""

    due_at: float
    callback: Callable[..., object]
    args: tuple[object, ...]
    cancelled: bool = False
    fired: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class FakeScheduler:
    """Manually advanced clock standing in for the event loop."""

    now: float = 0.0
    timers: list[FakeTimer] = field(default_factory=list)

    def call_later(
        self, delay: float, callback: Callable[..., object], *args: object
    ) -> FakeTimer:
        timer = FakeTimer(due_at=self.now + delay, callback=callback, args=args)
        self.timers.append(timer)
        return timer

    def advance(self, seconds: float) -> None:
        self.now += seconds
        for timer in sorted(self.timers, key=lambda item: item.due_at):
            if timer.cancelled or timer.fired or timer.due_at > self.now:
                continue
            timer.fired = True
            timer.callback(*timer.args)

    @property
    def pending(self) -> list[FakeTimer]:
        return [
            timer for timer in self.timers if not timer.cancelled and not timer.fired
        ]


@dataclass
class RecordingNotifier:
    """Notifier that keeps every toast it was asked to show."""

    toasts: list[tuple[str, ToastSeverity]] = field(default_factory=list)

    def add(
        self,
        message: str,
        severity: ToastSeverity | str = ToastSeverity.INFO,
        duration_ms: int | None = None,
    ) -> str:
        self.toasts.append((message, ToastSeverity(severity)))
        return str(len(self.toasts))

    @property
    def severities(self) -> list[ToastSeverity]:
        return [severity for _, severity in self.toasts]


@dataclass
class FakePhotoApiClient(PhotoApiClient):
    """In-memory photo service."""

    photos: dict[int, Photo] = field(default_factory=dict)
    events: dict[int, list[PhotoEvent]] = field(default_factory=dict)
    progress_steps: list[tuple[int, int]] = field(
        default_factory=lambda: [(10, 100), (45, 100), (80, 100), (100, 100)]
    )
    upload_status: str = "UPLOADED"
    upload_error: Exception | None = None
    load_error: Exception | None = None
    retry_error: Exception | None = None
    calls: list[str] = field(default_factory=list)
    retried: list[int] = field(default_factory=list)
    next_id: int = 100

    async def upload_photo(
        self,
        file: UploadFile,
        user_id: str,
        on_progress: ProgressCallback | None = None,
    ) -> Photo:
        self.calls.append("upload")
        for sent, total in self.progress_steps:
            if on_progress is not None:
                on_progress(sent, total)
        if self.upload_error is not None:
            raise self.upload_error
        self.next_id += 1
        photo = make_photo(
            self.next_id,
            status=self.upload_status,
            user_id=user_id,
            original_file_name=file.filename,
            content_type=file.content_type,
            file_size=file.size,
        )
        self.photos[photo.id] = photo
        return photo

    async def get_photos(self, filters: PhotoFilters) -> PhotoPage:
        self.calls.append("get_photos")
        if self.load_error is not None:
            raise self.load_error
        matching = [
            photo
            for photo in self.photos.values()
            if (filters.user_id is None or photo.user_id == filters.user_id)
            and (filters.status is None or photo.status == filters.status)
        ]
        matching.sort(key=lambda photo: photo.uploaded_at, reverse=True)
        start = filters.page * filters.size
        total = len(matching)
        return PhotoPage(
            content=matching[start : start + filters.size],
            total_elements=total,
            total_pages=(total + filters.size - 1) // filters.size,
            size=filters.size,
            number=filters.page,
        )

    async def get_photo(self, photo_id: int) -> Photo:
        self.calls.append("get_photo")
        if photo_id not in self.photos:
            raise NotFoundError(404, path=f"/photos/{photo_id}")
        return self.photos[photo_id]

    async def delete_photo(self, photo_id: int) -> None:
        self.calls.append("delete_photo")
        if photo_id not in self.photos:
            raise NotFoundError(404, path=f"/photos/{photo_id}")
        del self.photos[photo_id]

    async def retry_processing(self, photo_id: int) -> None:
        self.calls.append("retry_processing")
        if self.retry_error is not None:
            raise self.retry_error
        if photo_id not in self.photos:
            raise NotFoundError(404, path=f"/photos/{photo_id}/retry")
        self.retried.append(photo_id)

    async def get_photo_events(self, photo_id: int) -> list[PhotoEvent]:
        self.calls.append("get_photo_events")
        return self.events.get(photo_id, [])

    async def get_stats(self) -> PhotoStats:
        self.calls.append("get_stats")
        failed = sum(1 for photo in self.photos.values() if photo.status == "FAILED")
        return PhotoStats(total_photos=len(self.photos), failed_photos=failed)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        api_base_url="https://photos.test/api",
        auth_token=None,
        basic_auth_username="user",
        basic_auth_password="password",
    )


@pytest.fixture
def api_client() -> FakePhotoApiClient:
    return FakePhotoApiClient()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def notifications(scheduler: FakeScheduler) -> NotificationQueue:
    return NotificationQueue(scheduler=scheduler)
