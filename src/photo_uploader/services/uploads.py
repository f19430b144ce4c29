"""Upload orchestration from file selection to a confirmed photo."""

import itertools
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from photo_uploader.adapters.photo_api_client import PhotoApiClient
from photo_uploader.config import DEFAULT_CONTENT_TYPES, parse_content_types
from photo_uploader.domain.photos import Photo
from photo_uploader.domain.toasts import ToastSeverity
from photo_uploader.domain.uploads import UploadFile, UploadPhase, UploadTask
from photo_uploader.errors import PhotoClientError, ValidationError
from photo_uploader.services.notifications import Notifier
from photo_uploader.services.photos import PhotoCollectionStore

ProgressListener = Callable[[int], None]

_logger = logging.getLogger(__name__)

# Highest percentage reported before the server confirms the upload.
_MAX_UNCONFIRMED_PERCENT = 99


@dataclass(frozen=True)
class UploadPolicy:
    """Checks applied to a file before it may reach the network."""

    max_bytes: int = 50 * 1024 * 1024
    allowed_content_types: frozenset[str] = field(
        default_factory=lambda: parse_content_types(DEFAULT_CONTENT_TYPES)
    )

    def validate(self, file: UploadFile | None, user_id: str) -> None:
        """Raise ``ValidationError`` when the upload must not be sent."""
        if file is None:
            raise ValidationError("No file selected")
        if not user_id:
            raise ValidationError("A user id is required to upload")
        if file.size == 0:
            raise ValidationError(f"{file.filename} is empty")
        if file.size > self.max_bytes:
            raise ValidationError(
                f"{file.filename} is {_megabytes(file.size)} MB; "
                f"the limit is {_megabytes(self.max_bytes)} MB"
            )
        allowed = self.allowed_content_types
        if allowed and file.content_type.lower() not in allowed:
            raise ValidationError(
                f"{file.filename} has unsupported type {file.content_type}"
            )


@dataclass
class UploadOrchestrator:
    """Drives uploads end to end; each one is tracked by its own task."""

    client: PhotoApiClient
    store: PhotoCollectionStore
    notifier: Notifier | None = None
    policy: UploadPolicy = field(default_factory=UploadPolicy)
    _tasks: dict[str, UploadTask] = field(default_factory=dict, init=False)
    _sequence: itertools.count = field(default_factory=itertools.count, init=False)
    _disposed: bool = field(default=False, init=False)

    @property
    def tasks(self) -> dict[str, UploadTask]:
        """Live upload tasks keyed by file id."""
        return dict(self._tasks)

    @property
    def progress(self) -> dict[str, int]:
        """Current percentage of each live upload."""
        return {
            file_id: task.progress_percent for file_id, task in self._tasks.items()
        }

    async def upload(
        self,
        file: UploadFile | None,
        user_id: str,
        on_progress: ProgressListener | None = None,
    ) -> Photo:
        """Validate, send and register one upload.

        ``on_progress`` receives non-decreasing percentages. 100 is only
        reported once the server has returned the created photo.
        """
        task = UploadTask(file_id=self._file_id(file), filename=_filename(file))
        self._tasks[task.file_id] = task
        try:
            return await self._run(task, file, user_id, on_progress)
        finally:
            self._tasks.pop(task.file_id, None)

    def dispose(self) -> None:
        """Ignore the results of uploads still in flight."""
        self._disposed = True
        self._tasks.clear()

    async def _run(
        self,
        task: UploadTask,
        file: UploadFile | None,
        user_id: str,
        on_progress: ProgressListener | None,
    ) -> Photo:
        try:
            self.policy.validate(file, user_id)
        except ValidationError as exc:
            task.phase = UploadPhase.FAILED
            _logger.info("Upload rejected: file=%s reason=%s", task.filename, exc)
            self._notify(str(exc), ToastSeverity.ERROR)
            raise

        def report(sent: int, total: int) -> None:
            if task.phase is not UploadPhase.SENDING or total <= 0:
                return
            if sent >= total:
                # 100 waits for the server's answer.
                task.phase = UploadPhase.AWAITING_RESULT
                return
            percent = min(_MAX_UNCONFIRMED_PERCENT, round(sent * 100 / total))
            if task.advance(percent) and on_progress is not None:
                on_progress(task.progress_percent)

        task.phase = UploadPhase.SENDING
        _logger.info("Upload started: file=%s bytes=%s", task.filename, file.size)
        try:
            photo = await self.client.upload_photo(file, user_id, on_progress=report)
        except PhotoClientError as exc:
            task.phase = UploadPhase.FAILED
            _logger.warning("Upload failed: file=%s error=%s", task.filename, exc)
            self._notify(
                f"Failed to upload {task.filename}: {exc}", ToastSeverity.ERROR
            )
            raise
        except BaseException:
            task.phase = UploadPhase.FAILED
            raise

        task.phase = UploadPhase.DONE
        task.advance(100)
        if on_progress is not None:
            on_progress(100)
        if self._disposed or self.store.disposed:
            _logger.debug("Discarding upload result after dispose: id=%s", photo.id)
            return photo
        self.store.insert_from_upload(photo)
        _logger.info("Upload finished: file=%s photo_id=%s", task.filename, photo.id)
        self._notify(f"Uploaded {task.filename}", ToastSeverity.SUCCESS)
        return photo

    def _file_id(self, file: UploadFile | None) -> str:
        # Same-named files uploaded together still get distinct keys.
        size = 0 if file is None else file.size
        return f"{_filename(file)}:{size}:{time.time_ns()}:{next(self._sequence)}"

    def _notify(self, message: str, severity: ToastSeverity) -> None:
        if self.notifier is not None and not self._disposed:
            self.notifier.add(message, severity)


def _filename(file: UploadFile | None) -> str:
    return "<no file>" if file is None else file.filename


def _megabytes(size: int) -> str:
    return f"{size / (1024 * 1024):.1f}".rstrip("0").rstrip(".")
