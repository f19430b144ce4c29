"""Canonical in-memory photo collection kept in step with the server."""

import logging
from dataclasses import dataclass, field
from typing import assert_never

from photo_uploader.adapters.photo_api_client import PhotoApiClient
from photo_uploader.domain.actions import (
    ErrorCleared,
    FiltersChanged,
    LoadFailed,
    LoadStarted,
    PhotoAction,
    PhotoInserted,
    PhotoMarkedPending,
    PhotoRefreshed,
    PhotoRemoved,
    PhotoSelected,
    PhotosLoaded,
)
from photo_uploader.domain.photos import (
    Photo,
    PhotoEvent,
    PhotoFilters,
    PhotoPage,
    PhotoStats,
)
from photo_uploader.domain.status import PhotoStatus, can_retry
from photo_uploader.domain.toasts import ToastSeverity
from photo_uploader.errors import PhotoClientError, ValidationError
from photo_uploader.services.notifications import Notifier

_logger = logging.getLogger(__name__)


@dataclass
class PhotoCollectionStore:
    """Owns the photo list, filters and pagination cursor.

    State only changes through ``dispatch``. Network results are applied in
    the order they complete, so with two loads in flight the one that
    finishes last decides the visible list. After ``dispose`` every late
    result is ignored.
    """

    client: PhotoApiClient
    notifier: Notifier | None = None
    filters: PhotoFilters = field(default_factory=PhotoFilters)
    error: str | None = field(default=None, init=False)
    total_elements: int = field(default=0, init=False)
    total_pages: int = field(default=0, init=False)
    _photos: list[Photo] = field(default_factory=list, init=False)
    _provisional: set[int] = field(default_factory=set, init=False)
    _selected: Photo | None = field(default=None, init=False)
    _loads_in_flight: int = field(default=0, init=False)
    _disposed: bool = field(default=False, init=False)

    @property
    def photos(self) -> list[Photo]:
        """Snapshot of the collection, most recent first."""
        return list(self._photos)

    @property
    def selected(self) -> Photo | None:
        return self._selected

    @property
    def loading(self) -> bool:
        return self._loads_in_flight > 0

    @property
    def disposed(self) -> bool:
        return self._disposed

    def get(self, photo_id: int) -> Photo | None:
        """Return the held copy of a photo, if present."""
        index = self._index_of(photo_id)
        return None if index is None else self._photos[index]

    def is_provisional(self, photo_id: int) -> bool:
        """True while a photo carries an optimistic status not yet re-read."""
        return photo_id in self._provisional

    async def load(
        self,
        filters: PhotoFilters | None = None,
        page: int | None = None,
        size: int | None = None,
    ) -> PhotoPage:
        """Replace the collection with one page of server results."""
        query = filters or self.filters
        if page is not None or size is not None:
            query = query.at_page(query.page if page is None else page, size)
        self.dispatch(LoadStarted())
        try:
            result = await self.client.get_photos(query)
        except PhotoClientError as exc:
            self.dispatch(LoadFailed(message=str(exc)))
            self._notify(f"Failed to load photos: {exc}", ToastSeverity.ERROR)
            raise
        self.dispatch(PhotosLoaded(page=result, filters=query))
        return result

    def insert_from_upload(self, photo: Photo) -> None:
        """Prepend a server-confirmed upload regardless of current filters."""
        self.dispatch(PhotoInserted(photo=photo))

    def remove(self, photo_id: int) -> None:
        """Drop a photo from the collection; unknown ids are ignored."""
        self.dispatch(PhotoRemoved(photo_id=photo_id))

    def mark_pending(self, photo_id: int) -> None:
        """Optimistically flag a FAILED photo as PENDING after a retry request."""
        self.dispatch(PhotoMarkedPending(photo_id=photo_id))

    def set_filters(self, **changes: str | int | None) -> PhotoFilters:
        """Merge filter changes and reset to page 0 without reloading."""
        filters = self.filters.with_changes(**changes)
        self.dispatch(FiltersChanged(filters=filters))
        return filters

    def select(self, photo_id: int | None) -> None:
        self.dispatch(PhotoSelected(photo_id=photo_id))

    def clear_error(self) -> None:
        self.dispatch(ErrorCleared())

    async def delete(self, photo_id: int) -> None:
        """Delete a photo on the server, then locally."""
        try:
            await self.client.delete_photo(photo_id)
        except PhotoClientError as exc:
            self._notify(f"Failed to delete photo: {exc}", ToastSeverity.ERROR)
            raise
        self.remove(photo_id)
        self._notify("Photo deleted", ToastSeverity.SUCCESS)

    async def retry(self, photo_id: int) -> None:
        """Ask the server to reprocess a FAILED photo."""
        photo = self.get(photo_id)
        if photo is None or not can_retry(photo.status):
            status = "missing" if photo is None else photo.status
            _logger.info("Retry rejected: photo_id=%s status=%s", photo_id, status)
            self._notify(
                "Only failed photos can be retried", ToastSeverity.WARNING
            )
            raise ValidationError(
                f"photo {photo_id} cannot be retried from status {status}"
            )
        try:
            await self.client.retry_processing(photo_id)
        except PhotoClientError as exc:
            self._notify(f"Failed to retry photo: {exc}", ToastSeverity.ERROR)
            raise
        self.mark_pending(photo_id)
        self._notify("Photo queued for reprocessing", ToastSeverity.INFO)

    async def refresh(self, photo_id: int) -> Photo:
        """Re-read one photo and reconcile the held copy."""
        photo = await self.client.get_photo(photo_id)
        self.dispatch(PhotoRefreshed(photo=photo))
        return photo

    async def load_events(self, photo_id: int) -> list[PhotoEvent]:
        """Fetch the lifecycle history of a photo; the collection is untouched."""
        return await self.client.get_photo_events(photo_id)

    async def load_stats(self) -> PhotoStats:
        return await self.client.get_stats()

    def dispose(self) -> None:
        """Stop applying results; anything still in flight is ignored."""
        self._disposed = True

    def dispatch(self, action: PhotoAction) -> None:
        """Apply one state change."""
        if self._disposed:
            _logger.debug("Ignoring %s after dispose", type(action).__name__)
            return
        self._reduce(action)

    def _reduce(self, action: PhotoAction) -> None:  # noqa: PLR0912
        if isinstance(action, LoadStarted):
            self._loads_in_flight += 1
            self.error = None
        elif isinstance(action, PhotosLoaded):
            self._loads_in_flight = max(0, self._loads_in_flight - 1)
            self._photos = _dedupe(action.page.content)
            self._provisional.clear()
            self.filters = action.filters
            self.total_elements = action.page.total_elements
            self.total_pages = action.page.total_pages
            if self._selected is not None:
                self._selected = self.get(self._selected.id) or self._selected
        elif isinstance(action, LoadFailed):
            self._loads_in_flight = max(0, self._loads_in_flight - 1)
            self.error = action.message
        elif isinstance(action, PhotoInserted):
            self._photos = [action.photo] + [
                photo for photo in self._photos if photo.id != action.photo.id
            ]
        elif isinstance(action, PhotoRemoved):
            self._photos = [
                photo for photo in self._photos if photo.id != action.photo_id
            ]
            self._provisional.discard(action.photo_id)
            if self._selected is not None and self._selected.id == action.photo_id:
                self._selected = None
        elif isinstance(action, PhotoMarkedPending):
            index = self._index_of(action.photo_id)
            if index is None or not can_retry(self._photos[index].status):
                return
            self._replace(
                index,
                self._photos[index].model_copy(
                    update={"status": PhotoStatus.PENDING.value}
                ),
            )
            self._provisional.add(action.photo_id)
        elif isinstance(action, PhotoRefreshed):
            index = self._index_of(action.photo.id)
            if index is None:
                return
            if action.photo.updated_at < self._photos[index].updated_at:
                _logger.debug("Ignoring stale read of photo_id=%s", action.photo.id)
                return
            self._replace(index, action.photo)
            self._provisional.discard(action.photo.id)
        elif isinstance(action, FiltersChanged):
            self.filters = action.filters
        elif isinstance(action, PhotoSelected):
            self._selected = (
                None if action.photo_id is None else self.get(action.photo_id)
            )
        elif isinstance(action, ErrorCleared):
            self.error = None
        else:
            assert_never(action)

    def _replace(self, index: int, photo: Photo) -> None:
        self._photos[index] = photo
        if self._selected is not None and self._selected.id == photo.id:
            self._selected = photo

    def _index_of(self, photo_id: int) -> int | None:
        for index, photo in enumerate(self._photos):
            if photo.id == photo_id:
                return index
        return None

    def _notify(self, message: str, severity: ToastSeverity) -> None:
        if self.notifier is not None and not self._disposed:
            self.notifier.add(message, severity)


def _dedupe(photos: list[Photo]) -> list[Photo]:
    """Keep the first occurrence of each id."""
    seen: set[int] = set()
    unique: list[Photo] = []
    for photo in photos:
        if photo.id in seen:
            continue
        seen.add(photo.id)
        unique.append(photo)
    return unique
