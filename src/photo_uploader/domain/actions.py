"""State changes accepted by the photo collection store."""

from dataclasses import dataclass

from photo_uploader.domain.photos import Photo, PhotoFilters, PhotoPage


@dataclass(frozen=True)
class LoadStarted:
    """A page load was issued."""


@dataclass(frozen=True)
class PhotosLoaded:
    """A page load completed; its content replaces the list."""

    page: PhotoPage
    filters: PhotoFilters


@dataclass(frozen=True)
class LoadFailed:
    """A page load failed; the list is left untouched."""

    message: str


@dataclass(frozen=True)
class PhotoInserted:
    """An upload was confirmed by the server."""

    photo: Photo


@dataclass(frozen=True)
class PhotoRemoved:
    """A photo was deleted."""

    photo_id: int


@dataclass(frozen=True)
class PhotoMarkedPending:
    """A retry request was accepted for a failed photo."""

    photo_id: int


@dataclass(frozen=True)
class PhotoRefreshed:
    """A single authoritative read of one photo arrived."""

    photo: Photo


@dataclass(frozen=True)
class FiltersChanged:
    """Filters were replaced; pagination is already reset."""

    filters: PhotoFilters


@dataclass(frozen=True)
class PhotoSelected:
    """The selected photo changed."""

    photo_id: int | None


@dataclass(frozen=True)
class ErrorCleared:
    """The last load error was acknowledged."""


PhotoAction = (
    LoadStarted
    | PhotosLoaded
    | LoadFailed
    | PhotoInserted
    | PhotoRemoved
    | PhotoMarkedPending
    | PhotoRefreshed
    | FiltersChanged
    | PhotoSelected
    | ErrorCleared
)
