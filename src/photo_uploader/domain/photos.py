"""Photo records as reported by the photo service."""

from dataclasses import dataclass, replace
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from photo_uploader.domain.status import PhotoStatus, parse_status
from photo_uploader.errors import ValidationError

SORT_ORDER = "uploadedAt,desc"


class _ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class Photo(_ApiModel):
    """Server-owned photo record held as a read-mostly cache copy."""

    id: int
    user_id: str
    original_file_name: str
    content_type: str
    file_size: int = Field(gt=0)
    storage_url: str | None = None
    thumbnail_url: str | None = None
    # Kept verbatim so unknown server statuses survive the round trip.
    status: str
    width: int | None = None
    height: int | None = None
    metadata: str | None = None
    checksum: str | None = None
    uploaded_at: datetime
    processed_at: datetime | None = None
    updated_at: datetime
    retry_count: int | None = None
    last_error: str | None = None

    @property
    def known_status(self) -> PhotoStatus | None:
        """Return the parsed status, or None when the server sent an unknown one."""
        return parse_status(self.status)


class PhotoPage(_ApiModel):
    """One page of photos."""

    content: list[Photo]
    total_elements: int
    total_pages: int
    size: int
    number: int


class PhotoEvent(_ApiModel):
    """Lifecycle audit entry for a photo."""

    id: int | None = None
    photo_id: int | None = None
    event_type: str
    timestamp: datetime
    details: str | None = None
    user_id: str | None = None
    correlation_id: str | None = None
    source_service: str | None = None
    success: bool | None = None
    error_message: str | None = None


class PhotoStats(_ApiModel):
    """Photo counts per processing status."""

    total_photos: int = 0
    pending_photos: int = 0
    processing_photos: int = 0
    failed_photos: int = 0


@dataclass(frozen=True)
class PhotoFilters:
    """Gallery query descriptor, always sorted by upload time descending."""

    user_id: str | None = None
    status: str | None = None
    page: int = 0
    size: int = 20

    def __post_init__(self) -> None:
        if self.page < 0:
            raise ValidationError(f"page must be >= 0, got {self.page}")
        if self.size <= 0:
            raise ValidationError(f"size must be > 0, got {self.size}")

    def with_changes(self, **changes: object) -> "PhotoFilters":
        """Merge filter changes and go back to the first page."""
        unknown = set(changes) - {"user_id", "status", "size"}
        if unknown:
            raise ValidationError(f"unknown filter fields: {sorted(unknown)}")
        return replace(self, page=0, **changes)

    def at_page(self, page: int, size: int | None = None) -> "PhotoFilters":
        """Return the same filters pointed at another page."""
        return replace(self, page=page, size=self.size if size is None else size)

    def query_params(self) -> dict[str, str | int]:
        """Build the query string for ``GET /photos``."""
        params: dict[str, str | int] = {
            "page": self.page,
            "size": self.size,
            "sort": SORT_ORDER,
        }
        if self.user_id:
            params["userId"] = self.user_id
        if self.status:
            params["status"] = self.status
        return params
