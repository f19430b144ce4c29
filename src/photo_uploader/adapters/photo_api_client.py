"""Photo service REST API client."""

import logging
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass, field
from typing import Protocol, TypeVar

import httpx
import pydantic

from photo_uploader.config import Settings
from photo_uploader.domain.photos import (
    Photo,
    PhotoEvent,
    PhotoFilters,
    PhotoPage,
    PhotoStats,
)
from photo_uploader.domain.uploads import UploadFile
from photo_uploader.errors import (
    NetworkError,
    UnclassifiedApiError,
    classify_http_error,
)

ProgressCallback = Callable[[int, int], None]
TokenProvider = Callable[[], str | None]

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)

_logger = logging.getLogger(__name__)


class PhotoApiClient(Protocol):
    """Interface for the photo service HTTP boundary."""

    async def upload_photo(
        self,
        file: UploadFile,
        user_id: str,
        on_progress: ProgressCallback | None = None,
    ) -> Photo:
        """Upload a file and return the created photo record."""

    async def get_photos(self, filters: PhotoFilters) -> PhotoPage:
        """Return one page of photos matching the filters."""

    async def get_photo(self, photo_id: int) -> Photo:
        """Return a single photo."""

    async def delete_photo(self, photo_id: int) -> None:
        """Delete a photo."""

    async def retry_processing(self, photo_id: int) -> None:
        """Ask the server to retry processing a failed photo."""

    async def get_photo_events(self, photo_id: int) -> list[PhotoEvent]:
        """Return the lifecycle events of a photo, oldest first."""

    async def get_stats(self) -> PhotoStats:
        """Return photo counts per status."""


def _no_token() -> str | None:
    return None


@dataclass
class HttpxPhotoApiClient(PhotoApiClient):
    """Photo API client implemented with httpx."""

    base_url: str
    http_client: httpx.AsyncClient
    token_provider: TokenProvider = _no_token
    basic_auth: tuple[str, str] | None = None
    timeout: float = 30.0
    chunk_size: int = 64 * 1024
    default_headers: dict[str, str] = field(
        default_factory=lambda: {"Accept": "application/json"}
    )

    @classmethod
    def create(
        cls, settings: Settings, token_provider: TokenProvider | None = None
    ) -> "HttpxPhotoApiClient":
        """Create a photo API client with a managed httpx session."""
        return cls(
            base_url=settings.api_base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            token_provider=token_provider or (lambda: settings.auth_token),
            basic_auth=(settings.basic_auth_username, settings.basic_auth_password),
            timeout=settings.request_timeout_seconds,
            chunk_size=settings.upload_chunk_bytes,
        )

    async def upload_photo(
        self,
        file: UploadFile,
        user_id: str,
        on_progress: ProgressCallback | None = None,
    ) -> Photo:
        """Stream a multipart upload, reporting bytes sent after each chunk."""
        path = "/photos/upload"
        multipart = self.http_client.build_request(
            "POST",
            self._url(path),
            data={"userId": user_id},
            files={"file": (file.filename, file.content, file.content_type)},
        )
        body = multipart.read()
        total = len(body)
        chunk_size = self.chunk_size

        async def chunks() -> AsyncIterator[bytes]:
            sent = 0
            for start in range(0, total, chunk_size):
                chunk = body[start : start + chunk_size]
                yield chunk
                sent += len(chunk)
                if on_progress is not None:
                    on_progress(sent, total)

        response = await self._send(
            "POST",
            path,
            content=chunks(),
            headers={
                "Content-Type": multipart.headers["Content-Type"],
                "Content-Length": str(total),
            },
        )
        return _parse(Photo, response, path)

    async def get_photos(self, filters: PhotoFilters) -> PhotoPage:
        """Fetch a page of photos sorted by upload time, newest first."""
        path = "/photos"
        response = await self._send("GET", path, params=filters.query_params())
        return _parse(PhotoPage, response, path)

    async def get_photo(self, photo_id: int) -> Photo:
        """Fetch a photo by id."""
        path = f"/photos/{photo_id}"
        response = await self._send("GET", path)
        return _parse(Photo, response, path)

    async def delete_photo(self, photo_id: int) -> None:
        """Delete a photo by id."""
        await self._send("DELETE", f"/photos/{photo_id}")

    async def retry_processing(self, photo_id: int) -> None:
        """Request a processing retry."""
        await self._send("POST", f"/photos/{photo_id}/retry")

    async def get_photo_events(self, photo_id: int) -> list[PhotoEvent]:
        """Fetch the audit events for a photo."""
        path = f"/photos/{photo_id}/events"
        response = await self._send("GET", path)
        payload = response.json()
        if not isinstance(payload, list):
            raise UnclassifiedApiError(
                response.status_code, path=path, detail="expected a list of events"
            )
        try:
            return [PhotoEvent.model_validate(item) for item in payload]
        except pydantic.ValidationError as exc:
            raise UnclassifiedApiError(
                response.status_code, path=path, detail="malformed event payload"
            ) from exc

    async def get_stats(self) -> PhotoStats:
        """Fetch per-status photo counts."""
        path = "/photos/stats"
        response = await self._send("GET", path)
        return _parse(PhotoStats, response, path)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    async def _send(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        **kwargs: object,
    ) -> httpx.Response:
        request_headers = dict(self.default_headers)
        if headers:
            request_headers.update(headers)
        auth: httpx.Auth | None = None
        token = self.token_provider()
        if token:
            request_headers["Authorization"] = f"Bearer {token}"
        elif self.basic_auth is not None:
            auth = httpx.BasicAuth(*self.basic_auth)
        try:
            response = await self.http_client.request(
                method,
                self._url(path),
                headers=request_headers,
                auth=auth,
                timeout=self.timeout,
                **kwargs,
            )
        except httpx.TransportError as exc:
            _logger.warning("Photo API unreachable: %s %s (%s)", method, path, exc)
            raise NetworkError(
                f"No response received for {method} {path}", path=path
            ) from exc
        if response.is_error:
            _logger.warning(
                "Photo API error: %s %s status=%s",
                method,
                path,
                response.status_code,
            )
            raise classify_http_error(
                response.status_code, path=path, detail=_error_detail(response)
            )
        return response


def _parse(
    model: type[ModelT], response: httpx.Response, path: str
) -> ModelT:
    """Validate a JSON response body into a model."""
    try:
        return model.model_validate(response.json())
    except (ValueError, pydantic.ValidationError) as exc:
        raise UnclassifiedApiError(
            response.status_code, path=path, detail="malformed response body"
        ) from exc


def _error_detail(response: httpx.Response) -> str | None:
    """Extract a readable message from an error response."""
    try:
        payload = response.json()
    except ValueError:
        text = response.text.strip()
        return text[:200] or None
    if isinstance(payload, dict):
        for key in ("message", "error", "detail"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
    return None
