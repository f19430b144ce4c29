"""Domain models for in-flight uploads."""

import mimetypes
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class UploadPhase(str, Enum):
    """Phases of a single upload task."""

    VALIDATING = "validating"
    SENDING = "sending"
    AWAITING_RESULT = "awaiting-result"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class UploadFile:
    """A file selected by the user for upload."""

    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    @classmethod
    def from_path(
        cls, path: str | Path, content_type: str | None = None
    ) -> "UploadFile":
        """Read a local file, guessing its MIME type from the name."""
        resolved = Path(path)
        guessed, _ = mimetypes.guess_type(resolved.name)
        return cls(
            filename=resolved.name,
            content_type=content_type or guessed or "application/octet-stream",
            content=resolved.read_bytes(),
        )


@dataclass
class UploadTask:
    """Client-only record of one upload, keyed by ``file_id``."""

    file_id: str
    filename: str
    progress_percent: int = 0
    phase: UploadPhase = UploadPhase.VALIDATING

    def advance(self, percent: int) -> bool:
        """Raise progress to ``percent``; return True if it changed."""
        bounded = max(0, min(100, percent))
        if bounded <= self.progress_percent:
            return False
        self.progress_percent = bounded
        return True
