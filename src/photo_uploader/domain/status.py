"""Photo processing status lifecycle."""

from enum import Enum


class PhotoStatus(str, Enum):
    """Statuses a photo can occupy, client-observed and server-reported."""

    PENDING = "PENDING"
    UPLOADING = "UPLOADING"
    UPLOADED = "UPLOADED"
    PROCESSING = "PROCESSING"
    RETRYING = "RETRYING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    def allowed_transitions(self) -> frozenset["PhotoStatus"]:
        """Return the statuses reachable from this one."""
        return _TRANSITIONS[self]

    def can_transition_to(self, new_status: "PhotoStatus") -> bool:
        """Check whether moving to ``new_status`` is legal."""
        return new_status in _TRANSITIONS[self]

    def is_terminal(self) -> bool:
        return self is PhotoStatus.COMPLETED

    def is_error(self) -> bool:
        return self is PhotoStatus.FAILED

    def is_in_progress(self) -> bool:
        return self in {
            PhotoStatus.UPLOADING,
            PhotoStatus.PROCESSING,
            PhotoStatus.RETRYING,
        }


_TRANSITIONS: dict[PhotoStatus, frozenset[PhotoStatus]] = {
    PhotoStatus.PENDING: frozenset({PhotoStatus.UPLOADING, PhotoStatus.FAILED}),
    PhotoStatus.UPLOADING: frozenset({PhotoStatus.UPLOADED, PhotoStatus.FAILED}),
    PhotoStatus.UPLOADED: frozenset({PhotoStatus.PROCESSING, PhotoStatus.FAILED}),
    PhotoStatus.PROCESSING: frozenset(
        {PhotoStatus.COMPLETED, PhotoStatus.FAILED, PhotoStatus.RETRYING}
    ),
    PhotoStatus.RETRYING: frozenset({PhotoStatus.PROCESSING, PhotoStatus.FAILED}),
    PhotoStatus.COMPLETED: frozenset(),
    # PENDING is the optimistic mark applied after a user retry.
    PhotoStatus.FAILED: frozenset({PhotoStatus.RETRYING, PhotoStatus.PENDING}),
}


def parse_status(raw: str | None) -> PhotoStatus | None:
    """Return the known status for a server string, or None if unrecognized."""
    if raw is None:
        return None
    try:
        return PhotoStatus(raw)
    except ValueError:
        return None


def can_retry(raw: str | None) -> bool:
    """A user retry is only valid for photos currently FAILED."""
    return parse_status(raw) is PhotoStatus.FAILED
