"""Domain models for transient notifications."""

from dataclasses import dataclass
from enum import Enum

DEFAULT_TOAST_DURATION_MS = 5000


class ToastSeverity(str, Enum):
    """Visual severity of a toast."""

    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class Toast:
    """A short-lived user notification."""

    id: str
    message: str
    severity: ToastSeverity
    duration_ms: int = DEFAULT_TOAST_DURATION_MS
