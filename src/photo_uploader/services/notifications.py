"""Transient toast notifications with timer-driven expiry."""

import asyncio
import itertools
import logging
import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from photo_uploader.domain.toasts import (
    DEFAULT_TOAST_DURATION_MS,
    Toast,
    ToastSeverity,
)
from photo_uploader.errors import ValidationError

_logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    """Cancellable handle returned by a scheduler."""

    def cancel(self) -> None:
        """Prevent the scheduled callback from running."""


class TimerScheduler(Protocol):
    """Anything that can run a callback after a delay, like an asyncio loop."""

    def call_later(
        self, delay: float, callback: Callable[..., object], *args: object
    ) -> TimerHandle:
        """Schedule ``callback(*args)`` to run after ``delay`` seconds."""


class Notifier(Protocol):
    """Interface other components use to raise a toast."""

    def add(
        self,
        message: str,
        severity: ToastSeverity | str = ToastSeverity.INFO,
        duration_ms: int | None = None,
    ) -> str:
        """Queue a toast and return its id."""


@dataclass
class NotificationQueue(Notifier):
    """Owns the toast list; every toast expires on its own timer."""

    scheduler: TimerScheduler | None = None
    default_duration_ms: int = DEFAULT_TOAST_DURATION_MS
    _toasts: dict[str, Toast] = field(default_factory=dict, init=False)
    _timers: dict[str, TimerHandle] = field(default_factory=dict, init=False)
    _sequence: itertools.count = field(default_factory=itertools.count, init=False)

    @property
    def toasts(self) -> list[Toast]:
        """Snapshot of live toasts in creation order."""
        return list(self._toasts.values())

    def get(self, toast_id: str) -> Toast | None:
        return self._toasts.get(toast_id)

    def add(
        self,
        message: str,
        severity: ToastSeverity | str = ToastSeverity.INFO,
        duration_ms: int | None = None,
    ) -> str:
        """Queue a toast and schedule its removal."""
        duration = self.default_duration_ms if duration_ms is None else duration_ms
        if duration < 0:
            raise ValidationError(f"toast duration must be >= 0, got {duration}")
        toast = Toast(
            id=self._next_id(),
            message=message,
            severity=ToastSeverity(severity),
            duration_ms=duration,
        )
        timer = self._scheduler().call_later(duration / 1000, self._expire, toast.id)
        self._timers[toast.id] = timer
        self._toasts[toast.id] = toast
        return toast.id

    def remove(self, toast_id: str) -> None:
        """Dismiss a toast; unknown or already removed ids are ignored."""
        timer = self._timers.pop(toast_id, None)
        if timer is not None:
            timer.cancel()
        self._toasts.pop(toast_id, None)

    def dispose(self) -> None:
        """Cancel every pending expiry and drop all toasts."""
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        self._toasts.clear()

    def _expire(self, toast_id: str) -> None:
        if toast_id in self._toasts:
            _logger.debug("Toast expired: id=%s", toast_id)
        self._timers.pop(toast_id, None)
        self._toasts.pop(toast_id, None)

    def _next_id(self) -> str:
        # The counter keeps ids distinct when the clock has not ticked.
        return f"{time.monotonic_ns():x}-{next(self._sequence)}-{secrets.token_hex(4)}"

    def _scheduler(self) -> TimerScheduler:
        # Resolved per call so the queue outlives any single event loop.
        if self.scheduler is None:
            return asyncio.get_running_loop()
        return self.scheduler
