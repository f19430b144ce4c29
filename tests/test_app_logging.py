"""Tests for logging configuration."""

import asyncio
import logging

import pytest

from photo_uploader.app_logging import configure_logging
from photo_uploader.config import Settings
from photo_uploader.containers import build_container


def test_configure_logging_idempotent() -> None:
    logger = logging.getLogger("photo_uploader")
    logger.handlers.clear()

    configure_logging()
    first_count = len(logger.handlers)

    configure_logging()
    second_count = len(logger.handlers)

    assert first_count == 1
    assert second_count == 1
    assert logger.propagate is False


def test_configure_logging_accepts_level_names() -> None:
    configure_logging("debug")

    assert logging.getLogger("photo_uploader").level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING

    configure_logging("ERROR")

    assert logging.getLogger("photo_uploader").level == logging.ERROR
    assert logging.getLogger("httpx").level == logging.ERROR


def test_configure_logging_rejects_unknown_level() -> None:
    with pytest.raises(ValueError):
        configure_logging("chatty")


def test_build_container_applies_log_level(settings: Settings) -> None:
    container = build_container(settings.model_copy(update={"log_level": "WARNING"}))

    assert logging.getLogger("photo_uploader").level == logging.WARNING
    asyncio.run(container.close_resources())
