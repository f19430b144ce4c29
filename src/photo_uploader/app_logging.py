"""Logging configuration helpers."""

import logging

# httpx logs every request at INFO; the client logs its own failures.
_QUIET_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: int | str = logging.INFO) -> None:
    """Configure client logging; called by ``build_container`` on startup.

    ``level`` accepts a numeric level or a name such as ``"DEBUG"``. Repeated
    calls only update the level.
    """
    resolved = level
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    logger = logging.getLogger("photo_uploader")
    logger.setLevel(resolved)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved, logging.WARNING))
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s: %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
