"""Logging setup for the capfacade logger and previews of primitive payloads."""

from __future__ import annotations

import logging
from pathlib import Path

from capfacade.config import Settings

LOGGER_NAME = "capfacade"
DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(
    settings: Settings | None = None,
    *,
    log_level: str | None = None,
    log_file: str | None = None,
) -> logging.Logger | None:
    """Configure the capfacade logger.

    Explicit `log_level`/`log_file` win over `settings`, which default to
    Settings.from_env(). With neither a level nor a file configured the
    logger is left alone and None is returned. A file without a level logs
    at WARNING.

    Raises:
        ValueError: The level is not a logging level name, or the
            environment holds an invalid CAPFACADE_* value.
    """
    if settings is None:
        settings = Settings.from_env()

    level_name = (log_level or settings.log_level or "").upper()
    log_file = log_file or settings.log_file
    if not level_name and not log_file:
        return None

    level = logging.getLevelName(level_name or "WARNING")
    if isinstance(level, str):
        raise ValueError(f"Invalid log level: {level_name}")

    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(path)
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT))

    logger = logging.getLogger(LOGGER_NAME)
    for old in logger.handlers:
        old.close()
    logger.setLevel(level)
    logger.propagate = False
    logger.handlers = [handler]
    return logger


def abbreviate(text: str | bytes | None, limit: int = 200) -> str:
    """Return a single-line, truncated preview string."""
    if text is None:
        return ""
    if isinstance(text, (bytes, bytearray)):
        text = bytes(text).decode("utf-8", errors="replace")
    flattened = text.replace("\n", "\\n")
    if len(flattened) <= limit:
        return flattened
    return f"{flattened[:limit]}..."


def payload_preview(data: str | bytes, limit: int = 60) -> str:
    """Describe data handed to a write primitive: `bytes=3 data=abc` or `chars=...`."""
    unit = "chars" if isinstance(data, str) else "bytes"
    return f"{unit}={len(data)} data={abbreviate(data, limit)}"


__all__ = ["LOGGER_NAME", "abbreviate", "configure_logging", "payload_preview"]
