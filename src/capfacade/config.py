"""Runtime settings read from CAPFACADE_* environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping

from capfacade.controllers.local import DEFAULT_CHUNK_SIZE

ENV_PREFIX = "CAPFACADE_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"Invalid boolean for {name}: {value!r}")


def _parse_number(name: str, value: str, kind: type) -> int | float:
    try:
        number = kind(value)
    except ValueError as exc:
        raise ValueError(f"Invalid value for {name}: {value!r}") from exc
    if number <= 0:
        raise ValueError(f"{name} must be positive, got {value!r}")
    return number


@dataclass
class Settings:
    """Configuration for logging and the local controller."""

    log_level: str | None = None
    log_file: str | None = None
    allowed_paths: list[str] = field(default_factory=list)
    read_only: bool = False
    allowed_commands: list[str] = field(default_factory=list)
    chunk_size: int = DEFAULT_CHUNK_SIZE
    timeout: float = 30
    encoding: str = "utf-8"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from the environment.

        Variables:
            CAPFACADE_LOG_LEVEL, CAPFACADE_LOG_FILE
            CAPFACADE_ALLOWED_PATHS: os.pathsep-separated directories
            CAPFACADE_READ_ONLY: 1/0, true/false, yes/no, on/off
            CAPFACADE_ALLOWED_COMMANDS: comma-separated program names
            CAPFACADE_CHUNK_SIZE, CAPFACADE_TIMEOUT, CAPFACADE_ENCODING

        Raises:
            ValueError: If a variable holds an invalid value.
        """
        env = os.environ if environ is None else environ
        settings = cls()

        def get(key: str) -> str | None:
            return env.get(ENV_PREFIX + key)

        if (value := get("LOG_LEVEL")) is not None:
            settings.log_level = value
        if (value := get("LOG_FILE")) is not None:
            settings.log_file = value
        if (value := get("ALLOWED_PATHS")) is not None:
            settings.allowed_paths = [p for p in value.split(os.pathsep) if p]
        if (value := get("READ_ONLY")) is not None:
            settings.read_only = _parse_bool(ENV_PREFIX + "READ_ONLY", value)
        if (value := get("ALLOWED_COMMANDS")) is not None:
            settings.allowed_commands = [c.strip() for c in value.split(",") if c.strip()]
        if (value := get("CHUNK_SIZE")) is not None:
            settings.chunk_size = _parse_number(ENV_PREFIX + "CHUNK_SIZE", value, int)
        if (value := get("TIMEOUT")) is not None:
            settings.timeout = _parse_number(ENV_PREFIX + "TIMEOUT", value, float)
        if (value := get("ENCODING")) is not None:
            settings.encoding = value

        return settings


__all__ = ["ENV_PREFIX", "Settings"]
