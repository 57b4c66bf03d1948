from __future__ import annotations

import logging

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_LEVEL_ALIASES: dict[str, int] = {
    "CRITICAL": logging.CRITICAL,
    "FATAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
    "TRACE": logging.DEBUG,
}


def parse_log_level(value: str | int | None, default: int) -> int:
    """Parse a log level name or number into a numeric level."""
    if value is None:
        return default
    if isinstance(value, int):
        return value
    raw = value.strip()
    if not raw:
        return default
    if raw.isdigit():
        return int(raw)
    return _LEVEL_ALIASES.get(raw.upper(), default)


def log_level_name(value: str | int | None, default: int) -> str:
    """Return a lowercase log level name for display."""
    name = logging.getLevelName(parse_log_level(value, default))
    if isinstance(name, str) and not name.startswith("Level "):
        return name.lower()
    return logging.getLevelName(default).lower()


def configure_logging(level: str | int | None = None, fmt: str | None = None) -> int:
    """Configure root logging for command line use; returns the level applied."""
    numeric = parse_log_level(level, logging.INFO)
    logging.basicConfig(level=numeric, format=fmt or DEFAULT_LOG_FORMAT)
    logging.getLogger().setLevel(numeric)
    return numeric
