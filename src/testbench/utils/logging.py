import logging
import sys
from typing import TextIO

# Emojis per level
EMOJI_MAP = {
    "DEBUG": "🐞",
    "INFO": "💡",
    "WARNING": "⚠️",
    "ERROR": "🔥",
    "CRITICAL": "💀",
}

LEVEL_NAMES = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# Attributes every LogRecord carries; anything else came in through `extra=`
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.NOTSET, "", 0, "", (), None).__dict__
) | {"message", "asctime"}


class EmojiFormatter(logging.Formatter):
    """Formatter that prefixes the level emoji and appends `extra` fields."""

    def format(self, record: logging.LogRecord) -> str:
        emoji = EMOJI_MAP.get(record.levelname, "")
        log_line = (
            f"{emoji} [{record.levelname:<8}] ({record.name}) {record.getMessage()}"
        )

        extra_attrs = {
            k: v
            for k, v in record.__dict__.items()
            if k not in _RECORD_ATTRS and not k.startswith("_")
        }
        if extra_attrs:
            extra_str = " ".join(f"{k}={v!r}" for k, v in extra_attrs.items())
            log_line = f"{log_line} | {extra_str}"

        return log_line


def level_from_name(name: str | int | None, default: int = logging.WARNING) -> int:
    """Map a level name ("debug", "INFO", "10") to a logging constant."""
    if name is None:
        return default
    if isinstance(name, int):
        return name
    name = name.strip()
    if name.isdigit():
        return int(name)
    return LEVEL_NAMES.get(name.upper(), default)


def setup_logging(level: int = logging.WARNING, stream: TextIO | None = None) -> None:
    """Configure the root logger with the emoji formatter.

    Logs go to stderr by default so that command output on stdout stays clean.
    Calling this again replaces the previously installed handler.
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(EmojiFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Get a subsystem logger."""
    return logging.getLogger(name)
