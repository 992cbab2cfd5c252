"""Console logging with rich formatting."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

console = Console(stderr=True)

_NOISY_LOGGERS = ("httpx", "httpcore", "comtypes", "urllib3")

# Attributes every LogRecord carries, plus the ones rich reads from ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "markup", "highlighter"}


class ExtraFieldsFormatter(logging.Formatter):
    """Append the ``extra=`` fields of a record to its event name as ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        fields = [
            f"{key}={value!r}"
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        ]
        if not fields:
            return message
        return f"{message} {' '.join(fields)}"


def configure_logging(level: str = "INFO") -> None:
    """Install a rich handler on the root logger at ``level``."""
    log_level = getattr(logging, level.upper(), logging.INFO)
    handler = RichHandler(console=console, rich_tracebacks=True, show_path=False)
    handler.setFormatter(ExtraFieldsFormatter("%(message)s", datefmt="[%X]"))
    logging.basicConfig(level=log_level, handlers=[handler], force=True)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
