"""Logging configuration for the notebook server.

The MCP stdio transport owns stdout, so every log line goes to stderr.
"""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


class SafeExtraFormatter(logging.Formatter):
    """Formatter that appends ``event``/``notebook`` extras, or ``-`` when absent."""

    _EXTRA_FIELDS = ("event", "notebook")

    def format(self, record: logging.LogRecord) -> str:
        for field in self._EXTRA_FIELDS:
            if not hasattr(record, field):
                setattr(record, field, "-")
        return super().format(record)


_CONFIGURED = False


def setup_logging(level: str = "INFO") -> None:
    global _CONFIGURED
    root_logger = logging.getLogger()
    name = str(level or "INFO").strip().upper()
    resolved = logging.getLevelName(name)
    root_logger.setLevel(resolved if isinstance(resolved, int) else logging.INFO)
    if _CONFIGURED:
        return

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(
        SafeExtraFormatter(LOG_FORMAT + " | event=%(event)s | notebook=%(notebook)s")
    )
    root_logger.addHandler(stream_handler)

    _CONFIGURED = True
