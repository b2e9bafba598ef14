"""Logging setup for repostats.

Every component logs under the ``repostats`` hierarchy (``repostats.orchestrator``,
``repostats.github``, ``repostats.cloner``, ``repostats.stores`` ...), so one call
to :func:`configure_logging` controls the whole scan.
"""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "repostats"

CONSOLE_FORMAT = "[repostats] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Client libraries pulled in by the Firestore backend log every request at INFO.
NOISY_LOGGERS = ("google", "google.auth", "urllib3", "grpc")


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``repostats.<name>``, or the package logger when ``name`` is empty."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Send repostats records to stderr and, optionally, to ``log_file``.

    ``verbose`` switches to DEBUG, which also surfaces per-repository
    tracebacks and lets the Firestore client libraries speak. Calling this
    again replaces the handlers installed by a previous call.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(stream_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    third_party_level = logging.DEBUG if verbose else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)

    return logger


__all__ = ["CONSOLE_FORMAT", "FILE_FORMAT", "NOISY_LOGGERS", "configure_logging", "get_logger"]
