from __future__ import annotations

import logging
from typing import TextIO

PACKAGE_LOGGER = "esopt"
RUN_LOGGER = "esopt.run"


class RunReportFormatter(logging.Formatter):
    """Bare messages for run reports, ``<level>: <message>`` for everything else.

    Run reports (``esopt.run``) are meant to be read or parsed as plain
    ``<evaluations> <best fitness>`` lines, so they carry no prefix.
    """

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if record.name == RUN_LOGGER or record.name.startswith(RUN_LOGGER + "."):
            return message
        return f"{record.levelname.lower()}: {message}"


def configure_esopt_logging(*, level: int = logging.INFO, stream: TextIO | None = None) -> logging.Handler | None:
    """
    Attach a console handler to the ``esopt`` logger (used by the CLI).

    Returns the handler, or None when logging was already configured by the
    application (root or ``esopt`` logger has handlers); library code must
    never call this nor logging.basicConfig().
    """
    root = logging.getLogger()
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if root.handlers or package_logger.handlers:
        return None

    handler = logging.StreamHandler(stream)
    handler.setFormatter(RunReportFormatter())
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    package_logger.propagate = False
    return handler


__all__ = ["PACKAGE_LOGGER", "RUN_LOGGER", "RunReportFormatter", "configure_esopt_logging"]
