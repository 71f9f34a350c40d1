"""
Opt-in console logging for pdfmo.

Library modules log through ``logging.getLogger(__name__)`` under the
``pdfmo`` namespace and never attach handlers. Applications that want console
output call :func:`configure_pdfmo_logging` once; the ``pdfmo`` CLI does this
for every command, on stderr so stdout stays free for command output.
"""

from __future__ import annotations

import logging
from typing import TextIO

PDFMO_LOGGER = "pdfmo"
CONSOLE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class _ConsoleHandler(logging.StreamHandler):
    """Handler attached by configure_pdfmo_logging, replaced on the next call."""


def configure_pdfmo_logging(
    *,
    level: int | str = logging.INFO,
    stream: TextIO | None = None,
    fmt: str = CONSOLE_FORMAT,
) -> logging.Logger:
    """
    Route pdfmo log records to a console stream.

    Args:
        level: Level for the ``pdfmo`` logger.
        stream: Target stream; stderr when omitted.
        fmt: Record format for the console handler.

    Notes:
        - Library code must not call logging.basicConfig().
        - When the application already configured logging (handlers on the
          root logger, or its own handlers on ``pdfmo``), only the level is set.
        - Calling again replaces the console handler instead of adding a second one.

    Returns:
        The ``pdfmo`` logger.
    """
    pdfmo_logger = logging.getLogger(PDFMO_LOGGER)
    pdfmo_logger.setLevel(level)

    ours = [h for h in pdfmo_logger.handlers if isinstance(h, _ConsoleHandler)]
    if logging.getLogger().handlers or len(ours) != len(pdfmo_logger.handlers):
        return pdfmo_logger

    for handler in ours:
        pdfmo_logger.removeHandler(handler)
    console = _ConsoleHandler(stream)
    console.setFormatter(logging.Formatter(fmt))
    pdfmo_logger.addHandler(console)
    pdfmo_logger.propagate = False
    return pdfmo_logger


__all__ = ["PDFMO_LOGGER", "CONSOLE_FORMAT", "configure_pdfmo_logging"]
