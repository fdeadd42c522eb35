"""Logging setup: stdlib ``logging`` rendered through rich on stderr."""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

err_console = Console(stderr=True)


def configure_logging(verbose: bool = False, console: Optional[Console] = None) -> logging.Logger:
    """Attach a RichHandler to the ``devguard`` logger (idempotent)."""
    logger = logging.getLogger('devguard')
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    handler = RichHandler(console=console or err_console, show_time=False,
                          show_path=False, markup=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
