"""Logging configuration for fnloc.

Library modules only call ``logging.getLogger(__name__)``; the command
line installs a rich handler on stderr so stdout stays clean for the
machine-readable formats.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(verbose: bool = False, quiet: bool = False) -> logging.Logger:
    """
    Configure the ``fnloc`` logger with a rich stderr handler.

    Args:
        verbose: Enable DEBUG level logging
        quiet: Suppress all but ERROR level logging

    Returns:
        The configured ``fnloc`` logger
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        markup=False,
        show_time=verbose,
        show_path=verbose,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger("fnloc")
    logger.handlers = [handler]
    logger.setLevel(level)
    logger.propagate = False
    return logger
