"""Logging configuration for the sifbuild loggers."""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAMES = ("sifbuild_core", "sifbuild_cli")


def setup_logging(verbose: bool = False) -> None:
    """Send sifbuild log records to stderr through Rich.

    Only the package loggers are touched, so embedding applications and
    pytest's log capture keep their own root configuration. Calling this
    again replaces the handler installed by a previous call.

    Args:
        verbose: Log at DEBUG instead of WARNING.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        show_time=verbose,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.set_name("sifbuild")

    for name in LOGGER_NAMES:
        logger = logging.getLogger(name)
        for existing in list(logger.handlers):
            if existing.get_name() == "sifbuild":
                logger.removeHandler(existing)
        logger.addHandler(handler)
        logger.setLevel(level)
