"""
Logging setup for the command line application.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(name)s: %(message)s"


def configure_logging(verbose: bool = False) -> None:
    """
    Route all log records through a rich handler on stderr.

    Stdout stays reserved for command output so ``--json`` can be piped.

    Args:
        verbose: Log everything from DEBUG up instead of only warnings and errors
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
