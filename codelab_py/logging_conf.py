"""
Centralized logging configuration.

Log records go through rich so they interleave cleanly with console output.
"""

import logging

from rich.logging import RichHandler


def setup_logging(debug: bool = False) -> None:
    """
    Configure application logging.

    Args:
        debug: Log at DEBUG level instead of WARNING
    """
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[RichHandler(show_path=False, rich_tracebacks=True)],
        force=True,
    )
    # urllib3 is chatty at DEBUG and would echo full request URLs
    logging.getLogger("urllib3").setLevel(logging.WARNING)
