# pyright: standard

"""syncvault: syncvault/__logger__.py
A common logger for displaying rich output on the terminal.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

# Initialize basic console and handler
cons = Console(stderr=True)
rich_handler = RichHandler(console=cons, show_path=False)
logger = logging.getLogger("syncvault")


def create_logger(level: str = "INFO", show_time: bool = True) -> None:
    """Helper function to setup logging for the command line.

    Every module logs through ``logging.getLogger(__name__)`` and ends up on
    the single rich handler installed here. Worker threads share it; the
    handler lock keeps each record on its own line.
    """
    # pylint: disable=global-statement
    global cons, rich_handler

    cons = Console(stderr=True)
    rich_handler = RichHandler(console=cons, show_time=show_time, show_path=False)

    logger.handlers.clear()
    logger.setLevel(level)

    logging.basicConfig(
        format="%(message)s",
        datefmt="%H:%M:%S",
        level=level,
        handlers=[rich_handler],
        force=True,
    )
