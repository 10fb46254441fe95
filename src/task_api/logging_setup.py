from __future__ import annotations

import logging
import sys

_HANDLER_NAME = "task_api.console"


# PUBLIC_INTERFACE
def setup_logging(level: str | int = logging.INFO) -> None:
    """
    Attach a single stderr handler to the ``task_api`` logger tree.

    Safe to call more than once: an existing handler is reused and only the
    level is updated.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(__package__)
    logger.setLevel(level)

    for h in logger.handlers:
        if h.get_name() == _HANDLER_NAME:
            h.setLevel(level)
            return

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(handler)
