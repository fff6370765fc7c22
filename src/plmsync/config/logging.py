"""Logging set-up shared by the CLI and the webhook workers."""

from __future__ import annotations

import logging
from typing import Final

# Per-request chatter of the HTTP and migration stack.
NOISY_LOGGERS: Final[tuple[str, ...]] = ("httpx", "httpcore", "hishel", "alembic.runtime")


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Configure the root logger and quiet the HTTP and migration loggers.

    ``force=True`` replaces handlers installed earlier, e.g. when ``--verbose``
    is parsed after start-up.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    noisy_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)
