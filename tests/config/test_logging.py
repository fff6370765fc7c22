from __future__ import annotations

import logging

from plmsync.config import configure_logging
from plmsync.config.logging import NOISY_LOGGERS


def test_configure_logging_quiets_http_stack() -> None:
    configure_logging(level=logging.INFO, force=True)

    assert logging.getLogger().level == logging.INFO
    assert all(logging.getLogger(name).level == logging.WARNING for name in NOISY_LOGGERS)


def test_verbose_logging_includes_http_stack() -> None:
    configure_logging(level=logging.DEBUG, force=True)

    assert logging.getLogger("httpx").level == logging.DEBUG

    configure_logging(force=True)
