from __future__ import annotations

import io
import logging

import pytest
from rich.console import Console
from rich.logging import RichHandler

from core.logging_setup import configure_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield root
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


def test_configure_logging_installs_single_rich_handler(restore_root_logger):
    buffer = io.StringIO()
    console = Console(file=buffer, width=120)

    configure_logging("INFO", console=console)
    configure_logging("INFO", console=console)

    rich_handlers = [h for h in restore_root_logger.handlers if isinstance(h, RichHandler)]
    assert len(rich_handlers) == 1
    assert restore_root_logger.level == logging.INFO
    assert logging.getLogger("httpx").level == logging.WARNING

    logging.getLogger("adapters.crypt_server").info("escrow to %s returned HTTP %s", "http://x/checkin/", 200)
    assert "returned HTTP 200" in buffer.getvalue()


def test_debug_level_lets_httpx_through(restore_root_logger):
    configure_logging("DEBUG", console=Console(file=io.StringIO()))

    assert restore_root_logger.level == logging.DEBUG
    assert logging.getLogger("httpcore").level == logging.DEBUG
