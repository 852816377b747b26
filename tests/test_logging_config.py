import logging
import sys

import pytest

from core.logging_config import get_logger, setup_logging


@pytest.fixture
def clean_root():
    root = logging.getLogger()
    saved = list(root.handlers)
    saved_level = root.level
    root.handlers.clear()
    yield root
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = saved
    root.setLevel(saved_level)


def test_setup_logging_is_idempotent(tmp_path, clean_root):
    setup_logging(tmp_path, "server.log", "DEBUG")
    setup_logging(tmp_path, "server.log", "DEBUG")

    file_handlers = [h for h in clean_root.handlers if isinstance(h, logging.FileHandler)]
    stderr_handlers = [h for h in clean_root.handlers if getattr(h, "stream", None) is sys.stderr]
    assert len(file_handlers) == 1
    assert len(stderr_handlers) == 1
    assert not any(getattr(h, "stream", None) is sys.stdout for h in clean_root.handlers)
    assert clean_root.level == logging.DEBUG
    assert list(tmp_path.glob("server_*.log"))


def test_get_logger_by_name():
    assert get_logger("server").name == "server"
    assert get_logger().name == "core.logging_config"
