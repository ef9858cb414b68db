import logging
import pytest
from core.logging import QUIET_LOGGERS, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    level, handlers = root.level, list(root.handlers)
    yield
    root.handlers = handlers
    root.setLevel(level)


def test_setup_logging_applies_override(restore_root_logger):
    assert setup_logging("debug") == logging.DEBUG
    assert logging.getLogger().level == logging.DEBUG


def test_setup_logging_unknown_level_falls_back_to_info(restore_root_logger):
    assert setup_logging("chatty") == logging.INFO


def test_setup_logging_quiets_noisy_libraries(restore_root_logger):
    setup_logging("debug")
    
    for name in QUIET_LOGGERS:
        assert logging.getLogger(name).level == logging.WARNING
