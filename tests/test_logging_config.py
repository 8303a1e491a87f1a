import logging

import pytest

from logging_config import configure_logging, resolve_level


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_resolve_level_from_environment(monkeypatch):
    monkeypatch.setenv("BATTERY_MONITOR_LOG_LEVEL", "debug")
    assert resolve_level() == logging.DEBUG


def test_resolve_level_unknown_name_falls_back_to_info(monkeypatch):
    monkeypatch.delenv("BATTERY_MONITOR_LOG_LEVEL", raising=False)
    assert resolve_level("chatty") == logging.INFO


def test_configure_logging_sets_root_level(restore_root_logger):
    configure_logging(logging.WARNING)
    assert restore_root_logger.level == logging.WARNING
    assert len(restore_root_logger.handlers) == 1
