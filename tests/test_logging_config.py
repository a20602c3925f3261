import logging

import pytest

import dairyflow.auth  # noqa: F401  # grabs its logger at import time
from dairyflow.logging_config import get_logger, init_logging, resolve_level


@pytest.fixture
def root_level():
    root = logging.getLogger()
    saved = root.level
    yield root
    root.setLevel(saved)


def test_configured_level_applies_after_modules_imported(root_level):
    init_logging("DEBUG")
    assert root_level.level == logging.DEBUG
    init_logging("warning")
    assert root_level.level == logging.WARNING


def test_get_logger_keeps_explicit_level(root_level):
    init_logging("ERROR")
    get_logger("dairyflow.screens")
    init_logging()
    assert root_level.level == logging.ERROR


def test_resolve_level(monkeypatch):
    monkeypatch.setenv("DAIRYFLOW_LOG_LEVEL", "debug")
    assert resolve_level() == logging.DEBUG
    assert resolve_level(logging.ERROR) == logging.ERROR
    assert resolve_level("verbose") == logging.INFO


def test_urllib3_is_quiet():
    init_logging()
    assert logging.getLogger("urllib3").level == logging.WARNING
