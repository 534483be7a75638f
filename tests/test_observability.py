"""
Tests for logging configuration.
"""

import logging
from pathlib import Path

import pytest

from pkgconverge.core.observability.logging_config import (
    ENV_FILE,
    ENV_FILE_LEVEL,
    ENV_LEVEL,
    resolve_level,
    setup_from_environment,
    setup_logging,
)


@pytest.fixture(autouse=True)
def _restore_root():
    root = logging.getLogger()
    handlers, level, raise_exceptions = root.handlers[:], root.level, logging.raiseExceptions
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.raiseExceptions = raise_exceptions


class TestResolveLevel:
    def test_flags_in_precedence_order(self):
        assert resolve_level(debug=True, verbose=True, quiet=True) == "DEBUG"
        assert resolve_level(verbose=True, quiet=True) == "INFO"
        assert resolve_level(quiet=True) == "ERROR"

    def test_environment_fallback(self, monkeypatch):
        monkeypatch.setenv(ENV_LEVEL, "INFO")
        assert resolve_level() == "INFO"

    def test_default(self, monkeypatch):
        monkeypatch.delenv(ENV_LEVEL, raising=False)
        assert resolve_level() == "WARNING"


class TestSetupLogging:
    def test_console_only(self):
        setup_logging("INFO")
        root = logging.getLogger()
        assert root.level == logging.INFO
        assert len(root.handlers) == 1

    @pytest.mark.parametrize(
        "level, expected",
        [
            ("DEBUG", "%(lineno)d"),
            ("INFO", "[%(name)s]"),
            ("WARNING", "%(message)s"),
        ],
    )
    def test_console_format_follows_level(self, level, expected):
        setup_logging(level)
        (handler,) = logging.getLogger().handlers
        assert expected in handler.formatter._fmt

    def test_unknown_level_falls_back_to_warning(self):
        setup_logging("LOUD")
        assert logging.getLogger().level == logging.WARNING

    def test_file_handler_lowers_root_level(self, tmp_path: Path):
        log_file = tmp_path / "pkgconverge.log"
        setup_logging("WARNING", log_file=str(log_file), log_file_level="DEBUG")
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 2

        logging.getLogger("pkgconverge.test").debug("Running: rpm -q foo")
        for handler in root.handlers:
            handler.flush()
        assert "Running: rpm -q foo" in log_file.read_text()

    def test_from_environment(self, tmp_path: Path, monkeypatch):
        log_file = tmp_path / "env.log"
        monkeypatch.setenv(ENV_FILE, str(log_file))
        monkeypatch.setenv(ENV_FILE_LEVEL, "INFO")
        setup_from_environment("ERROR")
        root = logging.getLogger()
        assert root.level == logging.INFO
        assert any(isinstance(h, logging.FileHandler) for h in root.handlers)
