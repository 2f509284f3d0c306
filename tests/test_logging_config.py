"""Tests for logging setup."""

from __future__ import annotations

import logging
import os

import pytest

from ft_flags.display.logging_config import setup_logging


@pytest.fixture(autouse=True)
def _restore_logging():
    """dictConfig replaces handlers globally; put the defaults back afterwards."""
    root = logging.getLogger()
    pkg = logging.getLogger("ft_flags")
    saved = (root.level, list(root.handlers), pkg.level, list(pkg.handlers), pkg.propagate)
    yield
    for handler in pkg.handlers:
        handler.close()
    root.setLevel(saved[0])
    root.handlers[:] = saved[1]
    pkg.setLevel(saved[2])
    pkg.handlers[:] = saved[3]
    pkg.propagate = saved[4]


class TestSetupLogging:
    def test_stderr_only(self):
        path, level = setup_logging("info")
        assert path is None
        assert level == "INFO"
        assert logging.getLogger("ft_flags").level == logging.INFO

    def test_invalid_level_falls_back(self, capsys):
        _, level = setup_logging("loud")
        assert level == "WARNING"
        assert "invalid log level 'loud'" in capsys.readouterr().err

    def test_file_handler(self, tmp_path):
        log_dir = tmp_path / "logs"
        path, level = setup_logging("debug", str(log_dir))
        assert level == "DEBUG"
        assert os.path.dirname(path) == str(log_dir)
        assert os.path.basename(path).startswith("ft_flags_")
        assert path.endswith("_DEBUG.log")

        logging.getLogger("ft_flags.test").debug("hello from the test")
        for handler in logging.getLogger("ft_flags").handlers:
            handler.flush()
        with open(path, encoding="utf-8") as f:
            assert "hello from the test" in f.read()

    def test_root_stays_at_warning(self):
        setup_logging("info")
        assert logging.getLogger().level == logging.WARNING
