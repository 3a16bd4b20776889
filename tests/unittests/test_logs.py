# ABOUTME: Unit tests for logging setup.
# ABOUTME: Tests the yaml loader and the verbose switch on the package logger.

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from tierdex.logs import PACKAGE_LOGGER, init_default_logging, init_logging


@pytest.fixture
def package_logger() -> Iterator[logging.Logger]:
    """Package logger whose level and handlers are restored after the test."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    level, handlers, propagate = logger.level, list(logger.handlers), logger.propagate
    yield logger
    logger.setLevel(level)
    logger.handlers = handlers
    logger.propagate = propagate


class TestInitLogging:
    """Tests for init_logging function."""

    def test_applies_yaml(self, tmp_path: Path, package_logger: logging.Logger) -> None:
        """Logger levels from the yaml file are applied."""
        config_file = tmp_path / "logging.yml"
        config_file.write_text(
            "version: 1\n"
            "disable_existing_loggers: false\n"
            "handlers:\n"
            "  quiet:\n"
            "    class: logging.NullHandler\n"
            "loggers:\n"
            "  tierdex:\n"
            "    level: ERROR\n"
            "    handlers: [quiet]\n"
            "    propagate: false\n",
            encoding="utf-8",
        )

        config = init_logging(config_file)

        assert config["version"] == 1
        assert package_logger.level == logging.ERROR


class TestInitDefaultLogging:
    """Tests for init_default_logging function."""

    def test_verbose_sets_debug(self, package_logger: logging.Logger) -> None:
        """Verbose mode lowers the package logger to DEBUG."""
        init_default_logging(None, verbose=True)

        assert package_logger.level == logging.DEBUG

    def test_missing_file_is_ignored(self, tmp_path: Path, package_logger: logging.Logger) -> None:
        """A missing config file falls back without raising."""
        package_logger.setLevel(logging.WARNING)

        init_default_logging(tmp_path / "missing.yml")

        assert package_logger.level == logging.WARNING
