"""ABOUTME: Logging setup for the CLI and library callers.
ABOUTME: Applies configs/logging.yml through dictConfig, or a plain stderr handler when it is absent."""

import logging
import logging.config
import typing
from pathlib import Path

import yaml

PACKAGE_LOGGER = "tierdex"
FALLBACK_FORMAT = "%(levelname)s %(name)s: %(message)s"


def init_logging(filepath: Path) -> dict[str, typing.Any]:
    """Apply the logging yaml file at `filepath` globally.

    :param filepath: Path to the logging configuration yaml file.
    :returns: The applied configuration as dict.
    """
    config: dict[str, typing.Any] = yaml.safe_load(filepath.read_text(encoding="utf-8"))
    logging.config.dictConfig(config)
    return config


def init_default_logging(filepath: Path | None = None, verbose: bool = False) -> None:
    """Apply the project logging config if present, else a basic stderr handler.

    :param filepath: Optional logging yaml file; ignored when it does not exist.
    :param verbose: Lower the package logger to DEBUG after configuration.
    """
    if filepath is not None and filepath.exists():
        init_logging(filepath)
    else:
        logging.basicConfig(level=logging.WARNING, format=FALLBACK_FORMAT)
    if verbose:
        logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG)
