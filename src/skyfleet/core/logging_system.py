"""Logging setup for SkyFleet.

Wraps the standard library logging module so every module gets its
logger the same way, and the whole process can be configured from a
YAML ``dictConfig`` file.

Typical usage:
    from skyfleet.core.logging_system import get_logger, initialize_logging

    initialize_logging()  # packaged config/logging.yaml
    logger = get_logger(__name__)
    logger.info("Scheduler started with %d flights", count)
"""

import logging
import logging.config
from pathlib import Path

import yaml

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "logging.yaml"
DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_initialized = False


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a module.

    Args:
        name: Logger name, normally ``__name__``.

    Returns:
        Standard library logger.
    """
    return logging.getLogger(name)


def initialize_logging(
    config_path: str | Path | None = None,
    level: str | int | None = None,
) -> bool:
    """Configure process-wide logging.

    Loads a YAML ``dictConfig`` file. When the file is missing or cannot be
    applied, falls back to ``logging.basicConfig`` so the simulation still
    logs to stderr.

    Args:
        config_path: Path to a YAML logging config. Defaults to the packaged
            ``config/logging.yaml``.
        level: Optional root level override (e.g. "DEBUG").

    Returns:
        True if the YAML config was applied, False if the fallback was used.
    """
    global _initialized

    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    applied = False

    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                config = yaml.safe_load(f)
            logging.config.dictConfig(config)
            applied = True
        except (OSError, yaml.YAMLError, ValueError, TypeError) as e:
            logging.basicConfig(level=logging.INFO, format=DEFAULT_FORMAT)
            logging.getLogger(__name__).warning(
                "Invalid logging config %s, using defaults: %s", path, e
            )
    else:
        logging.basicConfig(level=logging.INFO, format=DEFAULT_FORMAT)

    if level is not None:
        logging.getLogger().setLevel(level.upper() if isinstance(level, str) else level)

    _initialized = True
    return applied


def is_initialized() -> bool:
    """Check whether initialize_logging() has run in this process."""
    return _initialized
