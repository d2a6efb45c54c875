"""Process-wide logging configuration for runtime entrypoints."""

import logging.config
from typing import Any


def logging_build_config(level: str = "INFO") -> dict[str, Any]:
    """Return the dictConfig payload for console logging.

    Args:
        level: Level for the package logger and root logger.

    Returns:
        dict[str, Any]: `logging.config.dictConfig` payload.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    normalized_level = level.strip().upper() or "INFO"
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": normalized_level,
                "formatter": "default",
            },
        },
        "root": {"level": normalized_level, "handlers": ["console"]},
        "loggers": {
            "uvicorn.error": {"level": normalized_level, "handlers": ["console"], "propagate": False},
            "uvicorn.access": {"level": normalized_level, "handlers": ["console"], "propagate": False},
            "ingestion_jobs": {"level": normalized_level, "handlers": ["console"], "propagate": False},
        },
    }


def logging_configure(level: str = "INFO") -> None:
    """Apply console logging configuration once at process start."""

    logging.config.dictConfig(logging_build_config(level))
