"""Singleton logging configuration.

setup_logging() configures the root logger once per process. The CLI
calls it before importing the rest of the package so module-level
loggers inherit the format. Idempotent (guarded by a module-level flag).
"""

import logging

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s] - %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"

# Third-party loggers to suppress to WARNING
_SUPPRESSED_LOGGERS = (
    "asyncio",
    "yaml",
)

_configured = False


def setup_logging(level: str = "WARNING") -> None:
    """Configure root logger and quiet noisy third-party loggers.

    Idempotent: a second call only adjusts the level.
    """
    global _configured  # noqa: PLW0603
    if _configured:
        set_level(level)
        return
    _configured = True

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )

    for name in _SUPPRESSED_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def set_level(level: str) -> None:
    """Change the root logger level after setup (``--verbose``)."""
    logging.getLogger().setLevel(getattr(logging, level.upper()))
