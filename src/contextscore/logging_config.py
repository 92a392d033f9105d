"""Singleton logging configuration.

``setup_logging()`` configures the root logger once per process; the
second and later calls are no-ops (guarded by a module-level flag).
The scoring core only logs at DEBUG, so the CLI default of WARNING keeps
output limited to rendered results.
"""

import logging

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s] - %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"

# Third-party loggers to suppress to WARNING
_SUPPRESSED_LOGGERS = (
    "yaml",
    "pydantic",
)

_configured = False


def setup_logging(level: str = "WARNING") -> None:
    """Configure root logger format and level. Idempotent."""
    global _configured  # noqa: PLW0603
    if _configured:
        return
    _configured = True

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )

    for name in _SUPPRESSED_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def set_level(level: str) -> None:
    """Adjust the root and package log level after setup (``-v`` flag)."""
    value = getattr(logging, level.upper(), logging.WARNING)
    logging.getLogger().setLevel(value)
    logging.getLogger("contextscore").setLevel(value)
