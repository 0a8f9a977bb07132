"""
Structured logging utilities.
Routes structlog events through stdlib logging into a JSON-line log file.
"""
from __future__ import annotations

import logging
from pathlib import Path

import structlog


_file_handler: logging.FileHandler | None = None


def _resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(log_path: str | Path, level: str | int = logging.INFO) -> Path:
    """Configures process-wide structured logging to a file. Repeated calls are no-ops."""
    global _file_handler
    path = Path(log_path)
    if _file_handler is not None:
        return Path(_file_handler.baseFilename)

    path.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(_resolve_level(level))

    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)
    _file_handler = handler

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    return path


def shutdown_logging():
    """Detaches and closes the file handler installed by configure_logging."""
    global _file_handler
    if _file_handler is None:
        return
    logging.getLogger().removeHandler(_file_handler)
    _file_handler.close()
    _file_handler = None
    structlog.reset_defaults()


def get_logger(name: str):
    return structlog.get_logger(name)
