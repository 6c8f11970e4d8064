"""
Logging configuration for flexidate.

Library modules only ever call ``structlog.get_logger(__name__)``; wiring the
output is left to the embedding application (or to date_cli.py), which calls
configure_logging() once at startup:
- stderr console handler, JSON lines by default or structlog's dev renderer
- optional ``flexidate.log`` file, rotated weekly, 52 gzip-compressed backups
"""
import gzip
import logging
import logging.handlers
import shutil
import sys
from pathlib import Path
from typing import Any, List, Optional

import structlog
from structlog.types import EventDict, Processor

from flexidate.core.config import PROJECT_ROOT, get_settings

LOG_FILE_NAME = "flexidate.log"


def get_log_directory(log_dir: Optional[Path] = None) -> Path:
    """Create (if needed) and return the log directory, ``logs/`` at the project root by default."""
    directory = Path(log_dir) if log_dir else PROJECT_ROOT / "logs"
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def add_log_level(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Store the upper-case level name under ``level`` ("warn" is reported as WARNING)."""
    event_dict["level"] = ("warning" if method_name == "warn" else method_name).upper()
    return event_dict


# ============================================================================
# FILE ROTATION
# ============================================================================

def _gz_namer(default_name: str) -> str:
    """flexidate.log.2025-11-24 -> flexidate.log.2025-11-24.gz"""
    return f"{default_name}.gz"


def _gz_rotator(source: str, dest: str) -> None:
    """Write the rotated file gzip-compressed to ``dest`` and drop the original."""
    with open(source, 'rb') as plain, gzip.open(dest, 'wb') as packed:
        shutil.copyfileobj(plain, packed)
    Path(source).unlink()


def _file_handler(log_dir: Optional[Path], level: int) -> logging.Handler:
    # W0: rotate every Monday at midnight UTC
    handler = logging.handlers.TimedRotatingFileHandler(
        filename=str(get_log_directory(log_dir) / LOG_FILE_NAME),
        when="W0",
        interval=1,
        backupCount=52,
        encoding="utf-8",
        utc=True
        )
    handler.setLevel(level)
    handler.namer = _gz_namer
    handler.rotator = _gz_rotator
    return handler


# ============================================================================
# STRUCTLOG
# ============================================================================

def _processors(json_logs: bool) -> List[Processor]:
    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer(colors=False)
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        renderer,
        ]


def configure_logging(log_level: Optional[str] = None, enable_file_logging: bool = False,
                      log_dir: Optional[Path] = None, json_logs: bool = True) -> None:
    """
    Route stdlib logging and structlog output.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL (default: settings LOG_LEVEL);
            unknown names mean INFO
        enable_file_logging: Also write ``flexidate.log`` under ``log_dir``
        log_dir: Directory for the log file (default: ``logs/`` at the project root)
        json_logs: JSON lines when True, key=value console rendering otherwise
    """
    level_name = (log_level or get_settings().LOG_LEVEL).upper()
    level = getattr(logging, level_name, logging.INFO)
    if not isinstance(level, int):
        level = logging.INFO

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    handlers = [console]
    if enable_file_logging:
        handlers.append(_file_handler(log_dir, level))

    # force=True drops whatever handlers the root logger had
    logging.basicConfig(format="%(message)s", handlers=handlers, level=level, force=True)

    structlog.configure(
        processors=_processors(json_logs),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
        )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Structured logger for ``name``.

    Usage:
        logger = get_logger(__name__)
        logger.info("Default timezone resolved", timezone="Europe/Rome")
    """
    return structlog.get_logger(name)
