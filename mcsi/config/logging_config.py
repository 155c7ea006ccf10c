"""
Logging configuration for mcsi.

This module sets up console logging with optional rich output and a
per-run log file under the target's ``.mcsi/logs`` directory.
"""

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from ..constants import LOG_LEVEL_MAP, TRACE_LEVEL
from .settings import config

# Global console for rich output
console = Console()

# Level used for "off": above CRITICAL so nothing is emitted
OFF_LEVEL = logging.CRITICAL + 10

logging.addLevelName(TRACE_LEVEL, "TRACE")

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"


class ColoredFormatter(logging.Formatter):
    """Custom formatter with color coding for different log levels."""

    COLORS = {
        'TRACE': '\033[34m',      # Blue
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = (
                f"{self.COLORS[levelname]}"
                f"{levelname}"
                f"{self.RESET}"
            )
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def resolve_level(log_level: str) -> int:
    """Convert a command line level name (off, warn, trace, ...) to a logging level."""
    name = log_level.lower()
    if name == "off":
        return OFF_LEVEL
    if name not in LOG_LEVEL_MAP:
        raise ValueError(f"Unknown log level: {log_level}")
    return logging.getLevelName(LOG_LEVEL_MAP[name])


def setup_logging(
    log_level: Optional[str] = None,
    colored_output: Optional[bool] = None,
) -> None:
    """Setup console logging."""

    log_level = log_level or config.get("logging.level", "info")
    colored_output = colored_output if colored_output is not None else config.get("ui.colored_output", True)
    colored_output = colored_output and sys.stdout.isatty()
    enable_rich_logging = colored_output and config.get("ui.rich_logging", True)

    numeric_level = resolve_level(log_level)

    # Clear any existing handlers
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.setLevel(numeric_level)

    if numeric_level == OFF_LEVEL:
        root_logger.addHandler(logging.NullHandler())
        return

    # Console handler
    if enable_rich_logging:
        console_handler = RichHandler(
            console=console,
            show_time=False,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )
        console_formatter = logging.Formatter("%(message)s")
    else:
        console_handler = logging.StreamHandler(sys.stdout)
        if colored_output:
            console_formatter = ColoredFormatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%H:%M:%S"
            )
        else:
            console_formatter = logging.Formatter(
                "%(asctime)s - %(levelname)s - %(message)s",
                datefmt="%H:%M:%S"
            )

    console_handler.setFormatter(console_formatter)
    console_handler.setLevel(numeric_level)
    root_logger.addHandler(console_handler)

    # Set specific logger levels
    if numeric_level > TRACE_LEVEL:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.debug(f"Logging setup complete. Level: {log_level}")


def log_file_name(now: Optional[datetime] = None) -> str:
    """Build an RFC 3339 log file name without colons."""
    now = now or datetime.now(timezone.utc)
    return f"{now.isoformat()}.log".replace(':', '')


def add_file_logging(logs_dir: Path, log_level: Optional[str] = None) -> Optional[Path]:
    """Attach a file handler writing this run's log into ``logs_dir``.

    Returns the log file path, or None when file logging is disabled
    by configuration or by the "off" level.
    """
    log_level = log_level or config.get("logging.level", "info")
    numeric_level = resolve_level(log_level)

    if numeric_level == OFF_LEVEL or not config.get("logging.file_logging", True):
        return None

    logs_dir.mkdir(parents=True, exist_ok=True)
    log_file = logs_dir / log_file_name()

    file_handler = logging.FileHandler(log_file, encoding='utf-8')
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    file_handler.setLevel(numeric_level)
    logging.getLogger().addHandler(file_handler)

    logging.getLogger(__name__).debug(f"Writing log file {log_file}")
    return log_file
