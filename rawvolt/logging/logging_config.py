# This module configures the logging infrastructure.

"""
Centralized logging system for rawvolt
======================================

This module provides a configurable logging setup for the reader:

- Logging level configuration
- Custom color formatters
- Console handler plus an optional log file
"""

import logging
import sys
from pathlib import Path
from typing import Optional


class Colors:
    """ANSI colors for message formatting."""
    OKCYAN = '\033[96m'
    OKGREEN = '\033[92m'
    WARNING = '\033[93m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'

    ERROR = '\033[38;5;196m'


class RawvoltFormatter(logging.Formatter):
    """Custom formatter for rawvolt with colors and level prefixes."""

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors

        self.formats = {
            logging.DEBUG: ("[DEBUG]", Colors.OKCYAN),
            logging.INFO: ("[INFO]", Colors.OKGREEN),
            logging.WARNING: ("[WARN]", Colors.WARNING),
            logging.ERROR: ("[ERROR]", Colors.ERROR),
            logging.CRITICAL: ("[CRITICAL]", Colors.FAIL + Colors.BOLD),
        }

    def format(self, record):
        """Apply formatting according to the log level."""
        if record.levelno not in self.formats:
            return super().format(record)
        prefix, color = self.formats[record.levelno]
        message = f"{prefix} {record.name}: {record.getMessage()}"
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        if self.use_colors:
            return f"{color}{message}{Colors.ENDC}"
        return message


class RawvoltLogger:
    """Package logger with a console handler and an optional log file."""

    def __init__(
        self,
        name: str = "rawvolt",
        level: str = "INFO",
        log_file: Optional[Path] = None,
        use_colors: bool = True,
    ):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))

        if self.logger.handlers:
            return

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(RawvoltFormatter(use_colors))
        self.logger.addHandler(console_handler)

        if log_file is not None:
            log_file = Path(log_file)
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            file_handler.setFormatter(RawvoltFormatter(use_colors=False))
            self.logger.addHandler(file_handler)
            self.logger.info("Logs stored in: %s", log_file.absolute())

    def file_opened(self, filename: str, size_bytes: int) -> None:
        """Log that a recording has been opened."""

        self.logger.info(
            "Opened recording • %s • %.1f MB",
            filename,
            size_bytes / (1024 ** 2),
        )

    def file_finished(self, filename: str, headers_read: int, error: Optional[str]) -> None:
        """Log how a recording scan ended."""

        if error:
            self.logger.warning(
                "Recording stopped • %s • blocks=%d • %s", filename, headers_read, error
            )
        else:
            self.logger.info("Recording finished • %s • blocks=%d", filename, headers_read)


def setup_logging(
    level: str = "INFO", log_file: Optional[Path] = None, use_colors: bool = True
) -> RawvoltLogger:
    """Configure the logging system for rawvolt.

    Args:
        level: Logging level ('DEBUG', 'INFO', 'WARNING', 'ERROR')
        log_file: File path to store logs (optional, console only if ``None``)
        use_colors: Whether to use colors in the console output

    Returns:
        Configured :class:`RawvoltLogger`
    """
    return RawvoltLogger("rawvolt", level, log_file, use_colors)


_global_logger: Optional[RawvoltLogger] = None

def get_global_logger() -> RawvoltLogger:
    """Retrieve the configured global logger."""
    global _global_logger
    if _global_logger is None:
        from ..config import config
        _global_logger = setup_logging(config.LOG_LEVEL, config.LOG_FILE, config.LOG_COLORS)
    return _global_logger

def set_global_logger(logger: RawvoltLogger):
    """Set the global logger."""
    global _global_logger
    _global_logger = logger
