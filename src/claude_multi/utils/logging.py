"""
Logging infrastructure for claude-multi.

Console output goes through Rich on stderr so that it never mixes with
command output; an optional rotating log file keeps a fuller record.
"""

import json
import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Union

from rich.console import Console
from rich.logging import RichHandler


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    RESERVED = {
        "name", "msg", "args", "levelname", "levelno", "pathname",
        "filename", "module", "lineno", "funcName", "created",
        "msecs", "relativeCreated", "thread", "threadName",
        "processName", "process", "getMessage", "exc_info",
        "exc_text", "stack_info", "taskName",
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        # Anything passed through ``extra=`` ends up on the record
        for key, value in record.__dict__.items():
            if key not in self.RESERVED:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


class ColoredFormatter(logging.Formatter):
    """Colored formatter for console output when Rich is disabled."""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors."""
        color = self.COLORS.get(record.levelname, "")
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


class LoggingManager:
    """Process-wide logging setup for claude-multi."""

    def __init__(self):
        self._loggers: Dict[str, logging.Logger] = {}
        self._setup_done = False

    def setup_logging(
        self,
        enabled: bool = True,
        level: Union[str, int] = logging.INFO,
        console_level: Union[str, int] = logging.WARNING,
        log_file: Optional[Path] = None,
        format_type: str = "text",
        enable_rich: bool = True,
        max_bytes: int = 5 * 1024 * 1024,  # 5MB
        backup_count: int = 3,
        force: bool = False,
        **kwargs: Any,
    ) -> None:
        """
        Setup logging configuration.

        Args:
            enabled: Enable logging completely
            level: File logging level
            console_level: Console logging level
            log_file: Optional path of a rotating log file
            format_type: "text" or "json"
            enable_rich: Use Rich for console output
            max_bytes: Maximum log file size before rotation
            backup_count: Number of rotated files to keep
            force: Reconfigure even if logging was already set up
            **kwargs: Ignored, accepted so settings can be splatted in
        """
        if self._setup_done and not force:
            return

        root_logger = logging.getLogger()

        if not enabled:
            root_logger.setLevel(logging.CRITICAL)
            root_logger.handlers.clear()
            self._setup_done = True
            return

        if isinstance(level, str):
            level = getattr(logging, level.upper())
        if isinstance(console_level, str):
            console_level = getattr(logging, console_level.upper())

        # Root logger takes the most permissive of the two levels
        root_logger.setLevel(min(level, console_level))
        root_logger.handlers.clear()

        if enable_rich:
            console_handler: logging.Handler = RichHandler(
                console=Console(stderr=True),
                rich_tracebacks=True,
                markup=False,
                show_path=False,
            )
        else:
            console_handler = logging.StreamHandler(sys.stderr)
            if format_type == "json":
                console_handler.setFormatter(JSONFormatter())
            else:
                console_handler.setFormatter(ColoredFormatter(
                    "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
                ))

        console_handler.setLevel(console_level)
        root_logger.addHandler(console_handler)

        if log_file:
            log_file.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )

            if format_type == "json":
                file_handler.setFormatter(JSONFormatter())
            else:
                file_handler.setFormatter(logging.Formatter(
                    "%(asctime)s | %(levelname)s | %(name)s | "
                    "%(module)s:%(funcName)s:%(lineno)d | %(message)s"
                ))

            file_handler.setLevel(level)
            root_logger.addHandler(file_handler)

        self._setup_done = True

    def get_logger(self, name: str) -> logging.Logger:
        """
        Get or create a logger instance.

        Args:
            name: Logger name

        Returns:
            Logger instance
        """
        if name not in self._loggers:
            self._loggers[name] = logging.getLogger(name)

        return self._loggers[name]


# Global logging manager
_logging_manager = LoggingManager()

# Convenience functions
setup_logging = _logging_manager.setup_logging
get_logger = _logging_manager.get_logger
