"""
Logging for publish-please.

Provides structured logging with:
- Console output (colorized if supported)
- File output (JSON lines for parsing)
- Context tracking (validation key, operation)
- Error categorization

The console reporter (core.reporting) is what the operator reads; the logger
records what happened underneath (commands run, exit codes, config sources).
It is silent unless setup_logger() is called, e.g. by `--verbose` or
`--log-file`.

Usage:
    from publish_please.core.logger import setup_logger, ValidationLogger

    logger = setup_logger("publish-please", log_file=Path("publish.log"))
    ValidationLogger("branch").info("Current branch is master")
"""

import json
import logging
import sys
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional


# Error codes attached to log records via the error_code extra
ERROR_CODES = {
    # Configuration errors
    "CFG-01": "Malformed configuration file",
    "CFG-02": "Invalid option value",
    "CFG-03": "Unknown option",

    # Git errors
    "GIT-01": "Not a git repository",
    "GIT-04": "Git not installed",
    "GIT-06": "Git timeout",

    # npm errors
    "NPM-01": "npm not installed",
    "NPM-02": "npm command failed",
    "NPM-03": "Unparseable npm output",
    "NPM-04": "npm timeout",

    # Script errors
    "SCR-01": "Script exited with non-zero code",

    # Workflow errors
    "WF-01": "package.json missing",
    "WF-02": "Validation failed",
    "WF-03": "Publish rejected by guard",
}

CONTEXT_FIELDS = ('validation', 'operation', 'error_code')


@dataclass
class LogContext:
    """Context information for log entries."""
    validation: Optional[str] = None
    operation: Optional[str] = None
    error_code: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict, excluding None values."""
        return {k: v for k, v in asdict(self).items() if v is not None}


class ContextFilter(logging.Filter):
    """Add context information to log records."""

    def __init__(self, default_context: Optional[LogContext] = None):
        super().__init__()
        self.context = default_context or LogContext()

    def filter(self, record: logging.LogRecord) -> bool:
        """Add context attributes to record."""
        for key, value in self.context.to_dict().items():
            if not hasattr(record, key):
                setattr(record, key, value)

        for field_name in CONTEXT_FIELDS:
            if not hasattr(record, field_name):
                setattr(record, field_name, None)

        return True


class ColoredFormatter(logging.Formatter):
    """Colorized console formatter."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m',
    }

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors and context."""
        level = record.levelname
        parts = []

        if self.use_colors:
            parts.append(f"{self.COLORS.get(level, '')}{level}{self.COLORS['RESET']}")
        else:
            parts.append(level)

        validation = getattr(record, 'validation', None)
        if validation:
            parts.append(f"[{validation}]")

        parts.append(record.getMessage())

        error_code = getattr(record, 'error_code', None)
        if error_code:
            error_desc = ERROR_CODES.get(error_code, "Unknown error")
            parts.append(f"[{error_code}: {error_desc}]")

        return ' '.join(parts)


class JSONFormatter(logging.Formatter):
    """JSON formatter for file logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            'timestamp': datetime.now().isoformat(),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name,
        }

        for field_name in CONTEXT_FIELDS:
            value = getattr(record, field_name, None)
            if value is not None:
                log_entry[field_name] = value

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


def setup_logger(
    name: str = "publish_please",
    log_file: Optional[Path] = None,
    level: int = logging.INFO,
    console: bool = True,
    use_colors: bool = True
) -> logging.Logger:
    """
    Setup logger with file and console output.

    Modules log through logging.getLogger(__name__), so configuring the
    "publish_please" logger covers the whole package.

    Args:
        name: Logger name
        log_file: Path to log file (JSON lines)
        level: Logging level
        console: Enable console output (stderr, to keep reporter output clean)
        use_colors: Use ANSI colors in console

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    logger.handlers.clear()
    logger.filters.clear()

    context_filter = ContextFilter()
    logger.addFilter(context_filter)

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.addFilter(context_filter)
        console_handler.setFormatter(ColoredFormatter(use_colors))
        logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.addFilter(context_filter)
        file_handler.setFormatter(JSONFormatter())
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = "publish_please") -> logging.Logger:
    """Get existing logger or create new one."""
    return logging.getLogger(name)


class ValidationLogger:
    """
    Logger wrapper for validations with automatic context.

    Every record carries the validation key so log files can be filtered
    per validation.
    """

    def __init__(self, validation: str, logger: Optional[logging.Logger] = None):
        self.validation = validation
        self._logger = logger or get_logger(f"publish_please.validations.{validation}")

    def _log(self, level: int, message: str, error_code: Optional[str] = None, **kwargs):
        extra = {
            'validation': self.validation,
            'error_code': error_code,
            **kwargs
        }
        self._logger.log(level, message, extra=extra)

    def debug(self, message: str, **kwargs):
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs):
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs):
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs):
        self._log(logging.ERROR, message, **kwargs)

    def operation_start(self, operation: str):
        """Log start of an operation."""
        self.debug(f"Starting: {operation}", operation=operation)

    def operation_complete(self, operation: str, success: bool = True):
        """Log completion of an operation."""
        if success:
            self.debug(f"Completed: {operation}", operation=operation)
        else:
            self.warning(f"Failed: {operation}", operation=operation)
