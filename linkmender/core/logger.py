"""
Logging for Link Mender.

Provides structured logging with:
- Console output (colorized if supported)
- File output (JSON lines for parsing)
- Context tracking (component, file and line being processed)
- Error codes for link, anchor, redirect and rewrite problems

Library modules log through logging.getLogger(__name__), so every record
flows into the "linkmender" logger configured here.

Usage:
    from linkmender.core.logger import setup_logger, ComponentLogger

    setup_logger("linkmender", log_file=Path("linkmender.log"))

    log = ComponentLogger("rewriter")
    log.warning("Could not find link to replace", file_path="docs/a.md",
                line_number=12, error_code="FIX-01")
"""

import json
import logging
import sys
from dataclasses import dataclass, asdict
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, Any


ROOT_LOGGER_NAME = "linkmender"

ERROR_CODES = {
    # Links
    "LNK-01": "Broken link",
    "LNK-02": "Redirect available for missing target",
    "LNK-03": "No fix suggestion found",

    # Anchors
    "ANC-01": "Anchor not found",
    "ANC-02": "Anchor target file missing",

    # Navigation
    "NAV-01": "Navigation file unreadable",
    "NAV-02": "Navigation entry target missing",

    # Redirects
    "RDR-01": "Redirect configuration unreadable",
    "RDR-02": "Redirect configuration missing",
    "RDR-03": "Redirect append failed",
    "RDR-04": "Redirect target missing",

    # Rewriting
    "FIX-01": "Link text not found on recorded line",
    "FIX-02": "Line out of range",
    "FIX-03": "File write failed",

    # File system
    "FS-01": "File unreadable",
    "FS-02": "File too large",

    # Configuration
    "CFG-01": "Invalid configuration",
}

CONTEXT_FIELDS = ('component', 'file_path', 'line_number', 'error_code', 'operation')


@dataclass
class LogContext:
    """Context information for log entries."""
    component: Optional[str] = None
    file_path: Optional[str] = None
    line_number: Optional[int] = None
    error_code: Optional[str] = None
    operation: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict, excluding None values."""
        return {k: v for k, v in asdict(self).items() if v is not None}


class ContextFilter(logging.Filter):
    """Ensure every record carries the context attributes."""

    def __init__(self, default_context: Optional[LogContext] = None):
        super().__init__()
        self.context = default_context or LogContext()

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in self.context.to_dict().items():
            if getattr(record, key, None) is None:
                setattr(record, key, value)

        for name in CONTEXT_FIELDS:
            if not hasattr(record, name):
                setattr(record, name, None)

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
        self.use_colors = use_colors and sys.stdout.isatty()

    def format(self, record: logging.LogRecord) -> str:
        level = record.levelname

        if self.use_colors:
            parts = [f"{self.COLORS.get(level, '')}{level}{self.COLORS['RESET']}"]
        else:
            parts = [level]

        component = getattr(record, 'component', None)
        if component:
            parts.append(f"[{component}]")

        file_path = getattr(record, 'file_path', None)
        if file_path:
            line_number = getattr(record, 'line_number', None)
            parts.append(f"({file_path}:{line_number})" if line_number else f"({file_path})")

        parts.append(record.getMessage())

        error_code = getattr(record, 'error_code', None)
        if error_code:
            parts.append(f"[{error_code}: {ERROR_CODES.get(error_code, 'Unknown error')}]")

        return ' '.join(parts)


class JSONFormatter(logging.Formatter):
    """JSON-lines formatter for file logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            'timestamp': datetime.now().isoformat(),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name,
        }

        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_entry[name] = value

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    log_file: Optional[Path] = None,
    level: int = logging.INFO,
    console: bool = True,
    use_colors: bool = True
) -> logging.Logger:
    """
    Setup logger with file and console output.

    Handlers are attached to the named logger; module loggers below it
    (linkmender.parsers.markdown, ...) propagate into them.

    Args:
        name: Logger name
        log_file: Path to log file (JSON lines)
        level: Logging level
        console: Enable console output
        use_colors: Use ANSI colors in console

    Returns:
        Configured logger instance

    Example:
        >>> logger = setup_logger(log_file=Path("links.log"))
        >>> logger.info("Checking links", extra={"component": "checker"})
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.handlers.clear()

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.addFilter(ContextFilter())
        console_handler.setFormatter(ColoredFormatter(use_colors))
        logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.addFilter(ContextFilter())
        file_handler.setFormatter(JSONFormatter())
        logger.addHandler(file_handler)

    return logger


def setup_logger_from_config(config: Dict) -> logging.Logger:
    """
    Configure the root package logger from the `logging` config section.

    Args:
        config: Configuration dict. Optional keys:
                - logging.level (default: "INFO")
                - logging.log_file (default: None)
                - logging.console (default: True)
    """
    logging_config = config.get('logging', {}) or {}
    level_name = str(logging_config.get('level', 'INFO')).upper()
    log_file = logging_config.get('log_file')
    return setup_logger(
        ROOT_LOGGER_NAME,
        log_file=Path(log_file) if log_file else None,
        level=getattr(logging, level_name, logging.INFO),
        console=logging_config.get('console', True),
    )


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Get existing logger or create new one."""
    return logging.getLogger(name)


class ComponentLogger:
    """
    Logger wrapper that stamps every record with a component name.

    Keyword arguments file_path, line_number, error_code and operation are
    passed through as record attributes.
    """

    def __init__(self, component: str, logger: Optional[logging.Logger] = None):
        self.component = component
        self._logger = logger or get_logger()

    def _log(
        self,
        level: int,
        message: str,
        file_path: Optional[Any] = None,
        line_number: Optional[int] = None,
        error_code: Optional[str] = None,
        **kwargs
    ):
        extra = {
            'component': self.component,
            'file_path': str(file_path) if file_path else None,
            'line_number': line_number,
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

    def operation_start(self, operation: str, file_path: Optional[Any] = None):
        """Log start of an operation."""
        self.debug(f"Starting: {operation}", file_path=file_path, operation=operation)

    def operation_complete(self, operation: str, success: bool = True, **kwargs):
        """Log completion of an operation."""
        if success:
            self.debug(f"Completed: {operation}", operation=operation, **kwargs)
        else:
            self.warning(f"Failed: {operation}", operation=operation, **kwargs)
