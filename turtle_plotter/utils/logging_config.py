"""Unified logging configuration for all entrypoints.

Provides consistent logging for the CLI, drawing sessions and tests:
    - Console and file handlers with optional rotation
    - JSON output mode for ingestion (ELK, Vector, etc.)
    - Contextual fields (app, source, profile)
    - Warning capture (Python warnings → logging)
    - Uncaught exception logging

Public API:
    setup_logging(log_level="INFO", context={"app": "compile"})
    get_logger(name)
    push_context(source="star")
    pop_context(keys=["source"])
    install_excepthook()

Format examples:
    Human: 2026-10-18T13:45:12.345Z | INFO     | app=compile | Message
    JSON: {"t":"2026-10-18T13:45:12.345Z","lvl":"INFO","app":"compile","msg":"..."}

Context uses contextvars for thread isolation.
Idempotent: repeated setup_logging() calls don't duplicate handlers.
"""

import contextvars
import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional


# Context variable for per-thread contextual fields
_context_var = contextvars.ContextVar('logging_context', default={})

# Handlers installed by setup_logging (removed again on the next call)
_installed: List[logging.Handler] = []


class ContextFormatter(logging.Formatter):
    """Formatter that includes contextual fields.

    Supports:
        - Human-readable format with colors (optional)
        - JSON format for machine ingestion
        - Contextual fields from push_context()
    """

    def __init__(
        self,
        fmt_mode: str = "human",
        use_color: bool = True,
        tz: str = "UTC"
    ):
        super().__init__()
        self.fmt_mode = fmt_mode
        self.use_color = use_color and sys.stderr.isatty()
        self.tz = tz

        self.colors = {
            'DEBUG': '\033[36m',
            'INFO': '\033[32m',
            'WARNING': '\033[33m',
            'ERROR': '\033[31m',
            'CRITICAL': '\033[35m',
            'RESET': '\033[0m'
        }

    def format(self, record: logging.LogRecord) -> str:
        context = _context_var.get({})

        if self.tz == "UTC":
            ts = datetime.fromtimestamp(record.created, tz=timezone.utc)
        else:
            ts = datetime.fromtimestamp(record.created)

        if self.fmt_mode == "json":
            return self._format_json(record, ts, context)
        return self._format_human(record, ts, context)

    def _format_json(
        self,
        record: logging.LogRecord,
        ts: datetime,
        context: dict
    ) -> str:
        log_dict = {
            't': ts.isoformat(),
            'lvl': record.levelname,
            'name': record.name,
            'pid': os.getpid(),
            'msg': record.getMessage()
        }
        log_dict.update(context)

        if record.exc_info:
            log_dict['exc'] = self.formatException(record.exc_info)

        return json.dumps(log_dict)

    def _format_human(
        self,
        record: logging.LogRecord,
        ts: datetime,
        context: dict
    ) -> str:
        ts_str = ts.strftime('%Y-%m-%dT%H:%M:%S.%f')[:-3] + 'Z'

        level = record.levelname
        if self.use_color:
            level = f"{self.colors.get(level, '')}{level:8s}{self.colors['RESET']}"
        else:
            level = f"{level:8s}"

        context_str = ' '.join(f"{k}={v}" for k, v in context.items())

        parts = [ts_str, '|', level, '|']
        if context_str:
            parts.extend([context_str, '|'])
        parts.append(record.getMessage())

        line = ' '.join(parts)
        if record.exc_info:
            line += '\n' + self.formatException(record.exc_info)
        return line


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    *,
    json: bool = False,
    color: bool = True,
    to_stderr: bool = True,
    rotate: Optional[Dict[str, Any]] = None,
    tz: str = "UTC",
    capture_warnings: bool = True,
    context: Optional[Dict[str, Any]] = None,
) -> List[logging.Handler]:
    """Configure root logger (idempotent).

    Parameters
    ----------
    log_level : str
        Logging level: "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"
    log_file : str, optional
        Log file path; None for no file logging
    json : bool
        Use JSON format in the log file, default False
    color : bool
        Use ANSI colors in console output, default True
    to_stderr : bool
        Log to stderr (console), default True
    rotate : dict, optional
        Rotation config:
        - {"mode": "size", "max_bytes": 5_000_000, "backup_count": 5}
        - {"mode": "time", "when": "D", "interval": 1, "backup_count": 7}
    tz : str
        Timezone for timestamps, "UTC" (default) or "local"
    capture_warnings : bool
        Capture Python warnings to logging, default True
    context : dict, optional
        Initial contextual fields (e.g., {"app": "compile"})

    Returns
    -------
    list[logging.Handler]
        Handlers attached to the root logger.
    """
    root = logging.getLogger()

    for handler in _installed:
        root.removeHandler(handler)
        handler.close()
    _installed.clear()

    root.setLevel(getattr(logging, log_level.upper()))

    if to_stderr:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(ContextFormatter("human", color, tz))
        root.addHandler(console_handler)
        _installed.append(console_handler)

    if log_file:
        file_handler = _create_file_handler(log_file, rotate, json, tz)
        root.addHandler(file_handler)
        _installed.append(file_handler)

    if context:
        push_context(**context)

    if capture_warnings:
        logging.captureWarnings(True)

    return list(_installed)


def _create_file_handler(
    log_file: str,
    rotate: Optional[Dict[str, Any]],
    json_format: bool,
    tz: str
) -> logging.Handler:
    """Create file handler with optional rotation."""
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    if rotate:
        mode = rotate.get('mode', 'size')

        if mode == 'size':
            handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=rotate.get('max_bytes', 5_000_000),
                backupCount=rotate.get('backup_count', 5)
            )
        elif mode == 'time':
            handler = logging.handlers.TimedRotatingFileHandler(
                log_file,
                when=rotate.get('when', 'D'),
                interval=rotate.get('interval', 1),
                backupCount=rotate.get('backup_count', 7)
            )
        else:
            raise ValueError(f"Unknown rotation mode: {mode}. Use 'size' or 'time'.")
    else:
        handler = logging.FileHandler(log_file)

    fmt_mode = "json" if json_format else "human"
    handler.setFormatter(ContextFormatter(fmt_mode, use_color=False, tz=tz))
    return handler


def get_logger(name: str) -> logging.Logger:
    """Get logger by name (typically __name__)."""
    return logging.getLogger(name)


def set_level(level: str) -> None:
    """Update root logger level at runtime."""
    logging.getLogger().setLevel(getattr(logging, level.upper()))


def push_context(**kwargs) -> None:
    """Add contextual fields to all subsequent log records.

    Examples
    --------
    >>> push_context(app="compile", source="star")
    >>> logger.info("Started")  # → "... | app=compile source=star | Started"
    """
    current = _context_var.get({})
    _context_var.set({**current, **kwargs})


def pop_context(keys: Optional[List[str]] = None) -> None:
    """Remove contextual fields; all of them when *keys* is None."""
    if keys is None:
        _context_var.set({})
    else:
        current = dict(_context_var.get({}))
        for key in keys:
            current.pop(key, None)
        _context_var.set(current)


def get_context() -> Dict[str, Any]:
    """Return a copy of the current contextual fields."""
    return dict(_context_var.get({}))


def install_excepthook() -> None:
    """Log uncaught exceptions (except Ctrl+C) before the interpreter exits."""
    def log_exception(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return

        logging.getLogger(__name__).critical(
            "Uncaught exception",
            exc_info=(exc_type, exc_value, exc_traceback)
        )

    sys.excepthook = log_exception
