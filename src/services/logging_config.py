"""
Logging Configuration for the Visa Eligibility service.

Provides structured logging with:
- JSON formatting for production
- Human-readable formatting for development
- Request and wizard correlation ids on every record
- Assessment-specific logging for submission outcomes

Bearer tokens, passwords and similar secrets are masked before a record is
written, whichever formatter is in use.
"""

import logging
import json
import sys
import time
from datetime import datetime
from typing import Optional, Dict, Any
from pathlib import Path
from contextvars import ContextVar

# Context variables for request tracking
request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
wizard_id_var: ContextVar[Optional[str]] = ContextVar('wizard_id', default=None)

REDACTED = "***"
SENSITIVE_KEYS = frozenset({
    "access_token",
    "refresh_token",
    "token",
    "authorization",
    "password",
    "apikey",
    "anon_key",
})


def redact(data: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of ``data`` with secret values masked."""
    return {
        key: REDACTED if key.lower() in SENSITIVE_KEYS and value else value
        for key, value in data.items()
    }


def _context_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Correlation ids plus the record's extra data, secrets masked."""
    fields: Dict[str, Any] = {}

    request_id = request_id_var.get()
    if request_id:
        fields["request_id"] = request_id

    wizard_id = wizard_id_var.get()
    if wizard_id:
        fields["wizard_id"] = wizard_id

    extra_data = getattr(record, 'extra_data', None)
    if extra_data:
        fields.update(redact(extra_data))
    return fields


class JsonFormatter(logging.Formatter):
    """One JSON object per line, for log aggregators."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        log_data.update(_context_fields(record))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class ReadableFormatter(logging.Formatter):
    """
    Human-readable log formatter for development.

    Correlation ids are shortened to eight characters to keep lines narrow.
    """

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m',
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        reset = self.COLORS['RESET']

        timestamp = datetime.now().strftime('%H:%M:%S.%f')[:-3]
        level = f"{color}{record.levelname:8s}{reset}"

        fields = _context_fields(record)
        ids = [str(fields.pop(key))[:8] for key in ("request_id", "wizard_id") if key in fields]
        prefix = f"({'/'.join(ids)}) " if ids else ""

        message = f"{timestamp} {level} [{record.name}] {prefix}{record.getMessage()}"
        if fields:
            message += " | " + " | ".join(f"{k}={v}" for k, v in fields.items())
        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        return message


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter that merges fixed context into each record's extra data."""

    def process(self, msg: str, kwargs: Dict) -> tuple:
        extra = kwargs.setdefault('extra', {})
        extra_data = dict(self.extra)
        extra_data.update(extra.get('extra_data') or {})
        extra['extra_data'] = extra_data
        return msg, kwargs


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Optional[Path] = None
) -> None:
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, output JSON formatted logs
        log_file: Optional file path for log output (always JSON)
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(JsonFormatter() if json_output else ReadableFormatter())
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(JsonFormatter())
        root_logger.addHandler(file_handler)

    # httpx logs every request URL at INFO
    for noisy in ("httpx", "httpcore", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str, **extra) -> ContextLogger:
    """
    Get a context-aware logger.

    Args:
        name: Logger name (typically __name__)
        **extra: Additional context to include in all logs

    Returns:
        ContextLogger instance
    """
    return ContextLogger(logging.getLogger(name), extra)


class AssessmentLogger:
    """
    Specialized logger for assessment submissions.

    Records what was sent (never the token or the answers themselves),
    how long the call took and how it ended.
    """

    def __init__(self, route_id: str):
        self.logger = get_logger("eligibility.assessment", route_id=route_id)
        self.route_id = route_id
        self._start_time: Optional[float] = None

    def _elapsed_ms(self) -> int:
        if self._start_time is None:
            return 0
        return int((time.time() - self._start_time) * 1000)

    def start(self, answer_count: int, has_profile: bool) -> None:
        self._start_time = time.time()
        self.logger.info(
            "Starting eligibility assessment",
            extra={'extra_data': {
                'answer_count': answer_count,
                'profile_available': has_profile,
            }}
        )

    def log_success(self, assessment_id: Optional[str], overall_score: float, status: str) -> None:
        self.logger.info(
            "Assessment completed",
            extra={'extra_data': {
                'assessment_id': assessment_id,
                'overall_score': overall_score,
                'eligibility_status': status,
                'duration_ms': self._elapsed_ms(),
            }}
        )

    def log_failure(self, kind: str, message: str, status_code: Optional[int] = None) -> None:
        level = logging.INFO if kind == "authentication" else logging.WARNING
        self.logger.log(
            level,
            f"Assessment failed: {kind}",
            extra={'extra_data': {
                'failure_kind': kind,
                'error': message,
                'status_code': status_code,
                'duration_ms': self._elapsed_ms(),
            }}
        )
