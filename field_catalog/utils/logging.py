"""Structured logging: correlation IDs, operation timing, and masking of contact details."""

import hashlib
import inspect
import logging
import re
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from functools import wraps
from typing import Any, Callable, Dict, Optional

from field_catalog.utils.logging_config import LoggingConfig, get_logger


_correlation_id_var: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)

_EMAIL_RE = re.compile(r'[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}', re.IGNORECASE)
_PHONE_RE = re.compile(r'\+?\d[\d\s().-]{7,}\d')
_SECRET_RE = re.compile(r'(?i)(api[_-]?key|token|secret|password|bearer)[\s:=]+([A-Za-z0-9._-]{20,})')
_DATA_URL_RE = re.compile(r'(data:[\w.+-]+/[\w.+-]+;base64,)([A-Za-z0-9+/=]{16,})')


def generate_correlation_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


def get_correlation_id() -> Optional[str]:
    return _correlation_id_var.get()


@contextmanager
def correlation_context(correlation_id: Optional[str] = None):
    """Bind a correlation ID (generated when not given) for the duration of a request."""
    token = _correlation_id_var.set(correlation_id or generate_correlation_id())
    try:
        yield _correlation_id_var.get()
    finally:
        _correlation_id_var.reset(token)


def mask_sensitive_data(text: str) -> str:
    """
    Redact contact details and credentials from free text.

    Photo payloads are shortened to their length so a failed write never
    dumps a multi-megabyte data URL into the logs.
    """
    if not text or not LoggingConfig.LOG_MASK_SENSITIVE:
        return text

    text = _DATA_URL_RE.sub(lambda m: f"{m.group(1)}[{len(m.group(2))} chars]", text)
    text = _EMAIL_RE.sub('[REDACTED_EMAIL]', text)
    text = _PHONE_RE.sub('[REDACTED_PHONE]', text)
    return _SECRET_RE.sub(r'\1=[REDACTED]', text)


def mask_user_id(user_id: str) -> str:
    """Shorten an auth principal ID to a stable, non-reversible tag."""
    if not LoggingConfig.LOG_MASK_SENSITIVE or not user_id or len(user_id) <= 12:
        return user_id

    digest = hashlib.sha256(user_id.encode()).hexdigest()[:8]
    return f"{user_id[:4]}...{digest}"


class StructuredLogger:
    """
    Wraps a stdlib logger so keyword arguments become structured fields.

    Fields passed to ``bind`` are attached to every record the returned
    logger emits, e.g. ``logger.bind(record_id=...)`` inside a workflow step.
    """

    def __init__(self, logger: logging.Logger, context: Optional[Dict[str, Any]] = None):
        self.logger = logger
        self.context = dict(context or {})

    def bind(self, **context: Any) -> "StructuredLogger":
        return StructuredLogger(self.logger, {**self.context, **context})

    def _get_extra(self, **kwargs: Any) -> Dict[str, Any]:
        extra = {"timestamp": datetime.now(timezone.utc).isoformat(), **self.context}

        correlation_id = get_correlation_id()
        if correlation_id:
            extra["correlation_id"] = correlation_id

        extra.update(kwargs)
        return extra

    def log(self, level: int, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        if self.logger.isEnabledFor(level):
            self.logger.log(level, message, extra=self._get_extra(**kwargs), exc_info=exc_info)

    def debug(self, message: str, **kwargs: Any) -> None:
        self.log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self.log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self.log(logging.WARNING, message, **kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        self.log(logging.ERROR, message, exc_info=exc_info, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        self.log(logging.ERROR, message, exc_info=True, **kwargs)


def get_structured_logger(name: str) -> StructuredLogger:
    return StructuredLogger(get_logger(name))


@contextmanager
def log_timing(operation_name: str, logger: Optional[StructuredLogger] = None, **context: Any):
    """
    Time the enclosed block and log one completion record.

    The record is a warning instead of info when the block raises or runs
    past ``LOG_SLOW_OPERATION_THRESHOLD_MS``.
    """
    logger = logger or get_structured_logger(__name__)
    threshold_ms = LoggingConfig.LOG_SLOW_OPERATION_THRESHOLD_MS
    start = time.perf_counter()
    failed = False

    try:
        yield
    except Exception:
        failed = True
        raise
    finally:
        elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
        slow = elapsed_ms > threshold_ms
        if failed:
            outcome = "Failed"
        else:
            outcome = "Slow operation" if slow else "Completed"
        logger.log(
            logging.WARNING if slow or failed else logging.INFO,
            f"{outcome} {operation_name}",
            operation=operation_name,
            processing_time_ms=elapsed_ms,
            succeeded=not failed,
            **context,
        )


def timed(operation_name: Optional[str] = None, logger: Optional[StructuredLogger] = None):
    """Decorator form of ``log_timing`` for plain and async functions."""
    def decorator(func: Callable) -> Callable:
        op_name = operation_name or f"{func.__module__}.{func.__name__}"
        log = logger or get_structured_logger(func.__module__)

        if inspect.iscoroutinefunction(func):
            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                with log_timing(op_name, logger=log):
                    return await func(*args, **kwargs)
            return async_wrapper

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            with log_timing(op_name, logger=log):
                return func(*args, **kwargs)
        return sync_wrapper

    return decorator


def setup_logging() -> logging.Logger:
    """Configure the root logger once and return the package logger."""
    LoggingConfig.setup_logging()
    return get_logger("field_catalog")
