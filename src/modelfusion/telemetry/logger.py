"""
Structured logging for modelfusion.

Every library module logs through :func:`get_logger`. Log calls take keyword
fields (``logger.info("POST request", url=url)``) which the formatters render
next to the message together with the current call context (run id, call id,
function type, provider, model). Secrets in messages and fields are masked.

The level and output format default to the ``MODELFUSION_LOG_LEVEL`` and
``MODELFUSION_LOG_FORMAT`` (``text`` or ``json``) environment variables.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import os
import re
import sys
import time
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

_REDACTED = "***REDACTED***"

_current_context: ContextVar[LogContext | None] = ContextVar("modelfusion_log_context", default=None)


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    def to_logging_level(self) -> int:
        return logging.getLevelName(self.value)

    @classmethod
    def from_env(cls, default: LogLevel | None = None) -> LogLevel:
        """Read the level from ``MODELFUSION_LOG_LEVEL``."""
        value = os.getenv("MODELFUSION_LOG_LEVEL", "").strip().upper()
        if value in cls.__members__:
            return cls[value]
        return default or cls.INFO


@dataclass
class LogContext:
    """Call-scoped logging context.

    Attributes:
        run_id: Identifier of the enclosing run
        call_id: Identifier of the current function call
        function_type: Function type (e.g. 'generate-text')
        provider: Provider of the model
        model: Model name
        extra: Additional context fields
    """

    run_id: str | None = None
    call_id: str | None = None
    function_type: str | None = None
    provider: str | None = None
    model: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Fields that are set, followed by the extra fields."""
        result = {
            f.name: getattr(self, f.name)
            for f in dataclasses.fields(self)
            if f.name != "extra" and getattr(self, f.name)
        }
        result.update(self.extra)
        return result


def get_log_context() -> LogContext:
    """Get the logging context of the current task."""
    return _current_context.get() or LogContext()


def set_log_context(context: LogContext) -> Token[LogContext | None]:
    """Set the logging context for the current task.

    Returns:
        Token for :func:`reset_log_context`
    """
    return _current_context.set(context)


def reset_log_context(token: Token[LogContext | None]) -> None:
    """Restore the context that was active before ``set_log_context``."""
    _current_context.reset(token)


def clear_log_context() -> None:
    _current_context.set(None)


class SensitiveDataMasker:
    """Masks provider credentials in log output.

    Text is masked with regular expressions; mapping values are masked
    entirely when their key names a credential. Usage counters such as
    ``prompt_tokens`` are kept.
    """

    DEFAULT_PATTERNS: ClassVar[list[tuple[str, str]]] = [
        # OpenAI style secret keys
        (r"sk-[a-zA-Z0-9_-]{20,}", "sk-" + _REDACTED),
        # key=value and "key": "value" forms (api_key, xi-api-key, ...)
        (r"((?:xi[_-])?api[_-]?key[\"']?\s*[:=]\s*[\"']?)[^\"'\s,}]+", r"\1" + _REDACTED),
        (r"(Bearer\s+)\S+", r"\1" + _REDACTED),
        (r"(Authorization[\"']?\s*[:=]\s*[\"']?)(?!Bearer\s)[^\"'\s,}]+", r"\1" + _REDACTED),
        # <PROVIDER>_API_KEY=... from dumped environments
        (r"([A-Z0-9_]+_API_KEY=)\S+", r"\1" + _REDACTED),
    ]

    SENSITIVE_KEY = re.compile(r"key|secret|password|auth|token", re.IGNORECASE)
    COUNTER_KEY = re.compile(r"tokens$", re.IGNORECASE)

    def __init__(self, patterns: list[tuple[str, str]] | None = None) -> None:
        self._patterns = [
            (re.compile(pattern, re.IGNORECASE), replacement)
            for pattern, replacement in (patterns or self.DEFAULT_PATTERNS)
        ]

    def mask(self, text: str) -> str:
        for pattern, replacement in self._patterns:
            text = pattern.sub(replacement, text)
        return text

    def is_sensitive_key(self, key: str) -> bool:
        return bool(self.SENSITIVE_KEY.search(key)) and not self.COUNTER_KEY.search(key)

    def mask_value(self, value: Any) -> Any:
        """Mask strings, mappings and sequences recursively."""
        if isinstance(value, str):
            return self.mask(value)
        if isinstance(value, dict):
            return self.mask_dict(value)
        if isinstance(value, (list, tuple)):
            return type(value)(self.mask_value(item) for item in value)
        return value

    def mask_dict(self, data: dict[str, Any]) -> dict[str, Any]:
        return {
            key: _REDACTED if self.is_sensitive_key(str(key)) else self.mask_value(value)
            for key, value in data.items()
        }


class _StructuredFormatter(logging.Formatter):
    """Collects the masked message, fields and context of a record."""

    def __init__(self, masker: SensitiveDataMasker | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._masker = masker or SensitiveDataMasker()

    def _message(self, record: logging.LogRecord) -> str:
        return self._masker.mask(record.getMessage())

    def _fields(self, record: logging.LogRecord) -> dict[str, Any]:
        fields = getattr(record, "extra_fields", None)
        return self._masker.mask_dict(fields) if fields else {}

    def _context(self) -> dict[str, Any]:
        return self._masker.mask_dict(get_log_context().to_dict())


class JsonFormatter(_StructuredFormatter):
    """One JSON object per record.

    Fields are merged into the top level; the call context is nested under
    ``context``.
    """

    def __init__(self, masker: SensitiveDataMasker | None = None, include_timestamp: bool = True) -> None:
        super().__init__(masker)
        self._include_timestamp = include_timestamp

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {}
        if self._include_timestamp:
            created = time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created))
            data["timestamp"] = f"{created}.{int(record.msecs):03d}Z"
        data["level"] = record.levelname
        data["logger"] = record.name
        data["message"] = self._message(record)

        if context := self._context():
            data["context"] = context
        data.update(self._fields(record))
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)

        return json.dumps(data, default=str)


class TextFormatter(_StructuredFormatter):
    """``time | LEVEL | logger | message | field=value ... | context=value ...``"""

    def __init__(self, masker: SensitiveDataMasker | None = None, include_context: bool = True) -> None:
        super().__init__(masker, datefmt="%Y-%m-%d %H:%M:%S")
        self._include_context = include_context

    def format(self, record: logging.LogRecord) -> str:
        parts = [
            self.formatTime(record, self.datefmt),
            f"{record.levelname:<8}",
            record.name,
            self._message(record),
        ]
        if fields := self._fields(record):
            parts.append(" ".join(f"{key}={value}" for key, value in fields.items()))
        if self._include_context and (context := self._context()):
            parts.append(" ".join(f"{key}={value}" for key, value in context.items()))

        text = " | ".join(parts)
        if record.exc_info:
            text = f"{text}\n{self.formatException(record.exc_info)}"
        return text


class ModelFusionLogger:
    """Logger that accepts structured keyword fields.

    Loggers are created once per name and share one handler. They do not
    propagate to the root logger.

    Example:
        >>> logger = get_logger("modelfusion.api.post")
        >>> logger.debug("POST request", url="https://api.openai.com/v1/embeddings")
    """

    _loggers: ClassVar[dict[str, logging.Logger]] = {}
    _handler: ClassVar[logging.Handler | None] = None
    _level: ClassVar[LogLevel] = LogLevel.from_env()

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    @classmethod
    def _create_handler(
        cls,
        format: str | None = None,
        stream: Any = None,
        masker: SensitiveDataMasker | None = None,
    ) -> logging.Handler:
        format = format or os.getenv("MODELFUSION_LOG_FORMAT", "text")
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(
            JsonFormatter(masker=masker) if format == "json" else TextFormatter(masker=masker)
        )
        return handler

    @classmethod
    def configure(
        cls,
        level: LogLevel = LogLevel.INFO,
        format: str | None = None,
        stream: Any = None,
        masker: SensitiveDataMasker | None = None,
    ) -> None:
        """Replace the handler and level of every modelfusion logger.

        Args:
            level: Log level
            format: 'json' or 'text' (default from ``MODELFUSION_LOG_FORMAT``)
            stream: Output stream (default: stderr)
            masker: Masker used by the formatter
        """
        cls._level = level
        cls._handler = cls._create_handler(format, stream, masker)
        for logger in cls._loggers.values():
            cls._attach(logger)

    @classmethod
    def _attach(cls, logger: logging.Logger) -> None:
        if cls._handler is None:
            cls._handler = cls._create_handler()
        logger.handlers.clear()
        logger.addHandler(cls._handler)
        logger.setLevel(cls._level.to_logging_level())
        logger.propagate = False

    @classmethod
    def get_logger(cls, name: str) -> ModelFusionLogger:
        if name not in cls._loggers:
            logger = logging.getLogger(name)
            cls._attach(logger)
            cls._loggers[name] = logger
        return cls(cls._loggers[name])

    @property
    def name(self) -> str:
        return self._logger.name

    def _log(self, level: int, msg: str, exc_info: bool = False, **fields: Any) -> None:
        if self._logger.isEnabledFor(level):
            self._logger.log(level, msg, exc_info=exc_info, extra={"extra_fields": fields})

    def debug(self, msg: str, **fields: Any) -> None:
        self._log(logging.DEBUG, msg, **fields)

    def info(self, msg: str, **fields: Any) -> None:
        self._log(logging.INFO, msg, **fields)

    def warning(self, msg: str, **fields: Any) -> None:
        self._log(logging.WARNING, msg, **fields)

    def error(self, msg: str, exc_info: bool = False, **fields: Any) -> None:
        self._log(logging.ERROR, msg, exc_info=exc_info, **fields)

    def exception(self, msg: str, **fields: Any) -> None:
        """Log an error with the current traceback."""
        self._log(logging.ERROR, msg, exc_info=True, **fields)


def get_logger(name: str) -> ModelFusionLogger:
    """Get the modelfusion logger for ``name`` (usually the module name)."""
    return ModelFusionLogger.get_logger(name)
