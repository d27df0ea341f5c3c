"""
Telemetry module - structured logging with context and secret masking.
"""

from modelfusion.telemetry.logger import (
    JsonFormatter,
    LogContext,
    LogLevel,
    ModelFusionLogger,
    SensitiveDataMasker,
    TextFormatter,
    clear_log_context,
    get_log_context,
    get_logger,
    reset_log_context,
    set_log_context,
)

__all__ = [
    "JsonFormatter",
    "LogContext",
    "LogLevel",
    "ModelFusionLogger",
    "SensitiveDataMasker",
    "TextFormatter",
    "clear_log_context",
    "get_log_context",
    "get_logger",
    "reset_log_context",
    "set_log_context",
]
