"""错误体系：提供结构化错误类型。

Error hierarchy for modelfusion.
"""

from modelfusion.errors.base import (
    AbortError,
    ApiCallError,
    ErrorContext,
    InvalidPromptError,
    JSONParseError,
    LoadAPIKeyError,
    ModelFusionError,
    RetryError,
    RetryReason,
    TypeValidationError,
)
from modelfusion.errors.classification import (
    ErrorClass,
    classify_http_status,
    extract_error_message,
    is_retryable,
)
from modelfusion.errors.generation import (
    NoSuchToolDefinitionError,
    StructureParseError,
    StructureValidationError,
    ToolCallArgumentsValidationError,
    ToolCallGenerationError,
    ToolExecutionError,
)

__all__ = [
    "AbortError",
    "ApiCallError",
    # Classification
    "ErrorClass",
    "ErrorContext",
    "InvalidPromptError",
    "JSONParseError",
    "LoadAPIKeyError",
    # Base errors
    "ModelFusionError",
    "NoSuchToolDefinitionError",
    "RetryError",
    "RetryReason",
    # Generation errors
    "StructureParseError",
    "StructureValidationError",
    "ToolCallArgumentsValidationError",
    "ToolCallGenerationError",
    "ToolExecutionError",
    "TypeValidationError",
    "classify_http_status",
    "extract_error_message",
    "is_retryable",
]
