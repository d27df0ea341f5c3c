"""modelfusion: a unified interface over AI model providers.

Provider-neutral model functions (generate_text, stream_text, embed,
embed_many, transcribe, generate_speech, stream_speech, generate_image,
generate_structure, generate_tool_call, execute_tool, use_tool) on top of a
shared call pipeline: retry, throttle, function events and streaming deltas.
"""
from __future__ import annotations

from modelfusion._features import HAS_KEYRING, HAS_TOKENIZER, require_extra
from modelfusion.api import (
    ApiConfiguration,
    BaseUrlApiConfiguration,
    load_api_key,
    post_json_to_api,
    post_to_api,
)
from modelfusion.cache import Cache, FileCache, MemoryCache
from modelfusion.errors import (
    AbortError,
    ApiCallError,
    InvalidPromptError,
    JSONParseError,
    LoadAPIKeyError,
    ModelFusionError,
    NoSuchToolDefinitionError,
    RetryError,
    StructureParseError,
    StructureValidationError,
    ToolCallArgumentsValidationError,
    ToolCallGenerationError,
    ToolExecutionError,
    TypeValidationError,
)
from modelfusion.model_function import (
    ChatMessage,
    ChatPrompt,
    FunctionOptions,
    InstructionPrompt,
    Tool,
    ToolCall,
    embed,
    embed_many,
    execute_function,
    execute_tool,
    generate_image,
    generate_speech,
    generate_structure,
    generate_text,
    generate_tool_call,
    json_structure_prompt,
    json_tool_call_prompt,
    stream_speech,
    stream_text,
    text_prompt,
    transcribe,
    use_tool,
)
from modelfusion.resilience import (
    call_with_retry_and_throttle,
    retry_never,
    retry_with_exponential_backoff,
    throttle_max_concurrency,
    throttle_off,
    throttle_rate_limit,
)
from modelfusion.run import (
    AbortController,
    AbortSignal,
    FunctionLogging,
    Run,
    set_global_function_logging,
    set_global_function_observers,
    with_run,
)
from modelfusion.schema import (
    json_schema,
    parse_json,
    pydantic_schema,
    safe_parse_json,
    safe_validate_types,
    unchecked_schema,
    validate_types,
)
from modelfusion.streaming import AsyncQueue, Delta

__version__ = "0.1.0"

__all__ = [
    # Feature flags
    "HAS_KEYRING",
    "HAS_TOKENIZER",
    "require_extra",
    # Run
    "AbortController",
    "AbortSignal",
    # Errors
    "AbortError",
    "ApiCallError",
    # API
    "ApiConfiguration",
    # Streaming
    "AsyncQueue",
    "BaseUrlApiConfiguration",
    # Cache
    "Cache",
    # Prompts
    "ChatMessage",
    "ChatPrompt",
    "Delta",
    "FileCache",
    "FunctionLogging",
    # Model functions
    "FunctionOptions",
    "InstructionPrompt",
    "InvalidPromptError",
    "JSONParseError",
    "LoadAPIKeyError",
    "MemoryCache",
    "ModelFusionError",
    "NoSuchToolDefinitionError",
    "RetryError",
    "Run",
    "StructureParseError",
    "StructureValidationError",
    # Tools
    "Tool",
    "ToolCall",
    "ToolCallArgumentsValidationError",
    "ToolCallGenerationError",
    "ToolExecutionError",
    "TypeValidationError",
    # Version
    "__version__",
    # Resilience
    "call_with_retry_and_throttle",
    "embed",
    "embed_many",
    "execute_function",
    "execute_tool",
    "generate_image",
    "generate_speech",
    "generate_structure",
    "generate_text",
    "generate_tool_call",
    "json_schema",
    "json_structure_prompt",
    "json_tool_call_prompt",
    "load_api_key",
    # Schema
    "parse_json",
    "post_json_to_api",
    "post_to_api",
    "pydantic_schema",
    "retry_never",
    "retry_with_exponential_backoff",
    "safe_parse_json",
    "safe_validate_types",
    "set_global_function_logging",
    "set_global_function_observers",
    "stream_speech",
    "stream_text",
    "text_prompt",
    "throttle_max_concurrency",
    "throttle_off",
    "throttle_rate_limit",
    "transcribe",
    "unchecked_schema",
    "use_tool",
    "validate_types",
    "with_run",
]
