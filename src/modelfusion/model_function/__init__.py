"""
Model functions - models, the call lifecycle and the public functions.
"""

from modelfusion.model_function import json_structure_prompt, json_tool_call_prompt, text_prompt
from modelfusion.model_function.embed import EmbeddingModel, Vector, embed, embed_many
from modelfusion.model_function.execute_call import (
    FunctionCall,
    ModelCallResult,
    StreamCallResult,
    execute_standard_call,
    execute_stream_call,
)
from modelfusion.model_function.execute_function import execute_function
from modelfusion.model_function.execute_tool import UseToolResult, execute_tool, use_tool
from modelfusion.model_function.generate_image import (
    ImageGenerationFullResponse,
    ImageGenerationModel,
    ImageGenerationModelSettings,
    generate_image,
)
from modelfusion.model_function.generate_speech import (
    SpeechGenerationModel,
    StreamingSpeechGenerationModel,
    generate_speech,
    stream_speech,
)
from modelfusion.model_function.generate_text import (
    StreamTextFullResponse,
    TextGenerationFullResponse,
    generate_text,
    stream_text,
)
from modelfusion.model_function.model import (
    CallOptions,
    Model,
    ModelCallMetadata,
    ModelResponse,
    ModelSettings,
)
from modelfusion.model_function.options import FunctionOptions
from modelfusion.model_function.prompt_template import (
    ChatMessage,
    ChatPrompt,
    InstructionPrompt,
    PromptTemplateTextGenerationModel,
    TextGenerationPromptTemplate,
    validate_chat_prompt,
)
from modelfusion.model_function.structure import (
    StructureFromTextGenerationModel,
    StructureFromTextPromptTemplate,
    StructureGenerationModel,
    generate_structure,
)
from modelfusion.model_function.text_generation_model import (
    TextGenerationModel,
    TextGenerationModelSettings,
    TextGenerationResult,
)
from modelfusion.model_function.tool import Tool, ToolCall, ToolDefinition
from modelfusion.model_function.tool_call import (
    TextGenerationToolCallModel,
    ToolCallGenerationModel,
    ToolCallPromptTemplate,
    generate_tool_call,
)
from modelfusion.model_function.transcribe import AudioData, TranscriptionModel, transcribe

__all__ = [
    "AudioData",
    "CallOptions",
    "ChatMessage",
    "ChatPrompt",
    "EmbeddingModel",
    "FunctionCall",
    "FunctionOptions",
    "ImageGenerationFullResponse",
    "ImageGenerationModel",
    "ImageGenerationModelSettings",
    "InstructionPrompt",
    "Model",
    "ModelCallMetadata",
    "ModelCallResult",
    "ModelResponse",
    "ModelSettings",
    "PromptTemplateTextGenerationModel",
    "SpeechGenerationModel",
    "StreamCallResult",
    "StreamTextFullResponse",
    "StreamingSpeechGenerationModel",
    "StructureFromTextGenerationModel",
    "StructureFromTextPromptTemplate",
    "StructureGenerationModel",
    "TextGenerationFullResponse",
    "TextGenerationModel",
    "TextGenerationModelSettings",
    "TextGenerationPromptTemplate",
    "TextGenerationResult",
    "TextGenerationToolCallModel",
    "Tool",
    "ToolCall",
    "ToolCallGenerationModel",
    "ToolCallPromptTemplate",
    "ToolDefinition",
    "TranscriptionModel",
    "UseToolResult",
    "Vector",
    "embed",
    "embed_many",
    "execute_function",
    "execute_standard_call",
    "execute_stream_call",
    "execute_tool",
    "generate_image",
    "generate_speech",
    "generate_structure",
    "generate_text",
    "generate_tool_call",
    "json_structure_prompt",
    "json_tool_call_prompt",
    "stream_speech",
    "stream_text",
    "text_prompt",
    "transcribe",
    "use_tool",
    "validate_chat_prompt",
]
