"""
Prompt templates for models that take plain text prompts.

Example:
    >>> from modelfusion.model_function import text_prompt
    >>> model = completion_model.with_prompt_template(text_prompt.instruction())
"""

from __future__ import annotations

from modelfusion.model_function.prompt_template import (
    ChatPrompt,
    InstructionPrompt,
    TextGenerationPromptTemplate,
    validate_chat_prompt,
)


def text() -> TextGenerationPromptTemplate[str, str]:
    """Pass a text prompt through unchanged."""
    return TextGenerationPromptTemplate(format=lambda prompt: prompt)


def instruction() -> TextGenerationPromptTemplate[InstructionPrompt, str]:
    """Format an instruction prompt as text.

    The system message and the instruction are separated by blank lines; the
    response prefix (if any) ends the prompt.
    """

    def format_prompt(prompt: InstructionPrompt) -> str:
        text = ""
        if prompt.system is not None:
            text += f"{prompt.system}\n\n"
        text += f"{prompt.instruction}\n\n"
        if prompt.response_prefix is not None:
            text += prompt.response_prefix
        return text

    return TextGenerationPromptTemplate(format=format_prompt)


def chat(
    *,
    user: str = "user",
    assistant: str = "assistant",
    system: str | None = None,
) -> TextGenerationPromptTemplate[ChatPrompt, str]:
    """Format a chat prompt as a role-labelled transcript.

    Args:
        user: Label of user messages
        assistant: Label of assistant messages
        system: Label of the system message (None for no label)

    Returns:
        Template that stops generation when the model starts a user turn
    """

    def format_prompt(prompt: ChatPrompt) -> str:
        validate_chat_prompt(prompt)

        text = ""
        if prompt.system is not None:
            label = f"{system}:" if system is not None else ""
            text += f"{label}{prompt.system}\n\n"

        for message in prompt.messages:
            label = user if message.role == "user" else assistant
            text += f"{label}:\n{message.content}\n\n"

        text += f"{assistant}:\n"
        return text

    return TextGenerationPromptTemplate(format=format_prompt, stop_sequences=(f"\n{user}:",))
