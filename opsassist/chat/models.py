"""
Chat Data Models

Message types exchanged with the model backend, tool definitions and tool
results, and the turn-level result types of the orchestration engine.
All strongly typed with Pydantic; the wire shapes are the OpenAI
chat-completions shapes the bound model expects for tool calling.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

# ==============================================================================
# CORE CHAT MESSAGES (LLM API Types)
# ==============================================================================


class SystemMessage(BaseModel):
    """System message for setting context."""

    model_config = ConfigDict(frozen=True)

    role: Literal["system"] = "system"
    content: str


class UserMessage(BaseModel):
    """User message."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user"] = "user"
    content: str


class FunctionCall(BaseModel):
    """Function call within a tool call."""

    model_config = ConfigDict(frozen=True)

    name: str
    arguments: str = Field(default="{}")  # JSON string


class ToolCall(BaseModel):
    """Tool call requested by the model."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: Literal["function"] = "function"
    function: FunctionCall

    @property
    def name(self) -> str:
        return self.function.name

    def parsed_arguments(self) -> dict[str, Any]:
        """Decode the JSON arguments string.

        Raises:
            ValueError: If the arguments are not a JSON object.
        """
        args = json.loads(self.function.arguments or "{}")
        if not isinstance(args, dict):
            raise ValueError(
                f"Tool arguments must be a JSON object, got {type(args).__name__}"
            )
        return args


class AssistantMessage(BaseModel):
    """Assistant message with optional tool calls."""

    model_config = ConfigDict(frozen=True)

    role: Literal["assistant"] = "assistant"
    content: str | None = None
    tool_calls: list[ToolCall] | None = None

    @field_validator("tool_calls")
    @classmethod
    def validate_tool_calls(cls, v: list[ToolCall] | None) -> list[ToolCall] | None:
        """Convert empty tool_calls list to None to avoid API errors."""
        if v is not None and len(v) == 0:
            return None
        return v

    @property
    def requested_calls(self) -> list[ToolCall]:
        return list(self.tool_calls or [])

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AssistantMessage:
        """Create AssistantMessage from a chat-completions message dict."""
        tool_calls = None
        if data.get("tool_calls"):
            tool_calls = [
                ToolCall(
                    id=tc["id"],
                    type=tc.get("type", "function"),
                    function=FunctionCall(
                        name=tc["function"]["name"],
                        arguments=tc["function"].get("arguments") or "{}",
                    ),
                )
                for tc in data["tool_calls"]
            ]

        return cls(
            content=data.get("content"),
            tool_calls=tool_calls,
        )


class ToolMessage(BaseModel):
    """Tool response message."""

    model_config = ConfigDict(frozen=True)

    role: Literal["tool"] = "tool"
    content: str
    tool_call_id: str


# Union of all message types for conversation
ChatCompletionMessage = Annotated[
    SystemMessage | UserMessage | AssistantMessage | ToolMessage,
    Field(discriminator="role"),
]

_message_adapter: TypeAdapter[ChatCompletionMessage] = TypeAdapter(ChatCompletionMessage)


def message_from_dict(data: dict[str, Any]) -> ChatCompletionMessage:
    """Rebuild a typed message from its stored or wire dict form."""
    return _message_adapter.validate_python(data)


def message_to_dict(message: ChatCompletionMessage) -> dict[str, Any]:
    """Wire/storage form of a message, omitting unset optional fields."""
    return message.model_dump(exclude_none=True)


# ==============================================================================
# TOOL DEFINITIONS AND RESULTS
# ==============================================================================


class ToolFunctionDefinition(BaseModel):
    """Tool function definition."""

    name: str
    description: str
    parameters: dict[str, Any]  # JSON schema of the tool's input model


class ToolDefinition(BaseModel):
    """Complete tool definition for OpenAI API."""

    type: Literal["function"] = "function"
    function: ToolFunctionDefinition


class ToolResult(BaseModel):
    """Outcome of a single tool invocation."""

    tool_call_id: str
    content: str
    is_error: bool = False

    def to_message(self) -> ToolMessage:
        return ToolMessage(tool_call_id=self.tool_call_id, content=self.content)


class LLMResponseData(BaseModel):
    """Structured LLM response data."""

    message: AssistantMessage
    finish_reason: str | None = None
    index: int = 0
    model: str


# ==============================================================================
# TURN RESULTS
# ==============================================================================


class TurnState(str, Enum):
    """States of the per-turn agent/tool loop."""

    AWAITING_MODEL = "awaiting_model"
    EXECUTING_TOOLS = "executing_tools"
    DONE = "done"
    LOOP_LIMIT = "loop_limit"


class TurnResult(BaseModel):
    """Everything a finished turn produced."""

    thread_id: str
    outcome: TurnState
    response: str | dict[str, Any]
    messages: list[ChatCompletionMessage] = Field(default_factory=list)
    hops: int = 0


def normalize_response(content: str | None) -> str | dict[str, Any]:
    """
    Turn the final assistant content into the caller-facing response.

    Content that parses as a JSON object is returned as a dict; anything else
    (prose, JSON arrays, JSON scalars) is returned as the raw text.
    """
    text = content or ""
    try:
        parsed = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return text
    if isinstance(parsed, dict):
        return parsed
    return text
