"""
Assistant Error Taxonomy

Only ModelUnavailableError (and its TurnTimeoutError subtype) and
LoopLimitExceeded end a turn with a failure visible to the end user. Tool
level errors are turned into error-flagged tool results by the registry and
fed back to the model.
"""

from __future__ import annotations

from typing import Any

MODEL_UNAVAILABLE_MESSAGE = "I'm unable to process your request at this time."
LOOP_LIMIT_MESSAGE = "I couldn't complete this request."


class AssistantError(Exception):
    """Base class for all assistant errors."""

    user_message: str = "Something went wrong while processing your request."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.user_message)


class ModelUnavailableError(AssistantError):
    """Model backend missing, misconfigured, failing or timing out."""

    user_message = MODEL_UNAVAILABLE_MESSAGE


class TurnTimeoutError(ModelUnavailableError):
    """The overall turn timeout expired before a final answer was produced."""


class LoopLimitExceeded(AssistantError):
    """The agent/tool loop hit its iteration cap."""

    user_message = LOOP_LIMIT_MESSAGE

    def __init__(self, max_hops: int) -> None:
        self.max_hops = max_hops
        super().__init__(f"Reached maximum tool call limit ({max_hops})")


class SchemaValidationError(AssistantError):
    """Tool arguments do not satisfy the tool's input schema."""

    def __init__(self, tool_name: str, errors: list[dict[str, Any]]) -> None:
        self.tool_name = tool_name
        self.errors = errors
        self.fields = [
            ".".join(str(part) for part in err.get("loc", ())) or "<root>"
            for err in errors
        ]
        details = "; ".join(
            f"{field}: {err.get('msg', 'invalid')}"
            for field, err in zip(self.fields, errors, strict=True)
        )
        super().__init__(f"Invalid arguments for '{tool_name}': {details}")


class ToolHandlerError(AssistantError):
    """A domain handler raised while executing a tool."""

    def __init__(self, tool_name: str, cause: BaseException) -> None:
        self.tool_name = tool_name
        self.cause = cause
        super().__init__(f"Tool '{tool_name}' failed: {cause}")


class UnknownToolError(AssistantError):
    """The model requested a tool that is not registered."""

    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"Tool '{tool_name}' not found")


class DuplicateToolError(AssistantError):
    """A tool with the same name is already registered."""

    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"Tool '{tool_name}' is already registered")
