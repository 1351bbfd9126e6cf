"""Tool Registry

Single source of truth for the operations the model may request:
- Holds named tool specs whose Pydantic input model doubles as the schema
- Emits OpenAI-compatible tool definitions on demand
- Validates arguments centrally before dispatching to the handler
- Converts every tool-level failure into an error-flagged ToolResult so a
  failing tool never crashes the conversation
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import BaseModel, ValidationError
from pydantic_core import to_jsonable_python

from opsassist.chat.errors import (
    DuplicateToolError,
    SchemaValidationError,
    ToolHandlerError,
    UnknownToolError,
)
from opsassist.chat.models import ToolDefinition, ToolFunctionDefinition, ToolResult

logger = logging.getLogger(__name__)

ToolHandler = Callable[[Any], Any | Awaitable[Any]]

EMPTY_RESULT = "✓ done"


class ToolSpec:
    """A named, schema-described operation backed by a handler."""

    def __init__(
        self,
        name: str,
        description: str,
        input_model: type[BaseModel],
        handler: ToolHandler,
    ):
        self.name = name
        self.description = description
        self.input_model = input_model
        self.handler = handler

    def input_schema(self) -> dict[str, Any]:
        schema = self.input_model.model_json_schema()
        schema.pop("title", None)
        schema.setdefault("properties", {})
        return schema

    def to_definition(self) -> ToolDefinition:
        return ToolDefinition(
            function=ToolFunctionDefinition(
                name=self.name,
                description=self.description,
                parameters=self.input_schema(),
            )
        )


class ToolRegistry:
    """
    Registry of tool specs keyed by name.

    The registry itself is side-effect free bookkeeping; handlers may mutate
    external domain state.
    """

    def __init__(self, tool_timeout: float | None = None) -> None:
        self._tools: dict[str, ToolSpec] = {}
        self.tool_timeout = tool_timeout

    def register(self, tool: ToolSpec) -> None:
        if tool.name in self._tools:
            raise DuplicateToolError(tool.name)
        self._tools[tool.name] = tool
        logger.debug("Registered tool '%s'", tool.name)

    def register_all(self, tools: list[ToolSpec]) -> None:
        for tool in tools:
            self.register(tool)

    def __contains__(self, tool_name: object) -> bool:
        return tool_name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    @property
    def tool_names(self) -> list[str]:
        return list(self._tools)

    def get_tool(self, tool_name: str) -> ToolSpec:
        tool = self._tools.get(tool_name)
        if tool is None:
            raise UnknownToolError(tool_name)
        return tool

    def describe_all(self) -> list[ToolDefinition]:
        """Build the OpenAI tools list from the current registry."""
        return [tool.to_definition() for tool in self._tools.values()]

    def validate(self, tool_name: str, arguments: dict[str, Any]) -> BaseModel:
        """Validate arguments against the tool's input model.

        Raises:
            UnknownToolError: If no such tool is registered.
            SchemaValidationError: Listing every violated field.
        """
        tool = self.get_tool(tool_name)
        try:
            return tool.input_model.model_validate(arguments)
        except ValidationError as e:
            raise SchemaValidationError(
                tool_name,
                [dict(err) for err in e.errors(include_url=False, include_input=False)],
            ) from e
        except Exception as e:
            # validators raising anything but ValueError escape pydantic unwrapped
            raise SchemaValidationError(
                tool_name, [{"loc": (), "msg": f"{type(e).__name__}: {e}"}]
            ) from e

    async def invoke(
        self, tool_name: str, arguments: dict[str, Any], tool_call_id: str = ""
    ) -> ToolResult:
        """Validate, dispatch and wrap the outcome of one tool call."""
        try:
            tool = self.get_tool(tool_name)
            validated = self.validate(tool_name, arguments)
            result = await self._call_handler(tool, validated)
        except (UnknownToolError, SchemaValidationError, ToolHandlerError) as e:
            logger.warning("Tool '%s' returned an error result: %s", tool_name, e)
            return ToolResult(tool_call_id=tool_call_id, content=f"Error: {e}", is_error=True)

        return ToolResult(tool_call_id=tool_call_id, content=self.serialize_result(result))

    async def _call_handler(self, tool: ToolSpec, arguments: BaseModel) -> Any:
        try:
            async with asyncio.timeout(self.tool_timeout):
                result = tool.handler(arguments)
                if inspect.isawaitable(result):
                    result = await result
                return result
        except TimeoutError as e:
            raise ToolHandlerError(
                tool.name, TimeoutError(f"timed out after {self.tool_timeout}s")
            ) from e
        except Exception as e:
            raise ToolHandlerError(tool.name, e) from e

    @staticmethod
    def serialize_result(result: Any) -> str:
        """Render a handler result as text for the conversation."""
        if result is None:
            return EMPTY_RESULT
        if isinstance(result, str):
            return result
        if isinstance(result, BaseModel):
            return result.model_dump_json(by_alias=True)
        return json.dumps(to_jsonable_python(result, by_alias=True))
