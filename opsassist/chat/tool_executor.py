"""
Tool Execution Handler

Runs the tool calls of one assistant message:
- Decodes the JSON arguments of each call
- Dispatches every call through the tool registry
- Returns results aligned with the order of the requested calls

No failure inside a tool call escapes this module; each one becomes an
error-flagged result the model can react to.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from opsassist.chat.logging_utils import (
    log_tool_args_error,
    log_tool_arguments,
    log_tool_execution_error,
    log_tool_execution_start,
    log_tool_execution_success,
)

from .models import ToolCall, ToolResult

if TYPE_CHECKING:
    from opsassist.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class ToolExecutor:
    """Handles tool execution against a ToolRegistry."""

    def __init__(
        self,
        registry: ToolRegistry,
        chat_conf: dict[str, Any] | None = None,
    ):
        self.registry = registry
        self.chat_conf = chat_conf or {}

    @property
    def parallel(self) -> bool:
        return bool(self.chat_conf.get("parallel_tool_calls", True))

    async def execute_tool_calls(self, calls: list[ToolCall]) -> list[ToolResult]:
        """
        Execute the requested tool calls.

        Calls are independent of each other and run concurrently unless
        ``parallel_tool_calls`` is disabled. Either way the returned results
        are index-aligned with ``calls``.
        """
        logger.info("→ Tools: executing %d tool calls", len(calls))

        if self.parallel:
            results = await asyncio.gather(
                *(self._execute_one(call, i, len(calls)) for i, call in enumerate(calls))
            )
        else:
            results = [await self._execute_one(call, i, len(calls)) for i, call in enumerate(calls)]

        logger.info("← Tools: completed all tool executions")
        return list(results)

    async def _execute_one(self, call: ToolCall, index: int, total: int) -> ToolResult:
        tool_name = call.name

        try:
            args = call.parsed_arguments()
        except ValueError as e:
            log_tool_args_error(tool_name, e)
            return ToolResult(
                tool_call_id=call.id,
                content=f"Error: Malformed JSON arguments for '{tool_name}': {e}",
                is_error=True,
            )

        log_tool_arguments(
            tool_name,
            args,
            f"call {index + 1}/{total}",
            self.chat_conf.get("logging", {}).get("tool_arguments_truncate", 500),
        )
        log_tool_execution_start(tool_name, index, total)

        result = await self.registry.invoke(tool_name, args, tool_call_id=call.id)

        if result.is_error:
            log_tool_execution_error(tool_name, result.content)
        else:
            log_tool_execution_success(tool_name, len(result.content))
        return result
