"""Test helpers: a scripted model client and controller wiring."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

from opsassist.chat import AgentStep, ConversationController, ToolExecutor
from opsassist.chat.models import (
    AssistantMessage,
    ChatCompletionMessage,
    FunctionCall,
    LLMResponseData,
    SystemMessage,
    ToolCall,
    ToolDefinition,
)
from opsassist.history import InMemoryThreadStore
from opsassist.tools import ToolRegistry

Reply = AssistantMessage | Exception
ReplyFn = Callable[[list[ChatCompletionMessage]], AssistantMessage]


def tool_call(call_id: str, name: str, arguments: dict[str, Any] | str | None = None) -> ToolCall:
    if not isinstance(arguments, str):
        arguments = json.dumps(arguments or {})
    return ToolCall(id=call_id, function=FunctionCall(name=name, arguments=arguments))


def calls_message(*calls: ToolCall) -> AssistantMessage:
    return AssistantMessage(tool_calls=list(calls))


def answer(content: str) -> AssistantMessage:
    return AssistantMessage(content=content)


class ScriptedLLM:
    """
    Stand-in for LLMClient.

    Replies come from a list (consumed in order; exceptions are raised) or
    from a function of the history it was called with.
    """

    def __init__(self, replies: list[Reply] | ReplyFn):
        self._replies = replies
        self.calls: list[list[ChatCompletionMessage]] = []
        self.tools_seen: list[list[ToolDefinition] | None] = []

    async def get_response_with_tools(
        self,
        messages: list[ChatCompletionMessage],
        tools: list[ToolDefinition] | None = None,
    ) -> LLMResponseData:
        self.calls.append(list(messages))
        self.tools_seen.append(tools)

        if callable(self._replies):
            reply: Reply = self._replies(list(messages))
        else:
            if not self._replies:
                raise AssertionError("ScriptedLLM ran out of replies")
            reply = self._replies.pop(0)

        if isinstance(reply, Exception):
            raise reply
        return LLMResponseData(message=reply, finish_reason="stop", model="scripted")


def make_controller(
    llm: Any,
    registry: ToolRegistry,
    store: InMemoryThreadStore | None = None,
    max_tool_hops: int = 25,
    turn_timeout: float | None = None,
    model_timeout: float | None = None,
    chat_conf: dict[str, Any] | None = None,
) -> ConversationController:
    return ConversationController(
        agent=AgentStep(llm, registry, chat_conf, model_timeout=model_timeout),
        executor=ToolExecutor(registry, chat_conf),
        store=store or InMemoryThreadStore([SystemMessage(content="You are a test assistant.")]),
        max_tool_hops=max_tool_hops,
        turn_timeout=turn_timeout,
    )
