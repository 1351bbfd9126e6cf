"""
Agent Step

One model invocation: the full thread history plus the registry's tool
definitions go in, exactly one assistant message comes out (either a set of
tool call requests or a final answer).
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Protocol

from opsassist.chat.errors import ModelUnavailableError
from opsassist.chat.logging_utils import log_llm_reply

from .models import AssistantMessage, ChatCompletionMessage, LLMResponseData, ToolDefinition

if TYPE_CHECKING:
    from opsassist.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class ModelClient(Protocol):
    """Anything that can turn a history plus tools into one assistant reply."""

    async def get_response_with_tools(
        self,
        messages: list[ChatCompletionMessage],
        tools: list[ToolDefinition] | None = None,
    ) -> LLMResponseData: ...


class AgentStep:
    """Binds a model client to a tool registry."""

    def __init__(
        self,
        llm_client: ModelClient,
        registry: ToolRegistry,
        chat_conf: dict[str, Any] | None = None,
        model_timeout: float | None = None,
    ):
        self.llm_client = llm_client
        self.registry = registry
        self.chat_conf = chat_conf or {}
        self.model_timeout = model_timeout

    async def run(
        self, history: list[ChatCompletionMessage], context: str = "LLM response"
    ) -> AssistantMessage:
        """
        Ask the model for the next assistant message.

        Raises:
            ModelUnavailableError: If the model call fails or exceeds its timeout.
        """
        tools = self.registry.describe_all()
        logger.info(
            "→ LLM: requesting response (%d messages, %d tools)", len(history), len(tools)
        )

        try:
            async with asyncio.timeout(self.model_timeout):
                reply = await self.llm_client.get_response_with_tools(history, tools)
        except TimeoutError as e:
            logger.error("LLM call timed out after %ss", self.model_timeout)
            raise ModelUnavailableError(
                f"Model call timed out after {self.model_timeout}s"
            ) from e

        log_llm_reply(reply.model_dump(), context, self.chat_conf)

        message = reply.message
        if message.tool_calls:
            logger.info("← LLM: %d tool calls requested", len(message.tool_calls))
        else:
            logger.info("← LLM: final answer received")
        return message
