"""
Conversation Controller

Entry point of the orchestration engine. One call to ``process_query`` is
one turn:

1. load the thread history (or its seed)
2. alternate Agent Step and Tool Execution Step until the model answers
   without tool calls or the hop cap is reached
3. append everything the turn produced to the thread store in one go
4. normalize the final content (JSON object -> dict, anything else -> text)

Turns on the same thread id are serialized for their whole duration; turns on
different thread ids run independently. A turn that fails with
ModelUnavailableError (including the turn timeout) appends nothing.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from opsassist.chat.errors import LOOP_LIMIT_MESSAGE, LoopLimitExceeded, TurnTimeoutError
from opsassist.history.locks import ThreadLocks
from opsassist.history.repository import ThreadStore

from .agent_step import AgentStep
from .models import (
    AssistantMessage,
    ChatCompletionMessage,
    ToolCall,
    TurnResult,
    TurnState,
    UserMessage,
    normalize_response,
)
from .router import is_terminal, route_after_agent, route_after_tools
from .tool_executor import ToolExecutor

logger = logging.getLogger(__name__)


class ConversationController:
    """Runs turns for one assistant against its thread store."""

    def __init__(
        self,
        agent: AgentStep,
        executor: ToolExecutor,
        store: ThreadStore,
        max_tool_hops: int = 25,
        turn_timeout: float | None = None,
        name: str = "assistant",
    ):
        self.agent = agent
        self.executor = executor
        self.store = store
        self.max_tool_hops = max_tool_hops
        self.turn_timeout = turn_timeout
        self.name = name
        self._locks = ThreadLocks()

    async def process_query(self, thread_id: str, user_message: str) -> str | dict[str, Any]:
        """
        Run one turn and return the normalized final answer.

        Raises:
            ModelUnavailableError: Model failure or turn timeout; nothing persisted.
            LoopLimitExceeded: The hop cap was hit; the thread keeps the
                completed tool rounds and the limit message.
        """
        result = await self.run_turn(thread_id, user_message)
        if result.outcome is TurnState.LOOP_LIMIT:
            raise LoopLimitExceeded(self.max_tool_hops)
        return result.response

    async def run_turn(self, thread_id: str, user_message: str) -> TurnResult:
        async with self._locks.hold(thread_id):
            logger.info("→ %s: turn started on thread %s", self.name, thread_id)
            history = await self.store.load(thread_id)
            turn: list[ChatCompletionMessage] = [UserMessage(content=user_message)]

            try:
                async with asyncio.timeout(self.turn_timeout):
                    outcome, hops, final_content = await self._run_loop(history, turn)
            except TimeoutError as e:
                logger.error(
                    "%s: turn on thread %s exceeded %ss", self.name, thread_id, self.turn_timeout
                )
                raise TurnTimeoutError(f"Turn timed out after {self.turn_timeout}s") from e

            await self.store.append(thread_id, turn)
            logger.info(
                "← %s: turn finished on thread %s (%s, %d tool rounds, %d new messages)",
                self.name,
                thread_id,
                outcome.value,
                hops,
                len(turn),
            )

        return TurnResult(
            thread_id=thread_id,
            outcome=outcome,
            response=normalize_response(final_content),
            messages=turn,
            hops=hops,
        )

    async def _run_loop(
        self,
        history: list[ChatCompletionMessage],
        turn: list[ChatCompletionMessage],
    ) -> tuple[TurnState, int, str | None]:
        """Drive the state machine, appending produced messages to ``turn``."""
        state = TurnState.AWAITING_MODEL
        hops = 0
        final_content: str | None = None
        pending_calls: list[ToolCall] = []

        while not is_terminal(state):
            if state is TurnState.AWAITING_MODEL:
                context = (
                    "Initial LLM response" if hops == 0 else f"Tool call follow-up (hop {hops})"
                )
                message = await self.agent.run([*history, *turn], context)
                state = route_after_agent(message, hops, self.max_tool_hops)

                if state is TurnState.LOOP_LIMIT:
                    # the unanswered tool calls are dropped so the thread stays well-formed
                    logger.warning("Maximum tool hops (%d) reached, stopping", self.max_tool_hops)
                    final_content = LOOP_LIMIT_MESSAGE
                    turn.append(AssistantMessage(content=final_content))
                else:
                    turn.append(message)
                    final_content = message.content
                    pending_calls = message.requested_calls
            else:
                results = await self.executor.execute_tool_calls(pending_calls)
                turn.extend(result.to_message() for result in results)
                hops += 1
                pending_calls = []
                state = route_after_tools()

        return state, hops, final_content

    async def reset(self, thread_id: str) -> None:
        """Clear a thread back to its seed once any running turn on it is done."""
        async with self._locks.hold(thread_id):
            await self.store.reset(thread_id)
