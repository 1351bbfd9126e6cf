#!/usr/bin/env python3
"""
Thread Store Interface and Utilities

This module defines the thread store protocol and the history invariants
shared by every backend.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from opsassist.chat.models import AssistantMessage, ChatCompletionMessage, ToolMessage


class AttributionError(ValueError):
    """A tool message does not answer any earlier assistant tool call."""


def known_tool_call_ids(messages: Sequence[ChatCompletionMessage]) -> set[str]:
    return {
        call.id
        for msg in messages
        if isinstance(msg, AssistantMessage)
        for call in msg.requested_calls
    }


def check_tool_attribution(
    history: Sequence[ChatCompletionMessage],
    new_messages: Sequence[ChatCompletionMessage] = (),
) -> None:
    """
    Verify every tool message links to a preceding assistant tool call.

    Raises:
        AttributionError: naming the first orphaned tool_call_id.
    """
    seen = known_tool_call_ids(history)
    for msg in new_messages:
        if isinstance(msg, AssistantMessage):
            seen.update(call.id for call in msg.requested_calls)
        elif isinstance(msg, ToolMessage) and msg.tool_call_id not in seen:
            raise AttributionError(
                f"Tool message references unknown tool_call_id '{msg.tool_call_id}'"
            )


# ---------- Store interface ----------


@runtime_checkable
class ThreadStore(Protocol):
    """Durable conversation memory keyed by thread id."""

    async def load(self, thread_id: str) -> list[ChatCompletionMessage]:
        """Stored history, or the seed messages if the thread is new."""
        ...

    async def append(self, thread_id: str, messages: Sequence[ChatCompletionMessage]) -> None:
        """Atomically extend the stored history (serialized per thread id)."""
        ...

    async def reset(self, thread_id: str) -> None:
        """Clear history back to the seed."""
        ...

    async def list_threads(self) -> list[str]: ...

    async def close(self) -> None: ...
