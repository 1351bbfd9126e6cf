#!/usr/bin/env python3
"""
Tests for the tool execution step and the turn router.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import BaseModel

from opsassist.chat import ToolExecutor
from opsassist.chat.models import AssistantMessage, ToolResult, TurnState
from opsassist.chat.router import is_terminal, route_after_agent, route_after_tools
from opsassist.tools import ToolRegistry, ToolSpec
from helpers import answer, calls_message, tool_call


class DelayInput(BaseModel):
    label: str
    delay: float = 0.0


def delay_registry(finished: list[str]) -> ToolRegistry:
    async def delayed_echo(args: DelayInput):
        await asyncio.sleep(args.delay)
        finished.append(args.label)
        return args.label

    registry = ToolRegistry()
    registry.register(ToolSpec("echo", "Echo after a delay.", DelayInput, delayed_echo))
    return registry


async def test_results_are_index_aligned_with_calls():
    print("🧪 Testing result ordering...")
    finished: list[str] = []
    executor = ToolExecutor(delay_registry(finished))
    calls = [
        tool_call("c1", "echo", {"label": "slow", "delay": 0.05}),
        tool_call("c2", "echo", {"label": "fast"}),
        tool_call("c3", "echo", {"label": "medium", "delay": 0.02}),
    ]

    results = await executor.execute_tool_calls(calls)

    # completion order differs from request order
    assert finished == ["fast", "medium", "slow"]
    assert [r.tool_call_id for r in results] == ["c1", "c2", "c3"]
    assert [r.content for r in results] == ["slow", "fast", "medium"]
    print("✅ Results follow call order")


async def test_calls_run_concurrently():
    started = asyncio.Event()
    release = asyncio.Event()

    class Empty(BaseModel):
        pass

    async def first(_: Empty):
        started.set()
        await release.wait()
        return "first"

    async def second(_: Empty):
        # only reachable while first() is still waiting
        await started.wait()
        release.set()
        return "second"

    registry = ToolRegistry()
    registry.register_all(
        [ToolSpec("first", "a", Empty, first), ToolSpec("second", "b", Empty, second)]
    )

    results = await asyncio.wait_for(
        ToolExecutor(registry).execute_tool_calls(
            [tool_call("c1", "first"), tool_call("c2", "second")]
        ),
        timeout=2,
    )

    assert [r.content for r in results] == ["first", "second"]


async def test_sequential_mode():
    finished: list[str] = []
    executor = ToolExecutor(delay_registry(finished), {"parallel_tool_calls": False})

    await executor.execute_tool_calls(
        [
            tool_call("c1", "echo", {"label": "slow", "delay": 0.03}),
            tool_call("c2", "echo", {"label": "fast"}),
        ]
    )

    assert finished == ["slow", "fast"]


async def test_bad_arguments_become_error_results():
    finished: list[str] = []
    executor = ToolExecutor(delay_registry(finished))

    results = await executor.execute_tool_calls(
        [
            tool_call("c1", "echo", "{not json"),
            tool_call("c2", "echo", "[1, 2]"),
            tool_call("c3", "echo", {"label": "ok"}),
            tool_call("c4", "missing", {}),
        ]
    )

    assert [r.is_error for r in results] == [True, True, False, True]
    assert "Malformed JSON" in results[0].content
    assert results[2].content == "ok"
    assert finished == ["ok"]
    assert all(r.to_message().tool_call_id == f"c{i}" for i, r in enumerate(results, start=1))


async def test_registry_receives_decoded_arguments():
    registry = MagicMock()
    registry.invoke = AsyncMock(
        return_value=ToolResult(tool_call_id="c1", content='{"id": "s1"}')
    )
    executor = ToolExecutor(registry)

    results = await executor.execute_tool_calls(
        [
            tool_call("c1", "getStaffMember", {"id": "s1"}),
            tool_call("c2", "getStaffMember", "{broken"),
        ]
    )

    registry.invoke.assert_awaited_once_with("getStaffMember", {"id": "s1"}, tool_call_id="c1")
    assert results[0].content == '{"id": "s1"}'
    assert results[1].is_error


def test_router_transitions():
    with_calls = calls_message(tool_call("c1", "echo", {"label": "x"}))

    assert route_after_agent(answer("done"), hops=0, max_hops=3) is TurnState.DONE
    assert route_after_agent(with_calls, hops=2, max_hops=3) is TurnState.EXECUTING_TOOLS
    assert route_after_agent(with_calls, hops=3, max_hops=3) is TurnState.LOOP_LIMIT
    # a final answer is accepted even at the cap
    assert route_after_agent(AssistantMessage(content="ok"), hops=3, max_hops=3) is TurnState.DONE
    assert route_after_tools() is TurnState.AWAITING_MODEL

    assert is_terminal(TurnState.DONE)
    assert is_terminal(TurnState.LOOP_LIMIT)
    assert not is_terminal(TurnState.EXECUTING_TOOLS)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
