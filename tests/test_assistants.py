#!/usr/bin/env python3
"""
Assistant wiring and logging setup tests.
"""

import logging

import pytest

from opsassist.assistants import (
    SHIFTS_SYSTEM_PROMPT,
    STAFF_SYSTEM_PROMPT,
    TABLE_ALLOCATIONS_SYSTEM_PROMPT,
    build_assistants,
)
from opsassist.chat.logging_utils import should_log_feature
from opsassist.chat.models import SystemMessage
from opsassist.config import RUNTIME_CONFIG_ENV, Configuration
from opsassist.domain import (
    InMemoryShiftService,
    InMemoryStaffService,
    InMemoryTableAllocationService,
)
from opsassist.history import InMemoryThreadStore, SQLiteThreadStore
from opsassist.main import configure_logging
from helpers import ScriptedLLM, answer


@pytest.fixture(autouse=True)
def _no_runtime_config(monkeypatch):
    monkeypatch.delenv(RUNTIME_CONFIG_ENV, raising=False)


def build(config: Configuration, llm=None):
    staff = InMemoryStaffService()
    shifts = InMemoryShiftService(staff)
    allocations = InMemoryTableAllocationService(shifts, staff)
    return build_assistants(llm or ScriptedLLM([]), config, staff, shifts, allocations)


def test_each_assistant_gets_its_own_tools_and_prompt():
    assistants = build(Configuration())

    assert sorted(assistants) == ["shifts", "staff", "table-allocations"]
    staff_tools = assistants["staff"].agent.registry.tool_names
    shift_tools = assistants["shifts"].agent.registry.tool_names
    allocation_tools = assistants["table-allocations"].agent.registry.tool_names
    assert "createStaffMember" in staff_tools and "createShift" not in staff_tools
    assert "getShiftStatuses" in shift_tools
    assert {"getShiftsTool", "getWaitersTool"} <= set(allocation_tools)

    assert "Waiter, Chef, Manager, Supervisor" in STAFF_SYSTEM_PROMPT
    assert "Morning, Afternoon, Evening, Night" in SHIFTS_SYSTEM_PROMPT
    assert "1-50" in TABLE_ALLOCATIONS_SYSTEM_PROMPT


async def test_threads_are_seeded_with_the_system_prompt():
    assistants = build(Configuration())

    staff_store = assistants["staff"].store
    assert isinstance(staff_store, InMemoryThreadStore)
    assert await staff_store.load("new") == [SystemMessage(content=STAFF_SYSTEM_PROMPT)]


def test_configuration_flows_into_the_controllers():
    config = Configuration(
        overrides={
            "chat": {
                "service": {
                    "max_tool_hops": 4,
                    "turn_timeout_seconds": 9,
                    "tool_timeout_seconds": 2,
                }
            }
        }
    )
    controller = build(config)["shifts"]

    assert controller.max_tool_hops == 4
    assert controller.turn_timeout == 9.0
    assert controller.agent.registry.tool_timeout == 2.0
    assert controller.agent.model_timeout == 60.0


async def test_sqlite_storage_shares_one_file(tmp_path):
    db_path = str(tmp_path / "threads.db")
    config = Configuration(overrides={"chat": {"storage": {"type": "sqlite", "db_path": db_path}}})
    llm = ScriptedLLM([answer("staff answer"), answer("shift answer")])
    assistants = build(config, llm)

    assert isinstance(assistants["staff"].store, SQLiteThreadStore)
    await assistants["staff"].process_query("same-id", "hello staff")
    await assistants["shifts"].process_query("same-id", "hello shifts")

    staff_history = await assistants["staff"].store.load("same-id")
    shift_history = await assistants["shifts"].store.load("same-id")
    assert [m.content for m in staff_history[1:]] == ["hello staff", "staff answer"]
    assert [m.content for m in shift_history[1:]] == ["hello shifts", "shift answer"]


def test_configure_logging_sets_levels_and_features():
    configure_logging(
        {
            "level": "WARNING",
            "modules": {
                "chat": {"level": "DEBUG", "enable_features": {"llm_replies": True}},
                "history": {"level": "ERROR"},
            },
        }
    )

    assert logging.getLogger("opsassist.chat").level == logging.DEBUG
    assert logging.getLogger("opsassist.history").level == logging.ERROR
    assert should_log_feature("chat", "llm_replies") is True
    assert should_log_feature("chat", "tool_arguments") is False
    assert should_log_feature("clients", "http_requests") is False


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
