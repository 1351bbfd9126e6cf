"""
Assistant Wiring

Builds the three admin assistants (staff, shifts, table allocations). Each
one gets its own tool registry, a thread store namespace seeded with its
system prompt, an Agent Step and a Conversation Controller. They share the
model client and the domain services.
"""

from __future__ import annotations

import logging

from opsassist.chat import AgentStep, ConversationController, ToolExecutor
from opsassist.chat.agent_step import ModelClient
from opsassist.chat.models import SystemMessage
from opsassist.config import Configuration
from opsassist.domain.models import (
    MAX_TABLE_NUMBER,
    MIN_TABLE_NUMBER,
    SHIFT_STATUSES,
    SHIFT_TYPES,
    STAFF_POSITIONS,
)
from opsassist.domain.services import (
    ShiftService,
    StaffService,
    TableAllocationService,
)
from opsassist.history import create_thread_store
from opsassist.tools import (
    ToolRegistry,
    ToolSpec,
    build_shift_tools,
    build_staff_tools,
    build_table_allocation_tools,
)

logger = logging.getLogger(__name__)

_CONFIRMATION_RULES = """\
If a user asks for information or actions outside of {scope}, politely decline and state your purpose.
If you need more information to fulfil a request, first try to find it from what the user already said or with the list tools; otherwise ask the user for the missing information.
Before creating, updating or deleting anything, show the full record you are about to change and ask the user to confirm."""

STAFF_SYSTEM_PROMPT = f"""\
You are an intelligent AI assistant for managing restaurant staff.
Use the tools at your disposal to answer user queries related to staff.
Staff positions are: {", ".join(STAFF_POSITIONS)}.
When a tool returns a record and you have nothing to add, answer with the record as JSON.

{_CONFIRMATION_RULES.format(scope="staff management")}
For example: "I am about to create a new Waiter: John Doe, john.doe@example.com, tag: JohnnyD. Is this correct?\""""

SHIFTS_SYSTEM_PROMPT = f"""\
You are an intelligent AI assistant for managing restaurant staff shifts.
Use the tools at your disposal to answer user queries related to shifts.
Available shift types are: {", ".join(SHIFT_TYPES)}.
Available shift statuses are: {", ".join(SHIFT_STATUSES)}.

{_CONFIRMATION_RULES.format(scope="shift management")}
For example: "I am about to create a new Morning shift for staff ID 'xyz' from 2024-07-01T09:00 to 2024-07-01T17:00. Is this correct?\""""

TABLE_ALLOCATIONS_SYSTEM_PROMPT = f"""\
You are an intelligent AI assistant for managing restaurant table allocations.
A table allocation assigns tables (numbers {MIN_TABLE_NUMBER}-{MAX_TABLE_NUMBER}) to a waiter for a shift.
Creating an allocation needs shiftId (UUID of an existing shift), tableNumbers (e.g. [1, 2, 5]) and waiterId (UUID of an existing waiter).
If the user gives a shift date or time instead of a shiftId, use 'getShiftsTool' to find the shift.
If the user gives a waiter name or tag instead of a waiterId, use 'getWaitersTool' to find the waiter.
Always confirm the shift (date and time) and the waiter (name and tag) you found before allocating.

{_CONFIRMATION_RULES.format(scope="table allocation management")}"""


def _build_assistant(
    name: str,
    namespace: str,
    system_prompt: str,
    tools: list[ToolSpec],
    llm_client: ModelClient,
    config: Configuration,
) -> ConversationController:
    chat_conf = config.get_chat_service_config()
    timeouts = config.get_timeouts()

    registry = ToolRegistry(tool_timeout=timeouts["tool_timeout_seconds"])
    registry.register_all(tools)

    store = create_thread_store(
        config.get_chat_storage_config(),
        namespace,
        seed=[SystemMessage(content=system_prompt)],
    )

    logger.info("Built %s assistant with %d tools", name, len(registry))
    return ConversationController(
        agent=AgentStep(
            llm_client,
            registry,
            chat_conf,
            model_timeout=timeouts["model_timeout_seconds"],
        ),
        executor=ToolExecutor(registry, chat_conf),
        store=store,
        max_tool_hops=config.get_max_tool_hops(),
        turn_timeout=timeouts["turn_timeout_seconds"],
        name=name,
    )


def build_staff_assistant(
    llm_client: ModelClient, config: Configuration, staff_service: StaffService
) -> ConversationController:
    return _build_assistant(
        "StaffAssistant",
        "staff",
        STAFF_SYSTEM_PROMPT,
        build_staff_tools(staff_service),
        llm_client,
        config,
    )


def build_shifts_assistant(
    llm_client: ModelClient, config: Configuration, shift_service: ShiftService
) -> ConversationController:
    return _build_assistant(
        "ShiftsAssistant",
        "shifts",
        SHIFTS_SYSTEM_PROMPT,
        build_shift_tools(shift_service),
        llm_client,
        config,
    )


def build_table_allocations_assistant(
    llm_client: ModelClient,
    config: Configuration,
    allocation_service: TableAllocationService,
    shift_service: ShiftService,
    staff_service: StaffService,
) -> ConversationController:
    return _build_assistant(
        "TableAllocationsAssistant",
        "table_allocations",
        TABLE_ALLOCATIONS_SYSTEM_PROMPT,
        build_table_allocation_tools(allocation_service, shift_service, staff_service),
        llm_client,
        config,
    )


def build_assistants(
    llm_client: ModelClient,
    config: Configuration,
    staff_service: StaffService,
    shift_service: ShiftService,
    allocation_service: TableAllocationService,
) -> dict[str, ConversationController]:
    """All assistants keyed by their URL segment."""
    return {
        "staff": build_staff_assistant(llm_client, config, staff_service),
        "shifts": build_shifts_assistant(llm_client, config, shift_service),
        "table-allocations": build_table_allocations_assistant(
            llm_client, config, allocation_service, shift_service, staff_service
        ),
    }
