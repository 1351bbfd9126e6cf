"""Table allocation tools.

Besides allocation CRUD, the assistant gets read-only access to shifts and
staff so it can resolve a shift date or a waiter name into the ids it needs.
"""

from __future__ import annotations

import uuid

from pydantic import Field

from opsassist.domain.models import CreateTableAllocation, UpdateTableAllocation
from opsassist.domain.services import ShiftService, StaffService, TableAllocationService

from .common import NoArguments, RecordId, deleted_message
from .registry import ToolSpec


class UpdateTableAllocationInput(UpdateTableAllocation):
    id: uuid.UUID = Field(description="Unique identifier (UUID) of the table allocation to update.")


def build_table_allocation_tools(
    service: TableAllocationService,
    shift_service: ShiftService,
    staff_service: StaffService,
) -> list[ToolSpec]:
    async def create_table_allocation(args: CreateTableAllocation):
        return await service.create_table_allocation(args)

    async def update_table_allocation(args: UpdateTableAllocationInput):
        changes = UpdateTableAllocation.model_validate(
            args.model_dump(mode="json", exclude={"id"}, exclude_unset=True)
        )
        return await service.update_table_allocation(str(args.id), changes)

    async def delete_table_allocation(args: RecordId):
        await service.delete_table_allocation(str(args.id))
        return deleted_message("Table allocation", args.id)

    async def get_all_table_allocations(_: NoArguments):
        return await service.get_all_table_allocations()

    async def get_shifts(_: NoArguments):
        return await shift_service.get_all_shifts()

    async def get_waiters(_: NoArguments):
        return await staff_service.get_all_staff_members()

    return [
        ToolSpec(
            "createTableAllocation",
            "Creates a new table allocation. Requires shiftId, tableNumbers (array), and "
            "waiterId. Always confirm details with the user before calling this tool.",
            CreateTableAllocation,
            create_table_allocation,
        ),
        ToolSpec(
            "updateTableAllocation",
            "Updates an existing table allocation. Requires the allocation ID. All other "
            "fields (shiftId, tableNumbers, waiterId) are optional. Always confirm details "
            "with the user before calling this tool.",
            UpdateTableAllocationInput,
            update_table_allocation,
        ),
        ToolSpec(
            "deleteTableAllocation",
            "Deletes a table allocation. Requires the allocation ID. Always confirm with the "
            "user (stating allocation details) before calling this destructive tool.",
            RecordId,
            delete_table_allocation,
        ),
        ToolSpec(
            "getAllTableAllocations",
            "Lists all table allocations, including shift and waiter details if available.",
            NoArguments,
            get_all_table_allocations,
        ),
        ToolSpec(
            "getShiftsTool",
            "Lists all available shifts. Use this to find a shiftId based on date and time "
            "provided by the user.",
            NoArguments,
            get_shifts,
        ),
        ToolSpec(
            "getWaitersTool",
            "Lists all available staff members (waiters). Use this to find a waiterId based "
            "on name or tag name provided by the user.",
            NoArguments,
            get_waiters,
        ),
    ]
