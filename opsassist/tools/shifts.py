"""Shift management tools."""

from __future__ import annotations

import json
import uuid

from pydantic import Field

from opsassist.domain.models import SHIFT_STATUSES, SHIFT_TYPES, CreateShift, UpdateShift
from opsassist.domain.services import ShiftService

from .common import NoArguments, RecordId, deleted_message
from .registry import ToolSpec


class UpdateShiftInput(UpdateShift):
    id: uuid.UUID = Field(description="Unique identifier (UUID) of the shift to update.")


def build_shift_tools(service: ShiftService) -> list[ToolSpec]:
    async def create_shift(args: CreateShift):
        return await service.create_shift(args)

    async def update_shift(args: UpdateShiftInput):
        changes = UpdateShift.model_validate(
            args.model_dump(mode="json", exclude={"id"}, exclude_unset=True)
        )
        return await service.update_shift(str(args.id), changes)

    async def delete_shift(args: RecordId):
        await service.delete_shift(str(args.id))
        return deleted_message("Shift", args.id)

    async def get_all_shifts(_: NoArguments):
        return await service.get_all_shifts()

    return [
        ToolSpec(
            "createShift",
            "Creates a new shift for a staff member. Requires staffId, startTime, endTime, "
            "and type. Status is optional (defaults to Scheduled). Always confirm details "
            "with the user before calling this tool.",
            CreateShift,
            create_shift,
        ),
        ToolSpec(
            "updateShift",
            "Updates an existing shift. Requires the shift ID. All other fields are optional. "
            "Always confirm details with the user before calling this tool.",
            UpdateShiftInput,
            update_shift,
        ),
        ToolSpec(
            "deleteShift",
            "Deletes a shift. Requires the shift ID. Always confirm with the user (stating "
            "shift details) before calling this destructive tool.",
            RecordId,
            delete_shift,
        ),
        ToolSpec(
            "getAllShifts",
            "Lists all scheduled shifts, including staff information if available.",
            NoArguments,
            get_all_shifts,
        ),
        ToolSpec(
            "getShiftTypes",
            "Returns a list of available shift types (e.g., Morning, Afternoon).",
            NoArguments,
            lambda _: json.dumps(list(SHIFT_TYPES)),
        ),
        ToolSpec(
            "getShiftStatuses",
            "Returns a list of available shift statuses (e.g., Scheduled, Active, Completed).",
            NoArguments,
            lambda _: json.dumps(list(SHIFT_STATUSES)),
        ),
    ]
