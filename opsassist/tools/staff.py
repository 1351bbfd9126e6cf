"""Staff management tools."""

from __future__ import annotations

import json
import uuid

from pydantic import Field

from opsassist.domain.models import STAFF_POSITIONS, UpdateStaffMember
from opsassist.domain.models import CreateStaffMember as CreateStaffMemberInput
from opsassist.domain.services import StaffService

from .common import NoArguments, RecordId, deleted_message
from .registry import ToolSpec


class UpdateStaffMemberInput(UpdateStaffMember):
    id: uuid.UUID = Field(description="Unique identifier (UUID) of the staff member to update.")


def build_staff_tools(service: StaffService) -> list[ToolSpec]:
    async def create_staff_member(args: CreateStaffMemberInput):
        return await service.create_staff_member(args)

    async def update_staff_member(args: UpdateStaffMemberInput):
        changes = UpdateStaffMember.model_validate(
            args.model_dump(mode="json", exclude={"id"}, exclude_unset=True)
        )
        return await service.update_staff_member(str(args.id), changes)

    async def delete_staff_member(args: RecordId):
        await service.delete_staff_member(str(args.id))
        return deleted_message("Staff member", args.id)

    async def get_staff_member(args: RecordId):
        return await service.get_staff_member(str(args.id))

    async def get_all_staff_members(_: NoArguments):
        return await service.get_all_staff_members()

    def get_staff_positions(_: NoArguments):
        return json.dumps(list(STAFF_POSITIONS))

    return [
        ToolSpec(
            "createStaffMember",
            "Creates a new staff member. Requires name, surname, email, tag_nickname and position.",
            CreateStaffMemberInput,
            create_staff_member,
        ),
        ToolSpec(
            "updateStaffMember",
            "Updates an existing staff member (ID required). Email/password cannot be changed.",
            UpdateStaffMemberInput,
            update_staff_member,
        ),
        ToolSpec(
            "deleteStaffMember",
            "Deletes a staff member (ID required). Always confirm with the user first.",
            RecordId,
            delete_staff_member,
        ),
        ToolSpec(
            "getStaffMember",
            "Returns a single staff member by ID.",
            RecordId,
            get_staff_member,
        ),
        ToolSpec(
            "getAllStaffMembers",
            "Lists all staff members.",
            NoArguments,
            get_all_staff_members,
        ),
        ToolSpec(
            "getStaffPositions",
            "Returns available staff positions.",
            NoArguments,
            get_staff_positions,
        ),
    ]
