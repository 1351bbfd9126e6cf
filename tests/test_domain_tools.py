#!/usr/bin/env python3
"""
Staff, shift and table allocation tools exercised through the registry,
the same way the model reaches them.
"""

import json

import pytest

from opsassist.domain import (
    ConflictError,
    InMemoryShiftService,
    InMemoryStaffService,
    InMemoryTableAllocationService,
    NotFoundError,
)
from opsassist.domain.models import DEFAULT_STAFF_PASSWORD, CreateStaffMember
from opsassist.tools import (
    ToolRegistry,
    build_shift_tools,
    build_staff_tools,
    build_table_allocation_tools,
)

JOHN = {
    "name": "John",
    "surname": "Doe",
    "email": "john@x.com",
    "tag_nickname": "JD",
    "position": "Waiter",
}


@pytest.fixture
def services():
    staff = InMemoryStaffService()
    shifts = InMemoryShiftService(staff)
    allocations = InMemoryTableAllocationService(shifts, staff)
    return staff, shifts, allocations


@pytest.fixture
def registry(services) -> ToolRegistry:
    staff, shifts, allocations = services
    registry = ToolRegistry()
    registry.register_all(build_staff_tools(staff))
    registry.register_all(build_shift_tools(shifts))
    registry.register_all(build_table_allocation_tools(allocations, shifts, staff))
    return registry


async def call(registry: ToolRegistry, name: str, args: dict | None = None):
    result = await registry.invoke(name, args or {})
    assert not result.is_error, result.content
    return json.loads(result.content)


def test_all_tools_registered(registry):
    assert sorted(registry.tool_names) == sorted(
        [
            "createStaffMember",
            "updateStaffMember",
            "deleteStaffMember",
            "getStaffMember",
            "getAllStaffMembers",
            "getStaffPositions",
            "createShift",
            "updateShift",
            "deleteShift",
            "getAllShifts",
            "getShiftTypes",
            "getShiftStatuses",
            "createTableAllocation",
            "updateTableAllocation",
            "deleteTableAllocation",
            "getAllTableAllocations",
            "getShiftsTool",
            "getWaitersTool",
        ]
    )


# ---------- staff ----------


async def test_staff_lifecycle(registry, services):
    print("🧪 Testing staff tools...")
    staff, _, _ = services

    created = await call(registry, "createStaffMember", JOHN)
    assert created["username"] == "john@x.com"
    assert created["must_change_password"] is True
    assert "password" not in created
    assert staff._passwords[created["id"]] == DEFAULT_STAFF_PASSWORD

    updated = await call(
        registry, "updateStaffMember", {"id": created["id"], "position": "Chef"}
    )
    assert updated["position"] == "Chef"
    assert updated["name"] == "John"

    fetched = await call(registry, "getStaffMember", {"id": created["id"]})
    assert fetched["position"] == "Chef"

    deleted = await call(registry, "deleteStaffMember", {"id": created["id"]})
    assert created["id"] in deleted["message"]
    assert await call(registry, "getAllStaffMembers") == []
    print("✅ Staff create/update/delete work through the registry")


async def test_staff_validation_and_conflicts(registry):
    bad_email = await registry.invoke("createStaffMember", {**JOHN, "email": "not-an-email"})
    assert bad_email.is_error and "email" in bad_email.content

    bad_position = await registry.invoke("createStaffMember", {**JOHN, "position": "Pilot"})
    assert bad_position.is_error and "position" in bad_position.content

    await call(registry, "createStaffMember", JOHN)
    duplicate = await registry.invoke("createStaffMember", {**JOHN, "tag_nickname": "JD2"})
    assert duplicate.is_error and "already exists" in duplicate.content


async def test_staff_update_cannot_change_email(registry):
    created = await call(registry, "createStaffMember", JOHN)

    updated = await call(
        registry, "updateStaffMember", {"id": created["id"], "email": "other@x.com"}
    )
    assert updated["email"] == "john@x.com"


async def test_positions_types_and_statuses(registry):
    assert await call(registry, "getStaffPositions") == ["Waiter", "Chef", "Manager", "Supervisor"]
    assert await call(registry, "getShiftTypes") == ["Morning", "Afternoon", "Evening", "Night"]
    assert await call(registry, "getShiftStatuses") == [
        "Scheduled",
        "Active",
        "Completed",
        "Cancelled",
    ]


# ---------- shifts ----------


async def test_shift_lifecycle(registry):
    john = await call(registry, "createStaffMember", JOHN)

    shift = await call(
        registry,
        "createShift",
        {
            "staffId": john["id"],
            "startTime": "2024-07-01T09:00:00Z",
            "endTime": "2024-07-01T17:00:00Z",
            "type": "Morning",
        },
    )
    assert shift["status"] == "Scheduled"
    assert shift["staffMember"]["tag_nickname"] == "JD"

    updated = await call(registry, "updateShift", {"id": shift["id"], "status": "Active"})
    assert updated["status"] == "Active"
    assert updated["startTime"] == shift["startTime"]

    assert [s["id"] for s in await call(registry, "getAllShifts")] == [shift["id"]]
    await call(registry, "deleteShift", {"id": shift["id"]})
    assert await call(registry, "getAllShifts") == []


async def test_shift_rules(registry):
    john = await call(registry, "createStaffMember", JOHN)
    backwards = await registry.invoke(
        "createShift",
        {
            "staffId": john["id"],
            "startTime": "2024-07-01T17:00:00Z",
            "endTime": "2024-07-01T09:00:00Z",
            "type": "Evening",
        },
    )
    assert backwards.is_error and "endTime must be after startTime" in backwards.content

    unknown_staff = await registry.invoke(
        "createShift",
        {
            "staffId": "00000000-0000-0000-0000-000000000000",
            "startTime": "2024-07-01T09:00:00Z",
            "endTime": "2024-07-01T17:00:00Z",
            "type": "Morning",
        },
    )
    assert unknown_staff.is_error and "not found" in unknown_staff.content


async def test_shifts_with_mixed_timezones_stay_listable(registry):
    john = await call(registry, "createStaffMember", JOHN)
    for start, end in [
        ("2024-07-02T09:00:00", "2024-07-02T17:00:00"),
        ("2024-07-01T09:00:00Z", "2024-07-01T17:00:00Z"),
        ("2024-07-03T09:00:00+02:00", "2024-07-03T17:00:00"),
    ]:
        await call(
            registry,
            "createShift",
            {"staffId": john["id"], "startTime": start, "endTime": end, "type": "Morning"},
        )

    listed = await call(registry, "getAllShifts")

    assert [s["startTime"] for s in listed] == [
        "2024-07-01T09:00:00Z",
        "2024-07-02T09:00:00Z",
        "2024-07-03T07:00:00Z",
    ]
    assert len(await call(registry, "getShiftsTool")) == 3

    moved = await call(
        registry,
        "updateShift",
        {
            "id": listed[0]["id"],
            "startTime": "2024-07-04T08:00:00",
            "endTime": "2024-07-04T16:00:00+00:00",
        },
    )
    assert moved["startTime"] == "2024-07-04T08:00:00Z"
    assert len(await call(registry, "getAllShifts")) == 3


# ---------- table allocations ----------


async def test_table_allocation_lifecycle(registry):
    john = await call(registry, "createStaffMember", JOHN)
    shift = await call(
        registry,
        "createShift",
        {
            "staffId": john["id"],
            "startTime": "2024-07-01T09:00:00Z",
            "endTime": "2024-07-01T17:00:00Z",
            "type": "Morning",
        },
    )

    assert [w["id"] for w in await call(registry, "getWaitersTool")] == [john["id"]]
    assert [s["id"] for s in await call(registry, "getShiftsTool")] == [shift["id"]]

    allocation = await call(
        registry,
        "createTableAllocation",
        {"shiftId": shift["id"], "tableNumbers": [5, 1, 5], "waiterId": john["id"]},
    )
    assert allocation["tableNumbers"] == [1, 5]
    assert allocation["waiter"]["name"] == "John"
    assert allocation["shift"]["id"] == shift["id"]

    updated = await call(
        registry, "updateTableAllocation", {"id": allocation["id"], "tableNumbers": [10]}
    )
    assert updated["tableNumbers"] == [10]
    assert updated["waiterId"] == john["id"]

    # a deleted shift does not break listing
    await call(registry, "deleteShift", {"id": shift["id"]})
    listed = await call(registry, "getAllTableAllocations")
    assert listed[0]["shift"] is None

    await call(registry, "deleteTableAllocation", {"id": allocation["id"]})
    assert await call(registry, "getAllTableAllocations") == []


@pytest.mark.parametrize("tables", [[], [0], [51], ["one"]])
async def test_table_numbers_are_validated(registry, tables):
    result = await registry.invoke(
        "createTableAllocation",
        {
            "shiftId": "00000000-0000-0000-0000-000000000001",
            "tableNumbers": tables,
            "waiterId": "00000000-0000-0000-0000-000000000002",
        },
    )
    assert result.is_error
    assert "tableNumbers" in result.content or "table_numbers" in result.content


async def test_allocation_needs_existing_shift(registry):
    john = await call(registry, "createStaffMember", JOHN)
    result = await registry.invoke(
        "createTableAllocation",
        {
            "shiftId": "00000000-0000-0000-0000-000000000001",
            "tableNumbers": [1],
            "waiterId": john["id"],
        },
    )
    assert result.is_error and "Shift" in result.content


# ---------- services directly ----------


async def test_service_errors(services):
    staff, _, allocations = services
    await staff.create_staff_member(CreateStaffMember(**JOHN))

    with pytest.raises(ConflictError):
        await staff.create_staff_member(CreateStaffMember(**{**JOHN, "tag_nickname": "X"}))
    with pytest.raises(NotFoundError):
        await staff.delete_staff_member("missing")
    with pytest.raises(NotFoundError):
        await allocations.delete_table_allocation("missing")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
