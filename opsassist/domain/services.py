#!/usr/bin/env python3
"""
Domain Service Interfaces and In-Memory Implementations

The production CRUD layer lives behind an ORM outside this package. The
assistants only depend on the protocols below; the in-memory services
implement them for development runs and tests.

CONFIG: wired by opsassist.main
PURPOSE: Development/testing - all data lost on restart
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import Protocol

from .models import (
    DEFAULT_STAFF_PASSWORD,
    CreateShift,
    CreateStaffMember,
    CreateTableAllocation,
    Shift,
    ShiftSummary,
    StaffMember,
    StaffSummary,
    TableAllocation,
    UpdateShift,
    UpdateStaffMember,
    UpdateTableAllocation,
)

logger = logging.getLogger(__name__)


class DomainError(Exception):
    """Base class for domain service failures."""


class NotFoundError(DomainError):
    pass


class ConflictError(DomainError):
    pass


# ---------- Service interfaces ----------


class StaffService(Protocol):
    async def create_staff_member(self, data: CreateStaffMember) -> StaffMember: ...

    async def update_staff_member(self, staff_id: str, data: UpdateStaffMember) -> StaffMember: ...

    async def delete_staff_member(self, staff_id: str) -> None: ...

    async def get_staff_member(self, staff_id: str) -> StaffMember: ...

    async def get_all_staff_members(self) -> list[StaffMember]: ...


class ShiftService(Protocol):
    async def create_shift(self, data: CreateShift) -> Shift: ...

    async def update_shift(self, shift_id: str, data: UpdateShift) -> Shift: ...

    async def delete_shift(self, shift_id: str) -> None: ...

    async def get_all_shifts(self) -> list[Shift]: ...


class TableAllocationService(Protocol):
    async def create_table_allocation(self, data: CreateTableAllocation) -> TableAllocation: ...

    async def update_table_allocation(
        self, allocation_id: str, data: UpdateTableAllocation
    ) -> TableAllocation: ...

    async def delete_table_allocation(self, allocation_id: str) -> None: ...

    async def get_all_table_allocations(self) -> list[TableAllocation]: ...


# ---------- In-memory implementations ----------


def _summary(member: StaffMember) -> StaffSummary:
    return StaffSummary(
        id=member.id,
        name=member.name,
        surname=member.surname,
        tag_nickname=member.tag_nickname,
        position=member.position,
    )


class InMemoryStaffService:
    """Staff CRUD over a dict. Email and tag nickname are unique."""

    def __init__(self) -> None:
        self._members: dict[str, StaffMember] = {}
        self._passwords: dict[str, str] = {}
        self._lock = asyncio.Lock()

    def _check_unique(
        self, email: str | None, tag: str | None, exclude_id: str | None = None
    ) -> None:
        for member in self._members.values():
            if member.id == exclude_id:
                continue
            if email and member.email.lower() == email.lower():
                raise ConflictError(f"A staff member with email {email} already exists.")
            if tag and member.tag_nickname.lower() == tag.lower():
                raise ConflictError(f"A staff member with tag {tag} already exists.")

    async def create_staff_member(self, data: CreateStaffMember) -> StaffMember:
        async with self._lock:
            self._check_unique(data.email, data.tag_nickname)
            member = StaffMember(
                name=data.name,
                surname=data.surname,
                email=data.email,
                tag_nickname=data.tag_nickname,
                position=data.position,
                address=data.address,
                phone=data.phone,
                propic=str(data.propic) if data.propic else None,
                username=data.email,
                must_change_password=data.password is None,
            )
            self._members[member.id] = member
            self._passwords[member.id] = data.password or DEFAULT_STAFF_PASSWORD
            logger.info("Created staff member %s (%s)", member.id, member.tag_nickname)
            return member

    async def update_staff_member(self, staff_id: str, data: UpdateStaffMember) -> StaffMember:
        async with self._lock:
            current = await self.get_staff_member(staff_id)
            changes = data.model_dump(exclude_unset=True, exclude_none=True)
            if "tag_nickname" in changes:
                self._check_unique(None, changes["tag_nickname"], exclude_id=staff_id)
            if "propic" in changes:
                changes["propic"] = str(data.propic)
            updated = current.model_copy(update={**changes, "updated_at": datetime.now(UTC)})
            self._members[staff_id] = updated
            return updated

    async def delete_staff_member(self, staff_id: str) -> None:
        async with self._lock:
            if self._members.pop(staff_id, None) is None:
                raise NotFoundError(f"Staff member with ID {staff_id} not found.")
            self._passwords.pop(staff_id, None)

    async def get_staff_member(self, staff_id: str) -> StaffMember:
        member = self._members.get(staff_id)
        if member is None:
            raise NotFoundError(f"Staff member with ID {staff_id} not found.")
        return member

    async def get_all_staff_members(self) -> list[StaffMember]:
        return sorted(self._members.values(), key=lambda m: (m.surname, m.name))


class InMemoryShiftService:
    """Shift CRUD; every shift must reference an existing staff member."""

    def __init__(self, staff_service: StaffService) -> None:
        self._staff = staff_service
        self._shifts: dict[str, Shift] = {}

    async def _with_staff(self, shift: Shift) -> Shift:
        try:
            member = await self._staff.get_staff_member(shift.staff_id)
        except NotFoundError:
            return shift.model_copy(update={"staff_member": None})
        return shift.model_copy(update={"staff_member": _summary(member)})

    async def create_shift(self, data: CreateShift) -> Shift:
        staff_id = str(data.staff_id)
        await self._staff.get_staff_member(staff_id)
        shift = Shift(
            staff_id=staff_id,
            start_time=data.start_time,
            end_time=data.end_time,
            type=data.type,
            status=data.status,
            notes=data.notes,
        )
        self._shifts[shift.id] = shift
        return await self._with_staff(shift)

    async def update_shift(self, shift_id: str, data: UpdateShift) -> Shift:
        current = self.get_shift(shift_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        updated = current.model_copy(update={**changes, "updated_at": datetime.now(UTC)})
        if updated.end_time <= updated.start_time:
            raise ValueError("endTime must be after startTime")
        self._shifts[shift_id] = updated
        return await self._with_staff(updated)

    async def delete_shift(self, shift_id: str) -> None:
        if self._shifts.pop(shift_id, None) is None:
            raise NotFoundError(f"Shift with ID {shift_id} not found.")

    def get_shift(self, shift_id: str) -> Shift:
        shift = self._shifts.get(shift_id)
        if shift is None:
            raise NotFoundError(f"Shift with ID {shift_id} not found.")
        return shift

    async def get_all_shifts(self) -> list[Shift]:
        ordered = sorted(self._shifts.values(), key=lambda s: s.start_time)
        return [await self._with_staff(shift) for shift in ordered]


class InMemoryTableAllocationService:
    """Table allocations linking a shift, a waiter and a set of tables."""

    def __init__(self, shift_service: InMemoryShiftService, staff_service: StaffService) -> None:
        self._shifts = shift_service
        self._staff = staff_service
        self._allocations: dict[str, TableAllocation] = {}

    async def _with_details(
        self, allocation: TableAllocation, strict: bool = True
    ) -> TableAllocation:
        """Attach shift and waiter summaries; strict mode requires both to exist."""
        shift_summary: ShiftSummary | None = None
        waiter_summary: StaffSummary | None = None
        try:
            shift = self._shifts.get_shift(allocation.shift_id)
            shift_summary = ShiftSummary(
                id=shift.id,
                date=shift.start_time,
                start_time=shift.start_time,
                end_time=shift.end_time,
            )
            waiter_summary = _summary(await self._staff.get_staff_member(allocation.waiter_id))
        except NotFoundError:
            if strict:
                raise
        return allocation.model_copy(update={"shift": shift_summary, "waiter": waiter_summary})

    async def create_table_allocation(self, data: CreateTableAllocation) -> TableAllocation:
        allocation = TableAllocation(
            shift_id=str(data.shift_id),
            table_numbers=sorted(set(data.table_numbers)),
            waiter_id=str(data.waiter_id),
        )
        detailed = await self._with_details(allocation)
        self._allocations[allocation.id] = allocation
        return detailed

    async def update_table_allocation(
        self, allocation_id: str, data: UpdateTableAllocation
    ) -> TableAllocation:
        current = self._allocations.get(allocation_id)
        if current is None:
            raise NotFoundError(f"Table allocation with ID {allocation_id} not found.")
        changes: dict[str, object] = {"updated_at": datetime.now(UTC)}
        if data.shift_id is not None:
            changes["shift_id"] = str(data.shift_id)
        if data.waiter_id is not None:
            changes["waiter_id"] = str(data.waiter_id)
        if data.table_numbers is not None:
            changes["table_numbers"] = sorted(set(data.table_numbers))
        updated = current.model_copy(update=changes)
        detailed = await self._with_details(updated)
        self._allocations[allocation_id] = updated
        return detailed

    async def delete_table_allocation(self, allocation_id: str) -> None:
        if self._allocations.pop(allocation_id, None) is None:
            raise NotFoundError(f"Table allocation with ID {allocation_id} not found.")

    async def get_all_table_allocations(self) -> list[TableAllocation]:
        return [await self._with_details(a, strict=False) for a in self._allocations.values()]
