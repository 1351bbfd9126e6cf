"""
Domain records and input DTOs for staff, shifts and table allocations.

Field names on the wire follow the admin API: staff fields are snake_case,
shift and allocation fields are camelCase (aliases over snake_case attributes).
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Annotated, Literal, get_args

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, HttpUrl, model_validator
from pydantic.alias_generators import to_camel

StaffPosition = Literal["Waiter", "Chef", "Manager", "Supervisor"]
ShiftType = Literal["Morning", "Afternoon", "Evening", "Night"]
ShiftStatus = Literal["Scheduled", "Active", "Completed", "Cancelled"]

STAFF_POSITIONS: tuple[str, ...] = get_args(StaffPosition)
SHIFT_TYPES: tuple[str, ...] = get_args(ShiftType)
SHIFT_STATUSES: tuple[str, ...] = get_args(ShiftStatus)

# New staff must change this on first login.
DEFAULT_STAFF_PASSWORD = "__new__pass"

MIN_TABLE_NUMBER = 1
MAX_TABLE_NUMBER = 50

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

TableNumber = Annotated[int, Field(ge=MIN_TABLE_NUMBER, le=MAX_TABLE_NUMBER)]


def _as_utc(value: datetime) -> datetime:
    # naive times are taken as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


UTCDateTime = Annotated[datetime, AfterValidator(_as_utc)]


def _now() -> datetime:
    return datetime.now(UTC)


def _new_id() -> str:
    return str(uuid.uuid4())


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------- Staff ----------


class CreateStaffMember(BaseModel):
    name: str = Field(min_length=1, description="First name of the staff member.")
    surname: str = Field(min_length=1, description="Last name of the staff member.")
    email: str = Field(pattern=EMAIL_PATTERN, description="Email address, also the login username.")
    tag_nickname: str = Field(min_length=1, description="Unique tag name or nickname.")
    position: StaffPosition
    password: str | None = Field(default=None, min_length=6)
    address: str | None = None
    phone: str | None = Field(default=None, min_length=7, max_length=20)
    propic: HttpUrl | None = Field(default=None, description="URL of the profile picture.")


class UpdateStaffMember(BaseModel):
    """Email and password cannot be changed through an update."""

    name: str | None = Field(default=None, min_length=1)
    surname: str | None = Field(default=None, min_length=1)
    tag_nickname: str | None = Field(default=None, min_length=1)
    position: StaffPosition | None = None
    address: str | None = None
    phone: str | None = Field(default=None, min_length=7, max_length=20)
    propic: HttpUrl | None = None


class StaffMember(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str
    surname: str
    email: str
    tag_nickname: str
    position: StaffPosition
    address: str | None = None
    phone: str | None = None
    propic: str | None = None
    username: str
    must_change_password: bool = False
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


# ---------- Shifts ----------


class CreateShift(CamelModel):
    staff_id: uuid.UUID = Field(description="Unique identifier of the staff member for this shift.")
    start_time: UTCDateTime = Field(description="Start date and time of the shift (ISO 8601).")
    end_time: UTCDateTime = Field(description="End date and time of the shift (ISO 8601).")
    type: ShiftType
    status: ShiftStatus = Field(default="Scheduled", description="Defaults to Scheduled.")
    notes: str | None = None

    @model_validator(mode="after")
    def check_time_range(self) -> CreateShift:
        if self.end_time <= self.start_time:
            raise ValueError("endTime must be after startTime")
        return self


class UpdateShift(CamelModel):
    start_time: UTCDateTime | None = None
    end_time: UTCDateTime | None = None
    type: ShiftType | None = None
    status: ShiftStatus | None = None
    notes: str | None = None


class StaffSummary(BaseModel):
    id: str
    name: str
    surname: str
    tag_nickname: str
    position: str | None = None


class Shift(CamelModel):
    id: str = Field(default_factory=_new_id)
    staff_id: str
    start_time: UTCDateTime
    end_time: UTCDateTime
    type: ShiftType
    status: ShiftStatus = "Scheduled"
    notes: str | None = None
    staff_member: StaffSummary | None = None
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


# ---------- Table allocations ----------


class CreateTableAllocation(CamelModel):
    shift_id: uuid.UUID = Field(description="Unique identifier of the shift for this allocation.")
    table_numbers: list[TableNumber] = Field(
        min_length=1, description="Table numbers (1-50) to be allocated."
    )
    waiter_id: uuid.UUID = Field(description="Unique identifier of the assigned waiter.")


class UpdateTableAllocation(CamelModel):
    shift_id: uuid.UUID | None = None
    table_numbers: list[TableNumber] | None = Field(default=None, min_length=1)
    waiter_id: uuid.UUID | None = None


class ShiftSummary(CamelModel):
    id: str
    date: datetime
    start_time: datetime
    end_time: datetime


class TableAllocation(CamelModel):
    id: str = Field(default_factory=_new_id)
    shift_id: str
    table_numbers: list[int]
    waiter_id: str
    shift: ShiftSummary | None = None
    waiter: StaffSummary | None = None
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)
