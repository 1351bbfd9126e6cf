"""
Domain Module

Records, DTOs and CRUD service interfaces the assistant tools delegate to.
"""

from __future__ import annotations

from .services import (
    ConflictError,
    DomainError,
    InMemoryShiftService,
    InMemoryStaffService,
    InMemoryTableAllocationService,
    NotFoundError,
    ShiftService,
    StaffService,
    TableAllocationService,
)

__all__ = [
    "ConflictError",
    "DomainError",
    "InMemoryShiftService",
    "InMemoryStaffService",
    "InMemoryTableAllocationService",
    "NotFoundError",
    "ShiftService",
    "StaffService",
    "TableAllocationService",
]
