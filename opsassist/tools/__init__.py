"""Tool registry and the domain tool adapters."""

from __future__ import annotations

from .registry import ToolRegistry, ToolSpec
from .shifts import build_shift_tools
from .staff import build_staff_tools
from .table_allocations import build_table_allocation_tools

__all__ = [
    "ToolRegistry",
    "ToolSpec",
    "build_shift_tools",
    "build_staff_tools",
    "build_table_allocation_tools",
]
