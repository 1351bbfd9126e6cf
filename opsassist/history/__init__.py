#!/usr/bin/env python3
"""
Thread History Module

Conversation memory keyed by thread id, with in-memory and SQLite backends.
"""

from __future__ import annotations

from .factory import create_thread_store
from .locks import ThreadLocks
from .memory_repo import InMemoryThreadStore
from .repository import AttributionError, ThreadStore, check_tool_attribution
from .sqlite_repo import SQLiteThreadStore

__all__ = [
    "AttributionError",
    "InMemoryThreadStore",
    "SQLiteThreadStore",
    "ThreadLocks",
    "ThreadStore",
    "check_tool_attribution",
    "create_thread_store",
]
