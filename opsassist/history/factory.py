#!/usr/bin/env python3
"""
Thread Store Factory

Factory function to create the appropriate store based on configuration.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from opsassist.chat.models import ChatCompletionMessage

from .memory_repo import InMemoryThreadStore
from .repository import ThreadStore
from .sqlite_repo import SQLiteThreadStore

logger = logging.getLogger(__name__)


def create_thread_store(
    storage_config: dict[str, Any],
    namespace: str,
    seed: Sequence[ChatCompletionMessage] = (),
) -> ThreadStore:
    """Create a thread store from the ``chat.storage`` config section.

    Raises:
        ValueError: If the storage type is unknown.
    """
    storage_type = storage_config.get("type", "memory")

    if storage_type == "memory":
        logger.info("Using in-memory thread store for '%s'", namespace)
        return InMemoryThreadStore(seed)
    if storage_type == "sqlite":
        db_path = storage_config.get("db_path", "assistant_threads.db")
        logger.info("Using SQLite thread store for '%s' at %s", namespace, db_path)
        return SQLiteThreadStore(db_path, namespace, seed)

    raise ValueError(f"Unknown chat.storage.type '{storage_type}' (expected memory or sqlite)")
