#!/usr/bin/env python3
"""
SQLite Thread Store Implementation

Durable SQLite storage for conversation threads.

CONFIG: chat.storage.type = "sqlite", chat.storage.db_path
PURPOSE: Threads survive restarts; several assistants share one database file
FEATURES: WAL mode, per-thread sequence numbers, namespaces, JSON message rows
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Sequence

import aiosqlite

from opsassist.chat.models import ChatCompletionMessage, message_from_dict, message_to_dict

from .locks import ThreadLocks
from .repository import ThreadStore, check_tool_attribution

logger = logging.getLogger(__name__)


class SQLiteThreadStore(ThreadStore):
    """SQLite-backed store - configure with type='sqlite'."""

    def __init__(
        self,
        db_path: str = "assistant_threads.db",
        namespace: str = "default",
        seed: Sequence[ChatCompletionMessage] = (),
    ):
        self.db_path = db_path
        self.namespace = namespace
        self._seed: list[ChatCompletionMessage] = list(seed)
        self._lock = asyncio.Lock()
        self._thread_locks = ThreadLocks()
        self._initialized = False

    async def _ensure_initialized(self):
        """Initialize database schema if not already done."""
        if self._initialized:
            return

        async with self._lock:
            if self._initialized:
                return

            async with aiosqlite.connect(self.db_path) as db:
                await db.execute("PRAGMA journal_mode=WAL")
                await db.execute("PRAGMA synchronous=NORMAL")

                await db.execute("""
                    CREATE TABLE IF NOT EXISTS thread_messages (
                        namespace TEXT NOT NULL,
                        thread_id TEXT NOT NULL,
                        seq INTEGER NOT NULL,
                        role TEXT NOT NULL,
                        message TEXT NOT NULL,
                        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                        PRIMARY KEY (namespace, thread_id, seq)
                    )
                """)
                await db.execute("""
                    CREATE INDEX IF NOT EXISTS idx_thread_created
                    ON thread_messages(created_at)
                """)
                await db.commit()

            self._initialized = True

    async def _fetch(self, db: aiosqlite.Connection, thread_id: str) -> list[ChatCompletionMessage]:
        async with db.execute(
            (
                "SELECT message FROM thread_messages WHERE namespace = ? "
                "AND thread_id = ? ORDER BY seq"
            ),
            (self.namespace, thread_id),
        ) as cursor:
            rows = await cursor.fetchall()
        return [message_from_dict(json.loads(row[0])) for row in rows]

    async def load(self, thread_id: str) -> list[ChatCompletionMessage]:
        await self._ensure_initialized()

        async with aiosqlite.connect(self.db_path) as db:
            history = await self._fetch(db, thread_id)
        return history if history else list(self._seed)

    async def append(self, thread_id: str, messages: Sequence[ChatCompletionMessage]) -> None:
        await self._ensure_initialized()
        if not messages:
            return

        async with self._thread_locks.hold(thread_id), aiosqlite.connect(self.db_path) as db:
            stored = await self._fetch(db, thread_id)
            # a new thread is materialized with its seed in the same transaction
            to_insert = list(messages) if stored else [*self._seed, *messages]
            check_tool_attribution(stored, to_insert)

            next_seq = len(stored) + 1
            rows = [
                (
                    self.namespace,
                    thread_id,
                    next_seq + offset,
                    msg.role,
                    json.dumps(message_to_dict(msg)),
                )
                for offset, msg in enumerate(to_insert)
            ]
            await db.executemany(
                (
                    "INSERT INTO thread_messages "
                    "(namespace, thread_id, seq, role, message) VALUES (?, ?, ?, ?, ?)"
                ),
                rows,
            )
            await db.commit()
            logger.debug(
                "← Repository: persisted %d messages to %s/%s",
                len(rows),
                self.namespace,
                thread_id,
            )

    async def reset(self, thread_id: str) -> None:
        await self._ensure_initialized()

        async with self._thread_locks.hold(thread_id), aiosqlite.connect(self.db_path) as db:
            await db.execute(
                "DELETE FROM thread_messages WHERE namespace = ? AND thread_id = ?",
                (self.namespace, thread_id),
            )
            await db.commit()
        logger.info("Thread %s/%s reset", self.namespace, thread_id)

    async def list_threads(self) -> list[str]:
        await self._ensure_initialized()

        async with (
            aiosqlite.connect(self.db_path) as db,
            db.execute(
                "SELECT DISTINCT thread_id FROM thread_messages WHERE namespace = ?",
                (self.namespace,),
            ) as cursor,
        ):
            rows = await cursor.fetchall()
            return [row[0] for row in rows]

    async def close(self) -> None:
        return None
