#!/usr/bin/env python3
"""
In-Memory Thread Store Implementation

Fast in-memory storage for process-lifetime conversations.

CONFIG: chat.storage.type = "memory"
PURPOSE: Development/testing - all data lost on restart
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from opsassist.chat.models import ChatCompletionMessage

from .locks import ThreadLocks
from .repository import ThreadStore, check_tool_attribution

logger = logging.getLogger(__name__)


class InMemoryThreadStore(ThreadStore):
    """Dict-backed store - configure with type='memory'. Data lost on restart."""

    def __init__(self, seed: Sequence[ChatCompletionMessage] = ()):
        self._seed: list[ChatCompletionMessage] = list(seed)
        self._threads: dict[str, list[ChatCompletionMessage]] = {}
        self._locks = ThreadLocks()

    async def load(self, thread_id: str) -> list[ChatCompletionMessage]:
        history = self._threads.get(thread_id)
        if history is None:
            return list(self._seed)
        return list(history)

    async def append(self, thread_id: str, messages: Sequence[ChatCompletionMessage]) -> None:
        async with self._locks.hold(thread_id):
            history = self._threads.get(thread_id)
            if history is None:
                history = list(self._seed)
            check_tool_attribution(history, messages)
            # swap in a new list so concurrent readers never see a partial append
            self._threads[thread_id] = [*history, *messages]
            logger.debug(
                "← Repository: thread %s now has %d messages",
                thread_id,
                len(self._threads[thread_id]),
            )

    async def reset(self, thread_id: str) -> None:
        async with self._locks.hold(thread_id):
            self._threads.pop(thread_id, None)
            logger.info("Thread %s reset", thread_id)

    async def list_threads(self) -> list[str]:
        return list(self._threads.keys())

    async def close(self) -> None:
        return None
