"""Detached post-commit work (notifications, emails).

Tasks are created with ``asyncio.create_task`` and held in a module-level set
until they finish, so the event loop's weak reference is not the only one.
They carry their own timeouts and never see the request's cancellation.
"""


import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

logger = logging.getLogger(__name__)

_pending: set[asyncio.Task] = set()


def spawn(coro: Coroutine[Any, Any, Any], name: str | None = None) -> asyncio.Task:
    task = asyncio.create_task(coro, name=name)
    _pending.add(task)
    task.add_done_callback(_finished)
    return task


def _finished(task: asyncio.Task) -> None:
    _pending.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Background task %s failed: %s", task.get_name(), exc)


def pending_count() -> int:
    return len(_pending)


async def drain(timeout: float = 5.0) -> None:
    """Wait for outstanding tasks; used at shutdown."""
    if not _pending:
        return
    done, not_done = await asyncio.wait(set(_pending), timeout=timeout)
    for task in not_done:
        task.cancel()
    if not_done:
        logger.warning("Cancelled %d background task(s) at shutdown", len(not_done))
