"""In-flight production tickets — at most one per key."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Ticket(Generic[T]):
    """A running production for one key; ``joins`` counts callers that attached to it."""

    def __init__(self, key: str, task: asyncio.Task[T]) -> None:
        self.key = key
        self.task = task
        self.joins = 1

    async def wait(self) -> T:
        # shield: a cancelled caller must not cancel the shared run
        return await asyncio.shield(self.task)


class TicketTable(Generic[T]):
    """Lock-protected map from key to the task producing its value.

    The lock is held only to check, insert, or remove a ticket, never while
    the production itself runs.
    """

    def __init__(self) -> None:
        self._tickets: dict[str, Ticket[T]] = {}
        self._lock = asyncio.Lock()

    async def join_or_start(
        self,
        key: str,
        produce: Callable[[], Awaitable[T]],
    ) -> tuple[Ticket[T], bool]:
        """Return the ticket for ``key``, starting ``produce`` if none is in flight.

        The second element is True when this call started the production.
        """
        async with self._lock:
            ticket = self._tickets.get(key)
            if ticket is not None:
                ticket.joins += 1
                return ticket, False
            task = asyncio.create_task(self._run(key, produce), name=f"produce:{key}")
            task.add_done_callback(_observe)
            ticket = Ticket(key, task)
            self._tickets[key] = ticket
            return ticket, True

    async def wait_all(self) -> None:
        """Wait for every in-flight production to settle."""
        async with self._lock:
            tasks = [t.task for t in self._tickets.values()]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def __contains__(self, key: str) -> bool:
        return key in self._tickets

    def __len__(self) -> int:
        return len(self._tickets)

    async def _run(self, key: str, produce: Callable[[], Awaitable[T]]) -> T:
        try:
            return await produce()
        finally:
            # Released before the result is published to waiters
            async with self._lock:
                ticket = self._tickets.pop(key, None)
            if ticket is not None:
                logger.debug("Ticket for %s settled (%d joins)", key, ticket.joins)


def _observe(task: asyncio.Task) -> None:
    """Mark a failed production as retrieved even if every waiter has gone away."""
    if not task.cancelled():
        task.exception()
