"""Cancellation scope for requests started on behalf of one screen.

A flow runs each backend call through its scope.  When the screen goes
away the flow closes the scope: in-flight calls are cancelled, and a
result that arrives after closing is dropped instead of being applied to
stale state.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, TypeVar

from coliving.exceptions import ColivingError, ColivingErrorCodes

log = logging.getLogger("coliving.flows.scope")

T = TypeVar("T")


class CancelScope:
    def __init__(self, name: str = "scope") -> None:
        self._name = name
        self._tasks: set[asyncio.Task[Any]] = set()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def _cancelled(self) -> ColivingError:
        return ColivingError(
            code=ColivingErrorCodes.CANCELLED,
            message=f"{self._name} was closed",
        )

    async def run(self, aw: Awaitable[T]) -> T:
        """Await ``aw`` as a tracked task. Raises CANCELLED once the scope is closed."""
        if self._closed:
            if asyncio.iscoroutine(aw):
                aw.close()
            raise self._cancelled()

        task = asyncio.ensure_future(aw)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        try:
            result = await task
        except asyncio.CancelledError:
            if self._closed:
                raise self._cancelled() from None
            raise
        if self._closed:
            log.debug("%s: dropping result that arrived after close", self._name)
            raise self._cancelled()
        return result

    def close(self) -> None:
        """Cancel everything still running. Idempotent."""
        if self._closed:
            return
        self._closed = True
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            log.info("%s closed, cancelled %d request(s)", self._name, len(self._tasks))

    async def aclose(self) -> None:
        """Close and wait for the cancelled tasks to finish unwinding."""
        tasks = list(self._tasks)
        self.close()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def __aenter__(self) -> "CancelScope":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
