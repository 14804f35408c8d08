"""Single-flight guard: many concurrent callers share one in-flight operation."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class SingleFlight:
    """Runs at most one instance of an operation at a time.

    Callers arriving while the operation is running await the same task and
    observe the same result or exception. Once the task finishes the guard is
    cleared, so a failed operation can be retried by the next caller. Keeping
    a successful result around is the caller's job.
    """

    name: str

    def __post_init__(self):
        self._task: asyncio.Future | None = None

    @property
    def in_flight(self) -> bool:
        """True while an operation started through this guard is running."""
        return self._task is not None and not self._task.done()

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Start ``operation`` unless one is already running, then await it."""
        if self._task is None:
            logger.debug(f"Single-flight '{self.name}' starting operation")
            self._task = asyncio.ensure_future(operation())
            self._task.add_done_callback(self._clear)
        else:
            logger.debug(f"Single-flight '{self.name}' joining in-flight operation")

        # Shielded: a cancelled waiter must not cancel the shared operation
        return await asyncio.shield(self._task)

    def _clear(self, task: asyncio.Future) -> None:
        if self._task is task:
            self._task = None
        # Mark the exception as retrieved even if every waiter was cancelled
        if not task.cancelled() and task.exception() is not None:
            logger.debug(f"Single-flight '{self.name}' operation failed: {task.exception()}")
