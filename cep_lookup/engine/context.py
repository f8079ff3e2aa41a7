"""Cancellable, deadline-bounded scope shared by the fetchers of one race."""

from __future__ import annotations

import asyncio
import time
from typing import Callable

from .errors import TransportError

CANCELLED = "cancelled"
DEADLINE_EXCEEDED = "deadline_exceeded"


class RaceContext:
    """Level-triggered cancellation signal with a fixed deadline.

    Only the race owner calls :meth:`cancel`; fetchers observe the context
    through :attr:`cancelled`, :meth:`remaining` and :meth:`wait`. Once the
    context is cancelled, either explicitly or because the deadline passed,
    it stays cancelled. Tasks registered with :meth:`attach` are cancelled
    along with the context, which aborts whatever I/O they are awaiting.
    """

    def __init__(self, timeout: float, clock: Callable[[], float] = time.monotonic) -> None:
        if timeout <= 0:
            raise ValueError("timeout must be > 0")
        self.timeout = timeout
        self._clock = clock
        self.deadline = clock() + timeout
        self._event = asyncio.Event()
        self._tasks: set[asyncio.Task] = set()
        self._reason: str | None = None

    def cancel(self, reason: str = CANCELLED) -> bool:
        """Signal cancellation; only the first call has an effect."""

        if self._reason is not None:
            return False
        self._reason = reason
        self._event.set()
        for task in list(self._tasks):
            task.cancel()
        return True

    def attach(self, task: asyncio.Task) -> None:
        if self._reason is not None:
            task.cancel()
            return
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    @property
    def cancelled(self) -> bool:
        return self._event.is_set() or self._clock() >= self.deadline

    @property
    def reason(self) -> str | None:
        if self._reason is not None:
            return self._reason
        if self._clock() >= self.deadline:
            return DEADLINE_EXCEEDED
        return None

    def remaining(self) -> float:
        if self._event.is_set():
            return 0.0
        return max(0.0, self.deadline - self._clock())

    async def wait(self, seconds: float) -> bool:
        """Sleep up to ``seconds``; return True if cancelled before they elapsed."""

        left = self.remaining()
        if left <= 0:
            return True
        try:
            await asyncio.wait_for(self._event.wait(), timeout=min(seconds, left))
        except asyncio.TimeoutError:
            return seconds >= left
        return True

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise TransportError(f"Lookup abandoned: {self.reason}")


__all__ = ["CANCELLED", "DEADLINE_EXCEEDED", "RaceContext"]
