"""First-answer-wins race over a set of fetchers with a shared deadline."""

from __future__ import annotations

import asyncio
import time
from enum import Enum
from typing import Sequence

import structlog

from .context import CANCELLED, DEADLINE_EXCEEDED, RaceContext
from .errors import RaceTimeoutError, UnexpectedFetchError
from .fetcher import Fetcher
from .records import ResultEnvelope

DEFAULT_TIMEOUT = 1.0
# Upper bound on how long a finished race waits for cancelled losers to unwind.
CANCEL_GRACE = 0.25


class RaceState(str, Enum):
    IDLE = "idle"
    RACING = "racing"
    RESOLVED = "resolved"
    TIMED_OUT = "timed_out"


class Race:
    """A single race: start every fetcher, keep the first envelope, cancel the rest.

    Each fetcher runs as its own task and deposits its envelope into a queue
    sized to the fetcher count, so late finishers never block. The arbiter
    waits on that queue with the context's remaining time as timeout. The
    first envelope wins whether it carries a record or an error; cancelling
    the context then cancels every task still in flight.
    """

    def __init__(
        self,
        key: str,
        fetchers: Sequence[Fetcher],
        timeout: float = DEFAULT_TIMEOUT,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        if not fetchers:
            raise ValueError("A race needs at least one fetcher")
        if timeout <= 0:
            raise ValueError("timeout must be > 0")
        self.key = key
        self.fetchers = list(fetchers)
        self.timeout = timeout
        self.context: RaceContext | None = None
        self.state = RaceState.IDLE
        self.winner: ResultEnvelope | None = None
        self.tasks: list[asyncio.Task] = []
        self._results: asyncio.Queue[ResultEnvelope] = asyncio.Queue(maxsize=len(self.fetchers))
        base_logger = logger or structlog.get_logger("cep_lookup.race")
        self.logger = base_logger.bind(code=key)

    async def run(self) -> ResultEnvelope:
        if self.state is not RaceState.IDLE:
            raise RuntimeError(f"Race for {self.key!r} already ran ({self.state.value})")
        self.state = RaceState.RACING
        context = self.context = RaceContext(self.timeout)
        started = time.monotonic()
        self.logger.debug(
            "race_started",
            providers=[fetcher.name for fetcher in self.fetchers],
            timeout=self.timeout,
        )
        try:
            for fetcher in self.fetchers:
                task = asyncio.create_task(
                    self._run_fetcher(fetcher, context), name=f"cep-race-{fetcher.name}"
                )
                self.tasks.append(task)
                context.attach(task)
            envelope = await self._wait_first(context)
            context.cancel(CANCELLED if envelope is not None else DEADLINE_EXCEEDED)
        except BaseException:
            context.cancel(CANCELLED)
            raise
        finally:
            await self._reap()

        elapsed_ms = int((time.monotonic() - started) * 1000)
        if envelope is None:
            self.state = RaceState.TIMED_OUT
            self.logger.warning("race_timed_out", elapsed_ms=elapsed_ms)
            raise RaceTimeoutError(self.key, self.timeout)

        self.state = RaceState.RESOLVED
        self.winner = envelope
        self.logger.info(
            "race_resolved",
            provider=envelope.source,
            ok=envelope.ok,
            kind=envelope.error_kind.value if envelope.error_kind else None,
            elapsed_ms=elapsed_ms,
        )
        return envelope

    # ------------------------------------------------------------------
    async def _wait_first(self, context: RaceContext) -> ResultEnvelope | None:
        remaining = context.remaining()
        if remaining <= 0:
            return None
        try:
            envelope = await asyncio.wait_for(self._results.get(), timeout=remaining)
        except asyncio.TimeoutError:
            return None
        if context.cancelled:
            # Arrived after the deadline, typically a fetcher reporting its own abort.
            return None
        return envelope

    async def _run_fetcher(self, fetcher: Fetcher, context: RaceContext) -> None:
        try:
            envelope = await fetcher.fetch(self.key, context)
        except Exception as exc:  # noqa: BLE001
            self.logger.exception("fetcher_contract_violation", provider=fetcher.name)
            envelope = ResultEnvelope.failure(
                fetcher.name, UnexpectedFetchError(f"{fetcher.name} crashed: {exc!r}")
            )
        if self.state is not RaceState.RACING:
            self.logger.debug(
                "fetch_discarded", provider=envelope.source, reason=context.reason
            )
        self._results.put_nowait(envelope)

    async def _reap(self) -> None:
        pending = [task for task in self.tasks if not task.done()]
        if not pending:
            return
        _, still_running = await asyncio.wait(pending, timeout=CANCEL_GRACE)
        if still_running:
            self.logger.warning(
                "fetchers_still_running",
                providers=[task.get_name() for task in still_running],
            )


class RaceCoordinator:
    """Run races for lookup keys against a fixed set of fetchers."""

    def __init__(
        self,
        fetchers: Sequence[Fetcher],
        timeout: float = DEFAULT_TIMEOUT,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        if not fetchers:
            raise ValueError("RaceCoordinator needs at least one fetcher")
        if timeout <= 0:
            raise ValueError("timeout must be > 0")
        self.fetchers = list(fetchers)
        self.timeout = timeout
        self.logger = logger or structlog.get_logger("cep_lookup.race")

    async def race(self, key: str, timeout: float | None = None) -> ResultEnvelope:
        effective = timeout if timeout is not None else self.timeout
        return await Race(key, self.fetchers, effective, logger=self.logger).run()


async def race(
    key: str, fetchers: Sequence[Fetcher], timeout: float = DEFAULT_TIMEOUT
) -> ResultEnvelope:
    """Return the first envelope any fetcher produces, or raise RaceTimeoutError."""

    return await Race(key, fetchers, timeout).run()


__all__ = ["CANCEL_GRACE", "DEFAULT_TIMEOUT", "Race", "RaceCoordinator", "RaceState", "race"]
