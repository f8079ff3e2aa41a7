"""Lookup orchestrator wiring configuration, HTTP client, fetchers and the race."""

from __future__ import annotations

from typing import Sequence

import httpx
import structlog

from .config import ConfigRepository, LookupConfig
from .engine import Fetcher, RaceCoordinator, ResultEnvelope, build_fetchers


class LookupOrchestrator:
    """Own one shared ``httpx.AsyncClient`` and run postal-code races with it.

    The client is injectable so callers (and tests) can supply their own
    transport; when none is given one is built from the configuration and
    closed by :meth:`aclose`. Use it as an async context manager inside the
    event loop that runs the lookups.
    """

    def __init__(
        self,
        config: LookupConfig,
        client: httpx.AsyncClient | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config
        self.logger = logger or structlog.get_logger("cep_lookup.orchestrator")
        self._owns_client = client is None
        self.client = client or self._build_client(config)

    @classmethod
    def from_repository(
        cls, repository: ConfigRepository, client: httpx.AsyncClient | None = None
    ) -> "LookupOrchestrator":
        return cls(repository.load_config(), client=client)

    @staticmethod
    def _build_client(config: LookupConfig) -> httpx.AsyncClient:
        headers = {"User-Agent": config.user_agent} if config.user_agent else None
        return httpx.AsyncClient(follow_redirects=True, headers=headers)

    def fetchers(self, providers: Sequence[str] | None = None) -> list[Fetcher]:
        selected = self.config.enabled_providers(providers)
        if not selected:
            raise ValueError("No enabled providers configured")
        return build_fetchers(selected, self.client)

    async def lookup(
        self,
        code: str,
        timeout: float | None = None,
        providers: Sequence[str] | None = None,
    ) -> ResultEnvelope:
        """Race the selected providers for ``code``.

        Raises ``RaceTimeoutError`` when nobody answers in time and
        ``ValueError`` for an unusable provider selection.
        """

        coordinator = RaceCoordinator(
            self.fetchers(providers),
            timeout=timeout if timeout is not None else self.config.timeout,
        )
        return await coordinator.race(code)

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "LookupOrchestrator":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


__all__ = ["LookupOrchestrator"]
