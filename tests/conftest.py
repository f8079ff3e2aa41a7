"""Pytest fixtures shared across the suite: scripted fetchers, mock transports, configs."""

from __future__ import annotations

import asyncio
import json
import time
from pathlib import Path
from typing import Any, Awaitable, Callable, Iterable

import httpx
import pytest

from cep_lookup.config import ConfigLocator, ConfigRepository, LookupConfig
from cep_lookup.engine import Address, FetchError, Fetcher, RaceContext, TransportError
from cep_lookup.logging_conf import configure_logging

Handler = Callable[[httpx.Request], "httpx.Response | Awaitable[httpx.Response]"]


@pytest.fixture(autouse=True, scope="session")
def _quiet_logging() -> None:
    # structlog events go to the stderr JSON handler, never stdout.
    configure_logging(verbose=False)


@pytest.fixture
def brasilapi_payload() -> dict[str, Any]:
    return {
        "cep": "01001000",
        "state": "SP",
        "city": "São Paulo",
        "neighborhood": "Sé",
        "street": "Praça da Sé",
        "service": "open-cep",
    }


@pytest.fixture
def viacep_payload() -> dict[str, Any]:
    return {
        "cep": "01001-000",
        "logradouro": "Praça da Sé",
        "complemento": "lado ímpar",
        "bairro": "Sé",
        "localidade": "São Paulo",
        "uf": "SP",
        "ibge": "3550308",
        "gia": "1004",
        "ddd": "11",
        "siafi": "7107",
    }


@pytest.fixture
def provider_payloads(brasilapi_payload, viacep_payload) -> dict[str, dict[str, Any]]:
    return {"brasilapi.com.br": brasilapi_payload, "viacep.com.br": viacep_payload}


class ScriptedFetcher(Fetcher):
    """Fetcher with a controlled latency that honours cancellation like a real call."""

    def __init__(
        self,
        name: str,
        latency: float,
        record: Address | None = None,
        error: FetchError | None = None,
    ) -> None:
        super().__init__(name=name)
        self.latency = latency
        self.record = record or Address(code="00000000", city=name)
        self.error = error
        self.started = False
        self.finished = False
        self.cancelled_at: float | None = None
        self.calls = 0

    async def lookup(self, key: str, context: RaceContext) -> Address:
        self.calls += 1
        self.started = True
        try:
            if await context.wait(self.latency):
                self.cancelled_at = time.monotonic()
                raise TransportError(f"{self.name} abandoned: {context.reason}")
            if self.error is not None:
                raise self.error
            return self.record
        except asyncio.CancelledError:
            self.cancelled_at = time.monotonic()
            raise
        finally:
            self.finished = True


@pytest.fixture
def scripted_fetcher() -> Callable[..., ScriptedFetcher]:
    return ScriptedFetcher


@pytest.fixture
def mock_client() -> Iterable[Callable[[Handler], httpx.AsyncClient]]:
    clients: list[httpx.AsyncClient] = []

    def _factory(handler: Handler) -> httpx.AsyncClient:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield _factory
    for client in clients:
        if not client.is_closed:
            asyncio.run(client.aclose())


@pytest.fixture
def json_response() -> Callable[..., httpx.Response]:
    def _build(payload: Any, status_code: int = 200) -> httpx.Response:
        return httpx.Response(
            status_code,
            content=json.dumps(payload).encode("utf-8"),
            headers={"Content-Type": "application/json"},
        )

    return _build


@pytest.fixture
def delayed_provider_handler(json_response) -> Callable[..., Handler]:
    """Answer per host after a fixed delay, mimicking providers of different speed."""

    def _build(delays: dict[str, float], payloads: dict[str, Any]) -> Handler:
        async def handler(request: httpx.Request) -> httpx.Response:
            host = request.url.host
            await asyncio.sleep(delays[host])
            return json_response(payloads[host])

        return handler

    return _build


@pytest.fixture
def sample_config() -> LookupConfig:
    return LookupConfig(timeout=1.0)


@pytest.fixture
def temp_config_repository(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ConfigRepository:
    monkeypatch.setenv("CEP_LOOKUP_HOME", str(tmp_path))
    return ConfigRepository(ConfigLocator())
