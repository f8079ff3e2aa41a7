"""Fetcher contract and the shared HTTP/JSON lookup pipeline."""

from __future__ import annotations

import asyncio
import json
import time
from abc import ABC, abstractmethod
from typing import Any, ClassVar
from urllib.parse import quote

import httpx
import structlog

from .context import RaceContext
from .errors import DecodeError, FetchError, HTTPStatusError, RequestBuildError, TransportError
from .records import Address, ResultEnvelope

ADDRESS_FIELDS = ("code", "street", "complement", "neighborhood", "city", "region")


class Fetcher(ABC):
    """One provider lookup yielding exactly one :class:`ResultEnvelope`.

    Subclasses implement :meth:`lookup` and raise :class:`FetchError` on any
    failure; :meth:`fetch` turns those into error envelopes so nothing in the
    error taxonomy escapes the fetcher.
    """

    name: str = "fetcher"

    def __init__(self, name: str | None = None, logger: structlog.BoundLogger | None = None) -> None:
        if name:
            self.name = name
        self.logger = logger or structlog.get_logger("cep_lookup.fetcher")

    async def fetch(self, key: str, context: RaceContext) -> ResultEnvelope:
        log = self.logger.bind(provider=self.name, code=key)
        started = time.monotonic()
        try:
            record = await self.lookup(key, context)
        except asyncio.CancelledError:
            log.debug("fetch_cancelled", reason=context.reason, elapsed_ms=_elapsed_ms(started))
            raise
        except FetchError as exc:
            log.info(
                "fetch_failed",
                kind=exc.kind.value,
                error=str(exc),
                elapsed_ms=_elapsed_ms(started),
            )
            return ResultEnvelope.failure(self.name, exc)
        log.debug("fetch_succeeded", elapsed_ms=_elapsed_ms(started))
        return ResultEnvelope.success(self.name, record)

    @abstractmethod
    async def lookup(self, key: str, context: RaceContext) -> Address:
        """Resolve ``key`` or raise :class:`FetchError`."""


class HttpJsonFetcher(Fetcher):
    """GET a URL template, decode a JSON object and map it onto :class:`Address`."""

    url_template: str = ""
    field_map: ClassVar[dict[str, str]] = {}

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        name: str | None = None,
        url_template: str | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        super().__init__(name=name, logger=logger)
        self.client = client
        if url_template:
            self.url_template = url_template

    async def lookup(self, key: str, context: RaceContext) -> Address:
        context.raise_if_cancelled()
        request = self.build_request(key, context)
        body = await self._execute(request, context)
        payload = self.decode(body)
        self.check_payload(payload)
        return self.map_payload(payload)

    # ------------------------------------------------------------------
    def build_url(self, key: str) -> str:
        try:
            return self.url_template.format(code=quote(key, safe=""))
        except (KeyError, IndexError, ValueError) as exc:
            raise RequestBuildError(f"Invalid URL template {self.url_template!r}: {exc}") from exc

    def build_request(self, key: str, context: RaceContext) -> httpx.Request:
        url = self.build_url(key)
        try:
            return self.client.build_request(
                "GET", url, timeout=httpx.Timeout(context.remaining())
            )
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as exc:
            raise RequestBuildError(f"Cannot build request for {url}: {exc}") from exc

    async def _execute(self, request: httpx.Request, context: RaceContext) -> bytes:
        url = str(request.url)
        try:
            response = await self.client.send(request, stream=True)
        except httpx.TimeoutException as exc:
            raise TransportError(f"Request to {url} timed out") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"Request to {url} failed: {exc}") from exc
        try:
            context.raise_if_cancelled()
            if not response.is_success:
                raise HTTPStatusError(response.status_code, url)
            chunks: list[bytes] = []
            async for chunk in response.aiter_bytes():
                context.raise_if_cancelled()
                chunks.append(chunk)
            return b"".join(chunks)
        except httpx.TimeoutException as exc:
            raise TransportError(f"Reading {url} timed out") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"Reading {url} failed: {exc}") from exc
        finally:
            await response.aclose()

    def decode(self, body: bytes) -> dict[str, Any]:
        try:
            payload = json.loads(body)
        except ValueError as exc:
            raise DecodeError(f"{self.name} returned invalid JSON: {exc}") from exc
        if not isinstance(payload, dict):
            raise DecodeError(f"{self.name} returned {type(payload).__name__}, expected object")
        return payload

    def check_payload(self, payload: dict[str, Any]) -> None:
        """Hook for providers that report failures inside a 2xx body."""

    def map_payload(self, payload: dict[str, Any]) -> Address:
        values: dict[str, str | None] = {field: None for field in ADDRESS_FIELDS}
        for source_field, target_field in self.field_map.items():
            value = payload.get(source_field)
            if value in (None, ""):
                continue
            if not isinstance(value, str):
                raise DecodeError(f"{self.name} field {source_field!r} is not a string")
            values[target_field] = value
        if not values["code"]:
            raise DecodeError(f"{self.name} response has no postal code")
        return Address(**values)


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


__all__ = ["ADDRESS_FIELDS", "Fetcher", "HttpJsonFetcher"]
