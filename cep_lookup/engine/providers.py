"""Concrete postal-code backends and the registry that builds them."""

from __future__ import annotations

from typing import Any, Callable, Iterable, TypeVar

import httpx
import structlog

from ..config import ProviderConfig
from .errors import NotFoundError
from .fetcher import HttpJsonFetcher

F = TypeVar("F", bound=type[HttpJsonFetcher])

FETCHER_REGISTRY: dict[str, type[HttpJsonFetcher]] = {}


def register_fetcher(kind: str) -> Callable[[F], F]:
    """Class decorator making a fetcher available under ``kind``."""

    def decorator(cls: F) -> F:
        FETCHER_REGISTRY[kind] = cls
        return cls

    return decorator


@register_fetcher("brasilapi")
class BrasilAPIFetcher(HttpJsonFetcher):
    name = "BrasilAPI"
    url_template = "https://brasilapi.com.br/api/cep/v1/{code}"
    field_map = {
        "cep": "code",
        "street": "street",
        "neighborhood": "neighborhood",
        "city": "city",
        "state": "region",
    }


@register_fetcher("viacep")
class ViaCEPFetcher(HttpJsonFetcher):
    name = "ViaCEP"
    url_template = "http://viacep.com.br/ws/{code}/json/"
    field_map = {
        "cep": "code",
        "logradouro": "street",
        "complemento": "complement",
        "bairro": "neighborhood",
        "localidade": "city",
        "uf": "region",
    }

    def check_payload(self, payload: dict[str, Any]) -> None:
        # Unknown codes come back as 200 with {"erro": true} (or "true").
        if payload.get("erro") in (True, "true"):
            raise NotFoundError(f"{self.name} does not know this postal code")


def build_fetchers(
    providers: Iterable[ProviderConfig],
    client: httpx.AsyncClient,
    logger: structlog.BoundLogger | None = None,
) -> list[HttpJsonFetcher]:
    """Instantiate one fetcher per enabled provider configuration."""

    fetchers: list[HttpJsonFetcher] = []
    for provider in providers:
        if not provider.enabled:
            continue
        try:
            cls = FETCHER_REGISTRY[provider.kind]
        except KeyError:
            known = ", ".join(sorted(FETCHER_REGISTRY))
            raise ValueError(
                f"Unknown provider kind {provider.kind!r} for {provider.name!r}; known: {known}"
            ) from None
        fetchers.append(
            cls(
                client,
                name=provider.name,
                url_template=provider.url_template,
                logger=logger,
            )
        )
    return fetchers


__all__ = [
    "BrasilAPIFetcher",
    "FETCHER_REGISTRY",
    "ViaCEPFetcher",
    "build_fetchers",
    "register_fetcher",
]
