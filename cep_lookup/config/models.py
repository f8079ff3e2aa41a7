"""Pydantic models describing providers and lookup settings."""

from __future__ import annotations

from typing import Iterable

from pydantic import BaseModel, Field, field_validator, model_validator


class ProviderConfig(BaseModel):
    """One backend taking part in the race."""

    name: str
    kind: str = Field(description="Registered fetcher kind, e.g. 'brasilapi' or 'viacep'.")
    url_template: str | None = Field(
        default=None,
        description="Overrides the fetcher's default URL; must contain '{code}'.",
    )
    enabled: bool = True

    @field_validator("name", "kind")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("url_template")
    @classmethod
    def _has_placeholder(cls, value: str | None) -> str | None:
        if value is not None and "{code}" not in value:
            raise ValueError("url_template must contain the '{code}' placeholder")
        return value


def _default_providers() -> list[ProviderConfig]:
    return [
        ProviderConfig(name="BrasilAPI", kind="brasilapi"),
        ProviderConfig(name="ViaCEP", kind="viacep"),
    ]


class LookupConfig(BaseModel):
    """Settings shared by every race."""

    timeout: float = Field(default=1.0, gt=0, description="Whole-race deadline in seconds.")
    providers: list[ProviderConfig] = Field(default_factory=_default_providers)
    user_agent: str | None = None

    @model_validator(mode="after")
    def _unique_names(self) -> "LookupConfig":
        seen: set[str] = set()
        for provider in self.providers:
            key = provider.name.lower()
            if key in seen:
                raise ValueError(f"Duplicate provider name: {provider.name}")
            seen.add(key)
        return self

    def enabled_providers(self, names: Iterable[str] | None = None) -> list[ProviderConfig]:
        """Return enabled providers, optionally restricted to ``names`` (case-insensitive)."""

        enabled = [provider for provider in self.providers if provider.enabled]
        if not names:
            return enabled
        wanted = {name.lower() for name in names}
        known = {provider.name.lower() for provider in enabled}
        unknown = sorted(wanted - known)
        if unknown:
            raise ValueError(f"Unknown or disabled provider(s): {', '.join(unknown)}")
        return [provider for provider in enabled if provider.name.lower() in wanted]


__all__ = ["LookupConfig", "ProviderConfig"]
