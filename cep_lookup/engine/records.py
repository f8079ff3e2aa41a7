"""Provider-agnostic address record and the result envelope."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import ErrorKind, FetchError


@dataclass(frozen=True, slots=True)
class Address:
    """Normalized address every fetcher produces."""

    code: str
    street: str | None = None
    complement: str | None = None
    neighborhood: str | None = None
    city: str | None = None
    region: str | None = None

    def __post_init__(self) -> None:
        if not self.code:
            raise ValueError("Address code cannot be empty")

    def as_dict(self) -> dict[str, str | None]:
        return {
            "code": self.code,
            "street": self.street,
            "complement": self.complement,
            "neighborhood": self.neighborhood,
            "city": self.city,
            "region": self.region,
        }


@dataclass(frozen=True, slots=True)
class ResultEnvelope:
    """Outcome of one fetcher: a record or an error, always tagged with its source."""

    source: str
    record: Address | None = None
    error: FetchError | None = None

    def __post_init__(self) -> None:
        if (self.record is None) == (self.error is None):
            raise ValueError("ResultEnvelope requires exactly one of record or error")

    @classmethod
    def success(cls, source: str, record: Address) -> "ResultEnvelope":
        return cls(source=source, record=record)

    @classmethod
    def failure(cls, source: str, error: FetchError) -> "ResultEnvelope":
        return cls(source=source, error=error)

    @property
    def ok(self) -> bool:
        return self.record is not None

    @property
    def error_kind(self) -> ErrorKind | None:
        return self.error.kind if self.error is not None else None


__all__ = ["Address", "ResultEnvelope"]
