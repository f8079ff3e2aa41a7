"""Console rendering for race outcomes."""

from __future__ import annotations

from typing import Any, Sequence

from rich import box
from rich.table import Table

from ..config import ProviderConfig
from ..engine import ResultEnvelope

FIELD_LABELS = (
    ("code", "CEP"),
    ("street", "Street"),
    ("complement", "Complement"),
    ("neighborhood", "Neighborhood"),
    ("city", "City"),
    ("region", "State"),
)


def render_address(envelope: ResultEnvelope) -> Table:
    """Two-column table of the winning record."""

    if envelope.record is None:
        raise ValueError("render_address requires a successful envelope")
    table = Table(
        title=f"Response from {envelope.source}",
        box=box.SIMPLE_HEAD,
        show_header=False,
        pad_edge=False,
    )
    table.add_column("Field", style="dim", no_wrap=True)
    table.add_column("Value", style="cyan", overflow="fold")
    values = envelope.record.as_dict()
    for field, label in FIELD_LABELS:
        table.add_row(label, values[field] or "-")
    return table


def error_message(envelope: ResultEnvelope) -> str:
    kind = envelope.error_kind.value if envelope.error_kind else "unknown"
    return f"Lookup failed at {envelope.source} ({kind}): {envelope.error}"


def timeout_message(timeout: float) -> str:
    return f"Timeout of {timeout:g}s exceeded with no provider answer"


def envelope_payload(envelope: ResultEnvelope) -> dict[str, Any]:
    """JSON-serialisable view of an envelope."""

    if envelope.record is not None:
        return {"source": envelope.source, "ok": True, "address": envelope.record.as_dict()}
    return {
        "source": envelope.source,
        "ok": False,
        "error": {
            "kind": envelope.error_kind.value if envelope.error_kind else None,
            "message": str(envelope.error),
        },
    }


def timeout_payload(timeout: float) -> dict[str, Any]:
    return {
        "source": None,
        "ok": False,
        "error": {"kind": "timeout", "message": timeout_message(timeout)},
    }


def render_providers(providers: Sequence[ProviderConfig], default_templates: dict[str, str]) -> Table:
    table = Table(title=f"Providers · {len(providers)} configured", box=box.SIMPLE_HEAD)
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Kind", style="magenta")
    table.add_column("Enabled", style="green")
    table.add_column("URL template", style="yellow", overflow="fold")
    for provider in providers:
        template = provider.url_template or default_templates.get(provider.kind, "?")
        table.add_row(
            provider.name,
            provider.kind,
            "yes" if provider.enabled else "no",
            template,
        )
    return table


__all__ = [
    "envelope_payload",
    "error_message",
    "render_address",
    "render_providers",
    "timeout_message",
    "timeout_payload",
]
