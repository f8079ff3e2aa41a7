"""Typer CLI entrypoint for cep-lookup."""

from __future__ import annotations

import asyncio
import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import typer
import yaml
from rich.console import Console
from .config import ConfigLocator, ConfigRepository, LookupConfig
from .engine import FETCHER_REGISTRY, RaceTimeoutError, ResultEnvelope
from .logging_conf import configure_logging
from .orchestrator import LookupOrchestrator
from .ui import (
    envelope_payload,
    error_message,
    render_address,
    render_providers,
    timeout_message,
    timeout_payload,
)

app = typer.Typer(
    help="Resolve Brazilian postal codes (CEP) by racing several providers.",
    no_args_is_help=True,
    rich_markup_mode=None,
)
config_app = typer.Typer(
    name="config",
    help="Inspect or create the configuration file.",
    no_args_is_help=True,
    rich_markup_mode=None,
)

console = Console()

_CEP_PATTERN = re.compile(r"^\d{8}$")
_CEP_SEPARATORS = re.compile(r"[\s.\-]")


@dataclass
class AppState:
    repository: ConfigRepository
    orchestrator: LookupOrchestrator | None = None

    def get_orchestrator(self) -> LookupOrchestrator:
        if self.orchestrator is None:
            self.orchestrator = LookupOrchestrator.from_repository(self.repository)
        return self.orchestrator


def build_state(verbose: bool, config_path: Path | None = None) -> AppState:
    configure_logging(verbose=verbose)
    repository = ConfigRepository(ConfigLocator(config_path=config_path))
    return AppState(repository=repository)


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        state = build_state(verbose=False)
        ctx.obj = state
    return state


def _load_config(state: AppState) -> LookupConfig:
    try:
        return state.repository.load_config()
    except (ValueError, yaml.YAMLError, OSError) as exc:
        console.print(
            f"Invalid configuration {state.repository.path}: {exc}", style="red", markup=False
        )
        raise typer.Exit(code=1) from exc


def _usage_error(message: str) -> typer.Exit:
    console.print(message, style="red", markup=False)
    return typer.Exit(code=1)


def _normalise_code(value: str) -> str:
    code = _CEP_SEPARATORS.sub("", value.strip())
    if not _CEP_PATTERN.match(code):
        raise _usage_error(f"CEP must have 8 digits, e.g. 01001-000 (got {value!r}).")
    return code


async def _race_lookup(
    orchestrator: LookupOrchestrator,
    code: str,
    timeout: float | None,
    providers: list[str] | None,
) -> ResultEnvelope:
    async with orchestrator:
        return await orchestrator.lookup(code, timeout=timeout, providers=providers)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging.", is_flag=True),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to a YAML or JSON configuration file."
    ),
) -> None:
    try:
        state = build_state(verbose, config)
    except ValueError as exc:
        console.print(str(exc), style="red", markup=False)
        raise typer.Exit(code=1) from exc
    ctx.obj = state


@app.command("lookup", help="Resolve a CEP with whichever provider answers first.")
def lookup(
    ctx: typer.Context,
    code: str = typer.Argument(..., help="Postal code, with or without separators."),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", "-t", help="Whole-race deadline in seconds (default from config)."
    ),
    provider: Optional[List[str]] = typer.Option(
        None, "--provider", "-p", help="Restrict the race to these providers (repeatable)."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print a JSON document.", is_flag=True),
) -> None:
    state = _get_state(ctx)
    key = _normalise_code(code)
    if timeout is not None and timeout <= 0:
        raise _usage_error("--timeout must be greater than 0.")
    _load_config(state)
    orchestrator = state.get_orchestrator()
    try:
        envelope = asyncio.run(_race_lookup(orchestrator, key, timeout, provider))
    except RaceTimeoutError as exc:
        if as_json:
            typer.echo(json.dumps(timeout_payload(exc.timeout), ensure_ascii=False))
        else:
            console.print(timeout_message(exc.timeout), style="red", markup=False)
        raise typer.Exit(code=1) from exc
    except ValueError as exc:
        console.print(str(exc), style="red", markup=False)
        raise typer.Exit(code=1) from exc

    if as_json:
        typer.echo(json.dumps(envelope_payload(envelope), ensure_ascii=False))
    elif envelope.ok:
        console.print(render_address(envelope))
    else:
        console.print(error_message(envelope), style="red", markup=False)
    if not envelope.ok:
        raise typer.Exit(code=1)


@app.command("providers", help="List configured providers.")
def providers(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    config = _load_config(state)
    defaults = {kind: cls.url_template for kind, cls in FETCHER_REGISTRY.items()}
    console.print(render_providers(config.providers, defaults))


@config_app.command("show", help="Print the effective configuration as YAML.")
def config_show(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    config = _load_config(state)
    source = state.repository.path if state.repository.exists() else "built-in defaults"
    typer.echo(f"# {source}")
    typer.echo(yaml.safe_dump(config.model_dump(mode="json"), allow_unicode=True, sort_keys=False))


@config_app.command("init", help="Write the default configuration file.")
def config_init(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file.", is_flag=True),
) -> None:
    state = _get_state(ctx)
    if state.repository.exists() and not force:
        console.print(
            f"{state.repository.path} already exists; use --force to overwrite.",
            style="yellow",
            markup=False,
        )
        raise typer.Exit(code=1)
    path = state.repository.save_config(LookupConfig())
    console.print(f"Wrote default configuration to {path}", style="green", markup=False)


app.add_typer(config_app, name="config")


def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()
