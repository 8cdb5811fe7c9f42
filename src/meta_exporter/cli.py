"""Command-line interface for inspecting export declarations."""

from __future__ import annotations

import importlib
import json
import sys
from pathlib import Path  # noqa: TC003
from typing import Any, List, Optional

import typer
import yaml
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .core import Exporter, load_config
from .registry import Registry

app = typer.Typer(help="Metadata-aware exporter")
console = Console()


def _parse_tokens(tokens: List[str]) -> list[Any]:
    """Turn CLI tokens into request tokens; ``{...}`` tokens are YAML mappings."""
    parsed: list[Any] = []
    for token in tokens:
        if token.startswith("{"):
            options = yaml.safe_load(token)
            if not isinstance(options, dict):
                raise ValueError(f"Invalid options mapping: {token}")
            parsed.append(options)
        else:
            parsed.append(token)
    return parsed


def _load_exporter(module_name: str, config_file: Optional[Path]) -> Exporter:
    module = importlib.import_module(module_name)
    config = load_config(config_file) if config_file else None
    return Exporter.from_module(module, config=config)


@app.command()
def tags(
    module_name: str = typer.Argument(..., help="Provider module to inspect"),
) -> None:
    """List a provider's symbols and their tags."""
    try:
        registry = Registry.from_module(importlib.import_module(module_name))

        table = Table(title=f"Exports of {module_name}")
        table.add_column("Symbol", style="cyan")
        table.add_column("Tags", style="magenta")
        table.add_column("Exportable", style="green")

        for symbol in registry.symbols():
            metadata = registry.lookup_by_name(symbol)
            tag_list = ", ".join(sorted(metadata.tags)) if metadata else "(no metadata)"
            table.add_row(symbol, tag_list, "yes" if registry.is_exportable(symbol) else "no")

        console.print(table)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@app.command()
def explain(
    module_name: str = typer.Argument(..., help="Provider module to export from"),
    tokens: Optional[List[str]] = typer.Argument(None, help="Request tokens: names, :tags, {options}"),
    into: Optional[str] = typer.Option(None, "--into", help="Module whose names are checked for clashes"),
    on_clash: Optional[str] = typer.Option(None, "--on-clash", help="Clash policy: force or bail"),
    config_file: Optional[Path] = typer.Option(None, "--config", help="YAML exporter configuration"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
) -> None:
    """Show the binding plan for a request without binding anything."""
    try:
        exporter = _load_exporter(module_name, config_file)
        target = importlib.import_module(into) if into else {}
        options = {"on_clash": on_clash} if on_clash else {}

        report = exporter.dry_run(target, *_parse_tokens(tokens or []), **options)

        if json_output:
            console.print(json.dumps(report.json_summary, indent=2, default=str))
        else:
            console.print(Panel(report.text_summary, title="Export Plan"))

        if report.would_fail:
            sys.exit(1)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@app.command()
def validate(
    module_name: str = typer.Argument(..., help="Provider module to validate"),
    strict: bool = typer.Option(False, "--strict", help="Enable strict validation"),
) -> None:
    """Validate a provider's export declarations."""
    try:
        registry = Registry.from_module(importlib.import_module(module_name))

        from .validation import semantic_validate
        errors = semantic_validate(registry, strict=strict)

        if errors:
            console.print("[red]Validation failed:[/red]")
            for error in errors:
                console.print(f"  [red]• {error}[/red]")
            sys.exit(1)

        if strict:
            console.print("[green]✓ Exports are valid (strict mode)[/green]")
        else:
            console.print("[green]✓ Exports are valid[/green]")
    except Exception as e:
        console.print(f"[red]Validation error: {e}[/red]")
        sys.exit(1)


@app.command()
def print_schema() -> None:
    """Print the JSON schema for exporter configuration files."""
    from .models import ExporterConfig

    schema = ExporterConfig.model_json_schema()
    console.print(json.dumps(schema, indent=2))


if __name__ == "__main__":
    app()
