from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config.loader import load_tools_config
from .config.models import ToolsConfig
from .session import CodebaseSession
from .tools.normalize import NormalizationError, loads_arguments
from .util.log import configure_logging

app = typer.Typer(add_completion=False, help="pycodebase: in-memory codebase tools for LLM agents.")
console = Console()


def _load_config(config: Path | None, cwd: Path) -> ToolsConfig:
    try:
        return load_tools_config(cwd=cwd, explicit_path=config)
    except (FileNotFoundError, ValueError) as e:
        raise typer.BadParameter(str(e), param_hint="--config")


def _read_payload(codebase: Path) -> str:
    p = codebase.expanduser()
    if not p.is_file():
        raise typer.BadParameter(f"codebase file not found: {p}", param_hint="CODEBASE")
    return p.read_text(encoding="utf-8")


@app.command()
def tools(
    config: Path = typer.Option(None, "--config", help="Optional JSON/YAML config path."),
    category: str = typer.Option(None, "--category", help="Only tools in this category."),
    as_json: bool = typer.Option(False, "--json", help="Print the manifest as JSON."),
):
    """Show the tool manifest handed to the model."""
    cfg = _load_config(config, Path.cwd())
    configure_logging(cfg.log_level)
    session = CodebaseSession.open(config=cfg)

    if as_json:
        console.print_json(json.dumps(session.tools.manifest(category=category)))
        return

    table = Table(title="pycodebase tools", border_style="bright_blue")
    table.add_column("name", style="bold green", no_wrap=True)
    table.add_column("version")
    table.add_column("permissions")
    table.add_column("description", overflow="fold")
    for t in session.tools.list(category=category):
        table.add_row(t.spec.name, t.spec.version, ", ".join(t.spec.permissions), t.spec.description)
    console.print(table)


@app.command()
def call(
    codebase: Path = typer.Argument(..., help="Codebase JSON file ({\"files\": [...]})."),
    tool: str = typer.Argument(..., help="Tool name, e.g. list_files."),
    args: str = typer.Option("{}", "--args", "-a", help="Tool arguments as JSON."),
    config: Path = typer.Option(None, "--config", help="Optional JSON/YAML config path."),
    save: bool = typer.Option(False, "--save", help="Write the updated codebase back to CODEBASE."),
    out: Path = typer.Option(None, "--out", help="Write the updated codebase to this path."),
    yes: bool = typer.Option(False, "--yes", help="Confirm tools that require approval."),
):
    """Run one tool call against a codebase file."""
    cfg = _load_config(config, Path.cwd())
    configure_logging(cfg.log_level)
    payload = _read_payload(codebase)

    session = CodebaseSession.open(config=cfg)
    if not session.store.replace_all(payload):
        # never continue on an empty store: --save would overwrite the file
        raise typer.BadParameter(
            f'{codebase} is not a valid {{"files": [...]}} codebase payload', param_hint="CODEBASE"
        )

    try:
        parsed = loads_arguments(args)
    except NormalizationError as e:
        raise typer.BadParameter(str(e), param_hint="--args")

    res = session.call(tool, parsed, confirmed=yes)
    console.print(
        Panel(
            res.to_text(),
            title=f"tool:{tool} ({'ok' if res.success else 'error'})",
            border_style="green" if res.success else "red",
        )
    )

    target = out or (codebase if save else None)
    if target is not None and res.success:
        target.expanduser().write_text(session.store.to_json(indent=2), encoding="utf-8")
        console.print(f"[dim]codebase written to {target}[/dim]")

    if not res.success:
        raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
