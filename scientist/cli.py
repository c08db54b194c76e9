"""CLI entrypoint for Scientist."""
from __future__ import annotations

import asyncio
import importlib
import inspect
import json
from pathlib import Path
from typing import Any, Callable, List, Optional

import typer
from rich import print
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from scientist.config import LoggingConfig, configure_logging, load_app_config
from scientist.experiments import (
    ExperimentComparison,
    ExperimentOptions,
    ExperimentResult,
    experiment,
    experiment_async,
)

app = typer.Typer(help="Scientist CLI")
console = Console()


@app.command()
def run(
    control: str = typer.Argument(..., help="Control callable as module:attribute"),
    candidate: str = typer.Argument(..., help="Candidate callable as module:attribute"),
    name: Optional[str] = typer.Option(None, help="Experiment name (defaults to the control path)"),
    args: str = typer.Option("[]", help="JSON list of positional arguments"),
    kwargs: str = typer.Option("{}", help="JSON object of keyword arguments"),
    use_async: bool = typer.Option(
        False, "--async", help="Use the async wrapper (auto-detected from the control otherwise)"
    ),
    fail_on_mismatch: bool = typer.Option(False, help="Exit with code 2 when a difference is found"),
    config_path: Optional[Path] = typer.Option(
        None, help="Application config; its experiment settings decide whether the candidate runs"
    ),
    plain: bool = typer.Option(False, help="Print a plain text summary instead of a table"),
) -> None:
    """Call a control/candidate pair once and show what each side did.

    Example:
        scientist run operator:add mypkg.math:fast_add --args "[1, 2]"
    """
    experiment_name = name or control

    if config_path and not config_path.exists():
        print(f"[red]Error:[/red] Config file not found: {config_path}")
        raise typer.Exit(1)
    app_config = None
    if config_path:
        try:
            app_config = load_app_config(config_path)
        except Exception as e:
            print(f"[red]Error loading config:[/red] {escape(str(e))}")
            raise typer.Exit(1)
    configure_logging(app_config.logging if app_config else LoggingConfig())

    call_args = _parse_json(args, list, "--args")
    call_kwargs = _parse_json(kwargs, dict, "--kwargs")
    control_fn = _resolve_callable(control)
    candidate_fn = _resolve_callable(candidate)

    published: List[ExperimentResult] = []
    if app_config:
        settings = app_config.experiment_settings(experiment_name)
        options = ExperimentOptions.from_settings(settings, publish=published.append)
    else:
        options = ExperimentOptions(publish=published.append)

    is_async = use_async or inspect.iscoroutinefunction(control_fn)
    if is_async:
        wrapped = experiment_async(experiment_name, control_fn, candidate_fn, options)
    else:
        wrapped = experiment(experiment_name, control_fn, candidate_fn, options)

    print(f"[bold]Experiment:[/bold] {escape(experiment_name)}")

    control_error: Optional[Exception] = None
    try:
        if is_async:
            value = asyncio.run(wrapped(*call_args, **call_kwargs))
        else:
            value = wrapped(*call_args, **call_kwargs)
    except Exception as e:
        control_error = e

    if not published:
        print("[yellow]Experiment disabled:[/yellow] candidate was not run")
    else:
        result = published[0]
        if plain:
            console.print(ExperimentComparison.create_summary(result), markup=False, highlight=False)
        else:
            _display_result_table(result)
        if ExperimentComparison.has_mismatch(result):
            print(f"[red]Experiment {escape(experiment_name)}: difference found[/red]")
        else:
            print(f"[green]Experiment {escape(experiment_name)}: no difference[/green]")

    if control_error is not None:
        print(f"[red]Control raised:[/red] {type(control_error).__name__}: {escape(str(control_error))}")
        raise typer.Exit(1)

    print(f"[cyan]Returned:[/cyan] {escape(repr(value))}")

    if fail_on_mismatch and published and ExperimentComparison.has_mismatch(published[0]):
        raise typer.Exit(2)


@app.command()
def list_experiments(config_path: str = "config/base.yaml") -> None:
    """List experiments configured in the application config.

    Example:
        scientist list-experiments --config-path config/base.yaml
    """
    if not Path(config_path).exists():
        print(f"[red]Error:[/red] Config file not found: {config_path}")
        raise typer.Exit(1)

    try:
        app_config = load_app_config(config_path)
    except Exception as e:
        print(f"[red]Error loading config:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    if not app_config.experiments:
        print("[yellow]No experiments configured[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("name")
    table.add_column("enabled")
    table.add_column("description")
    for experiment_name, settings in sorted(app_config.experiments.items()):
        table.add_row(experiment_name, str(settings.enabled), settings.description or "")
    console.print(table)


def _parse_json(raw: str, expected: type, option: str) -> Any:
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        print(f"[red]Error parsing {option} JSON:[/red] {e}")
        raise typer.Exit(1)
    if not isinstance(value, expected):
        print(f"[red]Error:[/red] {option} must be a JSON {'list' if expected is list else 'object'}")
        raise typer.Exit(1)
    return value


def _resolve_callable(path: str) -> Callable[..., Any]:
    """Import ``module:attribute`` (attribute may be dotted) and return it."""
    module_name, _, attribute = path.partition(":")
    if not module_name or not attribute:
        print(f"[red]Error:[/red] Expected module:attribute, got {path!r}")
        raise typer.Exit(1)

    try:
        target: Any = importlib.import_module(module_name)
        for part in attribute.split("."):
            target = getattr(target, part)
    except (ImportError, AttributeError) as e:
        print(f"[red]Error:[/red] Cannot resolve {path}: {e}")
        raise typer.Exit(1)

    if not callable(target):
        print(f"[red]Error:[/red] {path} is not callable")
        raise typer.Exit(1)
    return target


def _display_result_table(result: ExperimentResult) -> None:
    """Helper to display a snapshot as a rich table."""
    table = Table(show_header=True, header_style="bold magenta")
    rows = ExperimentComparison.to_rows(result)

    for col in rows[0]:
        table.add_column(col)

    for row in rows:
        table.add_row(*["" if val is None else escape(val) for val in row.values()])

    console.print(table)


if __name__ == "__main__":
    app()
