"""models command — list configured models and whether their files are present."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

console = Console()


@click.command("models")
@click.pass_context
def models_cmd(ctx):
    """List the models configured in .bplens.yml.

    Shows, for each model, whether the BPCheck.xml report and the
    suppressions file can be found under the configured model path.
    """
    from bplens_core.config import model_paths, validate_config
    from bplens_core.errors import ConfigError

    if ctx.obj.get("config_error"):
        raise click.UsageError(ctx.obj["config_error"])

    config = ctx.obj["config"]
    try:
        validate_config(config)
    except ConfigError as e:
        raise click.UsageError(str(e))

    models = config.get("models") or []
    if not models:
        console.print("[yellow]No models configured.[/yellow]")
        return

    table = Table(title=f"Models — {config['modelpath']}", show_header=True, header_style="bold cyan")
    table.add_column("Name", style="bold")
    table.add_column("Alias")
    table.add_column("Report", justify="center")
    table.add_column("Suppressions", justify="center")

    def _mark(present: bool) -> str:
        return "[green]yes[/green]" if present else "[red]no[/red]"

    for m in models:
        name = str(m["name"])
        try:
            paths = model_paths(config, name)
            report, suppressions = paths.report.exists(), paths.suppressions.exists()
        except ConfigError:
            report = suppressions = False
        table.add_row(name, str(m.get("alias") or ""), _mark(report), _mark(suppressions))

    console.print(table)
