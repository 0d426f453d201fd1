"""CLI entry point for bplens.

Commands:
  review   — interactively review diagnostics and write suppression justifications
  models   — list configured models and whether their files are present
"""

from __future__ import annotations

import importlib.metadata
import logging

import click

from bplens_cli.commands.models import models_cmd
from bplens_cli.commands.review import review_cmd

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _configure_logging(log_file: str | None, verbose: bool) -> None:
    """Send log records to log_file; the review screen owns the terminal."""
    if log_file is None:
        return
    logging.basicConfig(
        filename=log_file,
        level=logging.DEBUG if verbose else logging.INFO,
        format=_LOG_FORMAT,
    )


@click.group()
@click.version_option(
    version=importlib.metadata.version("bplens"),
    prog_name="bplens",
)
@click.option(
    "--config",
    "config_path",
    default=".bplens.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="BPLENS_CONFIG",
)
@click.option("--modelpath", default=None, help="Base model path. Overrides config file.")
@click.option("--log-file", default=None, help="Write log messages to this file.")
@click.option("--verbose", "-v", is_flag=True, help="Include debug messages in the log file.")
@click.pass_context
def main(ctx: click.Context, config_path: str, modelpath: str | None, log_file: str | None, verbose: bool):
    """Review best-practice diagnostics and maintain suppression files."""
    from bplens_core.config import load_config
    from bplens_core.errors import ConfigError

    _configure_logging(log_file, verbose)
    ctx.ensure_object(dict)

    # A broken config file is reported by each command in its own way:
    # review shows it on the error screen, models exits with a usage error.
    try:
        ctx.obj["config"] = load_config(config_path, cli_overrides={"modelpath": modelpath})
        ctx.obj["config_error"] = None
    except ConfigError as e:
        ctx.obj["config"] = {}
        ctx.obj["config_error"] = str(e)


main.add_command(review_cmd)
main.add_command(models_cmd)
