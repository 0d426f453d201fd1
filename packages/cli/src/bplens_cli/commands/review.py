"""review command — interactive diagnostic review and suppression editing."""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.live import Live

from bplens_cli.driver import SessionDriver
from bplens_cli.keys import bind
from bplens_cli.ui import PALETTES, render
from bplens_core.errors import BplensError
from bplens_core.session import ConfirmModel, ModelSelectMode, ReviewSession, start_session

console = Console()
logger = logging.getLogger(__name__)


def build_session(config: dict, model: str | None = None, config_error: str | None = None) -> SessionDriver:
    """Validate config and create a driver whose session is ready for input.

    Configuration problems do not raise: the session starts on its error
    screen with the message instead. When model is given (name or alias)
    the model selection step is skipped.
    """
    from bplens_core.config import resolve_model, validate_config
    from bplens_core.errors import ConfigError
    from bplens_core.source import ModelSource

    source = ModelSource(config)
    try:
        if config_error is not None:
            raise ConfigError(config_error)
        validate_config(config)
        models = source.list_models()
        preselected = resolve_model(config, model) if model else None
    except BplensError as e:
        logger.warning("Startup failed: %s", e)
        session = start_session([], error=str(e))
        session.palette_count = len(PALETTES)
        return SessionDriver(session, source)

    session = start_session(models)
    session.palette_count = len(PALETTES)
    driver = SessionDriver(session, source)
    if preselected is not None and isinstance(session.mode, ModelSelectMode):
        session.mode.selected = models.index(preselected)
        driver.dispatch(ConfirmModel())
    return driver


def run_interactive(driver: SessionDriver) -> ReviewSession:
    """Read keys and redraw until the session terminates."""
    height = console.size.height
    with Live(render(driver.session, height), console=console, screen=True, auto_refresh=False) as live:
        while True:
            event = bind(driver.session.mode, click.getchar())
            if event is None:
                continue
            if not driver.dispatch(event):
                break
            live.update(render(driver.session, console.size.height), refresh=True)
    return driver.session


@click.command("review")
@click.option(
    "--model",
    "model",
    default=None,
    help="Model name or alias to open directly, skipping model selection.",
)
@click.pass_context
def review_cmd(ctx, model: str | None):
    """Review best-practice diagnostics and record suppression justifications.

    \b
    Keys (diagnostics view):
      j/k or ↑/↓   move selection        Enter  edit justification
      h/l or ←/→   change colours        w      write suppressions file
      m or Esc     switch model          q      quit
    """
    driver = build_session(ctx.obj["config"], model, config_error=ctx.obj.get("config_error"))
    session = run_interactive(driver)

    if session.status:
        console.print(f"[green]{session.status}[/green]")
