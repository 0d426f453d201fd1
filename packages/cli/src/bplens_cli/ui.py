"""Terminal rendering of a ReviewSession with rich.

render() is a pure function of the session: it builds a renderable for the
current mode and never changes session state.
"""

from __future__ import annotations

from dataclasses import dataclass

from rich import box
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from bplens_cli.keys import HELP_TEXT
from bplens_core.session import ErrorMode, JustificationMode, ModelSelectMode, ReviewSession


@dataclass(frozen=True)
class Palette:
    accent: str
    header_bg: str


PALETTES = (
    Palette(accent="blue", header_bg="navy_blue"),
    Palette(accent="green3", header_bg="dark_green"),
    Palette(accent="slate_blue1", header_bg="purple4"),
    Palette(accent="red1", header_bg="dark_red"),
)

# Rows taken by the panels under the table (3 panels of 3 lines) plus table chrome.
_CHROME_ROWS = 9 + 4


def visible_window(count: int, selected: int | None, size: int) -> tuple[int, int]:
    """Return the [start, end) slice of a list of count rows that keeps selected on screen."""
    size = max(size, 1)
    if count <= size:
        return 0, count
    centre = selected or 0
    start = min(max(centre - size // 2, 0), count - size)
    return start, start + size


def _palette(session: ReviewSession) -> Palette:
    return PALETTES[session.color_index % len(PALETTES)]


def _panel(content: RenderableType, palette: Palette, style: str = "") -> Panel:
    return Panel(content, box=box.DOUBLE, border_style=palette.accent, style=style)


def _table(palette: Palette) -> Table:
    return Table(
        box=box.SIMPLE_HEAD,
        expand=True,
        header_style=f"bold grey84 on {palette.header_bg}",
        row_styles=["", "on grey11"],
    )


def _diagnostics_table(session: ReviewSession, palette: Palette, height: int) -> Table:
    table = _table(palette)
    table.add_column("", width=2, no_wrap=True)
    table.add_column("Moniker", width=28, no_wrap=True)
    table.add_column("Severity", width=14, no_wrap=True)
    table.add_column("Path", ratio=1, no_wrap=True)

    start, end = visible_window(len(session.diagnostics), session.selected, height)
    for index in range(start, end):
        diagnostic = session.diagnostics[index]
        selected = index == session.selected
        marker = "█" if selected else ("✓" if diagnostic.justification else "")
        table.add_row(
            marker,
            diagnostic.moniker,
            diagnostic.severity,
            diagnostic.path,
            style=f"reverse {palette.accent}" if selected else None,
        )
    return table


def _models_table(session: ReviewSession, palette: Palette, height: int) -> Table:
    table = _table(palette)
    table.add_column("", width=2, no_wrap=True)
    table.add_column("Name", ratio=1)

    selected = session.mode.selected if isinstance(session.mode, ModelSelectMode) else None
    start, end = visible_window(len(session.models), selected, height)
    for index in range(start, end):
        is_selected = index == selected
        table.add_row(
            "█" if is_selected else "",
            session.models[index],
            style=f"reverse {palette.accent}" if is_selected else None,
        )
    return table


def _footer(session: ReviewSession, palette: Palette) -> Panel:
    text = Text(HELP_TEXT[type(session.mode)], justify="center")
    if session.status:
        text = Text.assemble((session.status, "bold green"), "  ", text, justify="center")
    return _panel(text, palette)


def render(session: ReviewSession, height: int = 40) -> RenderableType:
    """Build the screen for the session's current mode."""
    palette = _palette(session)
    rows = max(height - _CHROME_ROWS, 1)

    if isinstance(session.mode, ErrorMode):
        message = Text(session.error_message, justify="center", style="bold")
        return Group(_panel(message, palette), _footer(session, palette))

    if isinstance(session.mode, ModelSelectMode):
        return Group(_models_table(session, palette, rows), _footer(session, palette))

    editing = isinstance(session.mode, JustificationMode)
    selected = session.selected_diagnostic
    justification = Text(f"Justification: {selected.justification if selected else ''}")
    details = Text(selected.summary() if selected else "None selected")
    title = f"{session.model}  ({len(session.diagnostics)} diagnostics)" if session.model else None

    table = _diagnostics_table(session, palette, rows)
    table.title = title
    return Group(
        table,
        _panel(justification, palette, style="yellow" if editing else ""),
        _panel(details, palette),
        _footer(session, palette),
    )
