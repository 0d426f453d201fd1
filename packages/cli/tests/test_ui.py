"""Tests for terminal rendering."""

from rich.console import Console

from bplens_cli.ui import PALETTES, render, visible_window
from bplens_core.models import Diagnostic
from bplens_core.session import JustificationMode, NormalMode, ReviewSession, start_session


def _text(renderable) -> str:
    console = Console(width=140, record=True, color_system=None)
    console.print(renderable)
    return console.export_text()


def _session(mode=None):
    diagnostics = [
        Diagnostic(
            diagnostic_type="BestPractices",
            severity="Warning",
            path="dynamics://Table/CustTable",
            moniker="BPErrorTableNoTitleField",
            message="Table has no title field.",
            justification="Title comes from the view.",
        )
    ]
    return ReviewSession(
        models=["Contoso"],
        mode=mode or NormalMode(),
        diagnostics=diagnostics,
        selected=0,
        model="Contoso",
    )


class TestVisibleWindow:
    def test_short_list_fully_visible(self):
        assert visible_window(3, 2, 10) == (0, 3)

    def test_selection_kept_in_view(self):
        start, end = visible_window(100, 80, 10)
        assert start <= 80 < end
        assert end - start == 10

    def test_window_clamped_at_end(self):
        assert visible_window(100, 99, 10) == (90, 100)


class TestRender:
    def test_normal_mode_shows_diagnostic_and_details(self):
        text = _text(render(_session()))
        assert "BPErrorTableNoTitleField" in text
        assert "Justification: Title comes from the view." in text
        assert "Message: Table has no title field." in text
        assert "(w) write file" in text

    def test_justification_mode_footer(self):
        text = _text(render(_session(JustificationMode())))
        assert "(Enter) go back" in text

    def test_model_select_lists_models(self):
        text = _text(render(start_session(["Contoso", "Fabrikam"])))
        assert "Contoso" in text and "Fabrikam" in text

    def test_error_mode_shows_message(self):
        text = _text(render(start_session([], error="Base model path in config doesn't exist")))
        assert "Base model path in config doesn't exist" in text
        assert "(Esc) quit" in text

    def test_empty_list_shows_none_selected(self):
        session = _session()
        session.diagnostics = []
        session.selected = None
        assert "None selected" in _text(render(session))

    def test_every_palette_renders(self):
        session = _session()
        for index in range(len(PALETTES)):
            session.color_index = index
            assert "BPErrorTableNoTitleField" in _text(render(session))
