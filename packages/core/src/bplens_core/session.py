"""Review session state machine.

The session is a plain object mutated by step(session, event). step() never
touches the filesystem: anything with a side effect (loading a model's
diagnostics, writing the suppression file, ending the session) is returned
as an Effect for the caller to execute. The caller reports the outcome back
with a feedback event (DiagnosticsLoaded, SaveCompleted, ActionFailed).

Modes:
  ModelSelectMode  choose a model from the configured list (initial mode)
  NormalMode       browse the diagnostics of the active model
  JustificationMode  type a justification for the selected diagnostic
  ErrorMode        show a message; the only way out is quit
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from bplens_core.models import Diagnostic, without_informational

DEFAULT_PALETTE_COUNT = 4


# ---------------------------------------------------------------------------
# Modes
# ---------------------------------------------------------------------------


@dataclass
class NormalMode:
    pass


@dataclass
class JustificationMode:
    pass


@dataclass
class ModelSelectMode:
    selected: int | None = None  # index into ReviewSession.models


@dataclass
class ErrorMode:
    message: str


Mode = Union[NormalMode, JustificationMode, ModelSelectMode, ErrorMode]


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class MoveSelection:
    delta: int


@dataclass(frozen=True)
class CycleTheme:
    delta: int


@dataclass(frozen=True)
class Save:
    pass


@dataclass(frozen=True)
class EnterEdit:
    pass


@dataclass(frozen=True)
class ExitEdit:
    pass


@dataclass(frozen=True)
class AppendChar:
    char: str


@dataclass(frozen=True)
class Backspace:
    pass


@dataclass(frozen=True)
class SwitchModel:
    pass


@dataclass(frozen=True)
class ConfirmModel:
    pass


@dataclass(frozen=True)
class DiagnosticsLoaded:
    model: str
    diagnostics: tuple[Diagnostic, ...]


@dataclass(frozen=True)
class SaveCompleted:
    added: int = 0
    updated: int = 0


@dataclass(frozen=True)
class ActionFailed:
    message: str


Event = Union[
    Quit,
    MoveSelection,
    CycleTheme,
    Save,
    EnterEdit,
    ExitEdit,
    AppendChar,
    Backspace,
    SwitchModel,
    ConfirmModel,
    DiagnosticsLoaded,
    SaveCompleted,
    ActionFailed,
]


# ---------------------------------------------------------------------------
# Effects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LoadDiagnostics:
    model: str


@dataclass(frozen=True)
class WriteSuppressions:
    model: str
    diagnostics: tuple[Diagnostic, ...]


@dataclass(frozen=True)
class Terminate:
    pass


Effect = Union[LoadDiagnostics, WriteSuppressions, Terminate]


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


@dataclass
class ReviewSession:
    models: list[str]
    mode: Mode
    diagnostics: list[Diagnostic] = field(default_factory=list)
    selected: int | None = None  # index into diagnostics
    color_index: int = 0
    palette_count: int = DEFAULT_PALETTE_COUNT
    model: str | None = None
    status: str = ""

    @property
    def error_message(self) -> str:
        return self.mode.message if isinstance(self.mode, ErrorMode) else ""

    @property
    def selected_diagnostic(self) -> Diagnostic | None:
        if self.selected is None or not 0 <= self.selected < len(self.diagnostics):
            return None
        return self.diagnostics[self.selected]

    @property
    def selected_model(self) -> str | None:
        if not isinstance(self.mode, ModelSelectMode):
            return None
        index = self.mode.selected
        if index is None or not 0 <= index < len(self.models):
            return None
        return self.models[index]

    @property
    def visible_count(self) -> int:
        """Length of the list the current mode lets the user move through."""
        if isinstance(self.mode, ModelSelectMode):
            return len(self.models)
        if isinstance(self.mode, (NormalMode, JustificationMode)):
            return len(self.diagnostics)
        return 0


def start_session(models: list[str], error: str | None = None) -> ReviewSession:
    """Create the initial session: model selection, or an error screen if startup failed."""
    if error is not None:
        return ReviewSession(models=list(models), mode=ErrorMode(error))
    if not models:
        return ReviewSession(models=[], mode=ErrorMode("No models configured in .bplens.yml"))
    return ReviewSession(models=list(models), mode=ModelSelectMode(selected=0))


def wrap_index(current: int | None, delta: int, count: int) -> int | None:
    """Move current by delta over a list of count items, wrapping at both ends."""
    if count <= 0:
        return None
    if current is None:
        return 0
    return (current + delta) % count


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


def _cycle_theme(session: ReviewSession, delta: int) -> None:
    session.color_index = (session.color_index + delta) % session.palette_count


def _step_normal(session: ReviewSession, event: Event) -> list[Effect]:
    if isinstance(event, Quit):
        return [Terminate()]
    if isinstance(event, MoveSelection):
        session.selected = wrap_index(session.selected, event.delta, len(session.diagnostics))
    elif isinstance(event, CycleTheme):
        _cycle_theme(session, event.delta)
    elif isinstance(event, Save):
        if session.model is not None:
            return [WriteSuppressions(model=session.model, diagnostics=tuple(session.diagnostics))]
    elif isinstance(event, EnterEdit):
        session.status = ""
        session.mode = JustificationMode()
    elif isinstance(event, SwitchModel):
        current = session.models.index(session.model) if session.model in session.models else 0
        session.mode = ModelSelectMode(selected=current if session.models else None)
    elif isinstance(event, SaveCompleted):
        session.status = f"Saved suppressions: {event.added} added, {event.updated} updated"
    return []


def _step_justification(session: ReviewSession, event: Event) -> list[Effect]:
    diagnostic = session.selected_diagnostic
    if isinstance(event, AppendChar):
        if diagnostic is not None:
            diagnostic.append_justification(event.char)
    elif isinstance(event, Backspace):
        if diagnostic is not None:
            diagnostic.backspace_justification()
    elif isinstance(event, ExitEdit):
        session.mode = NormalMode()
    return []


def _step_model_select(session: ReviewSession, event: Event) -> list[Effect]:
    mode = session.mode
    if isinstance(event, Quit):
        return [Terminate()]
    if isinstance(event, MoveSelection):
        mode.selected = wrap_index(mode.selected, event.delta, len(session.models))
    elif isinstance(event, CycleTheme):
        _cycle_theme(session, event.delta)
    elif isinstance(event, ConfirmModel):
        model = session.selected_model
        if model is not None:
            return [LoadDiagnostics(model=model)]
    elif isinstance(event, DiagnosticsLoaded):
        # The list is replaced wholesale; no index into the old list survives.
        session.diagnostics = without_informational(list(event.diagnostics))
        session.selected = 0 if session.diagnostics else None
        session.model = event.model
        session.status = ""
        session.mode = NormalMode()
    return []


def _step_error(session: ReviewSession, event: Event) -> list[Effect]:
    if isinstance(event, Quit):
        return [Terminate()]
    return []


_HANDLERS = {
    NormalMode: _step_normal,
    JustificationMode: _step_justification,
    ModelSelectMode: _step_model_select,
    ErrorMode: _step_error,
}


def step(session: ReviewSession, event: Event) -> list[Effect]:
    """Apply event to session and return the effects the caller must execute.

    Events that mean nothing in the current mode are ignored.
    """
    if isinstance(event, ActionFailed):
        # In-memory diagnostics (and their justifications) are left as they are
        # so a save can be retried without retyping anything.
        session.mode = ErrorMode(event.message)
        return []
    return _HANDLERS[type(session.mode)](session, event)
