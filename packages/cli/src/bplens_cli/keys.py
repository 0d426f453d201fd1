"""Key bindings: raw keypresses to session events, per mode.

Keys come from click.getchar(), which returns whole escape sequences for
arrow keys (POSIX "\\x1b[A", Windows "\\xe0H"). normalize_key() folds those
into names; bind() maps a name to the event for the current mode.
"""

from __future__ import annotations

from bplens_core.session import (
    AppendChar,
    Backspace,
    ConfirmModel,
    CycleTheme,
    EnterEdit,
    ErrorMode,
    Event,
    ExitEdit,
    JustificationMode,
    Mode,
    ModelSelectMode,
    MoveSelection,
    NormalMode,
    Quit,
    Save,
    SwitchModel,
)

_NAMED_KEYS = {
    "\r": "enter",
    "\n": "enter",
    "\x1b": "esc",
    "\x7f": "backspace",
    "\x08": "backspace",
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
    "\xe0H": "up",
    "\xe0P": "down",
    "\xe0M": "right",
    "\xe0K": "left",
    "\x00H": "up",
    "\x00P": "down",
    "\x00M": "right",
    "\x00K": "left",
}

_NORMAL = {
    "q": Quit(),
    "j": MoveSelection(1),
    "down": MoveSelection(1),
    "k": MoveSelection(-1),
    "up": MoveSelection(-1),
    "l": CycleTheme(1),
    "right": CycleTheme(1),
    "h": CycleTheme(-1),
    "left": CycleTheme(-1),
    "w": Save(),
    "enter": EnterEdit(),
    "m": SwitchModel(),
    "esc": SwitchModel(),
}

_MODEL_SELECT = {
    "q": Quit(),
    "esc": Quit(),
    "j": MoveSelection(1),
    "down": MoveSelection(1),
    "k": MoveSelection(-1),
    "up": MoveSelection(-1),
    "l": CycleTheme(1),
    "right": CycleTheme(1),
    "h": CycleTheme(-1),
    "left": CycleTheme(-1),
    "enter": ConfirmModel(),
}

_ERROR = {
    "q": Quit(),
    "esc": Quit(),
}

HELP_TEXT = {
    NormalMode: (
        "(Enter) enter justification | (q) quit | (↑) move up | (↓) move down | "
        "(←/→) theme | (w) write file | (Esc) switch model"
    ),
    JustificationMode: "(Enter) go back",
    ModelSelectMode: "(Enter) select | (↑/↓) move | (Esc) quit",
    ErrorMode: "(Esc) quit",
}


def normalize_key(raw: str) -> str:
    """Return a key name ("enter", "up", ...) or the character itself."""
    return _NAMED_KEYS.get(raw, raw)


def bind(mode: Mode, raw: str) -> Event | None:
    """Translate a raw keypress into an event for mode, or None if unbound."""
    key = normalize_key(raw)

    if isinstance(mode, JustificationMode):
        if key in ("enter", "esc"):
            return ExitEdit()
        if key == "backspace":
            return Backspace()
        if len(key) == 1 and key.isprintable():
            return AppendChar(key)
        return None

    if isinstance(mode, NormalMode):
        return _NORMAL.get(key)
    if isinstance(mode, ModelSelectMode):
        return _MODEL_SELECT.get(key)
    return _ERROR.get(key)
