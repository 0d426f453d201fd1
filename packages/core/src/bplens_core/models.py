"""Diagnostic data model.

Decoupled from bplens_store: the store sees a Diagnostic only through the
attributes it needs (type, severity, path, moniker, justification).
"""

from __future__ import annotations

from dataclasses import dataclass

INFORMATIONAL = "Informational"


@dataclass
class Diagnostic:
    """One finding from a best-practice report.

    Identified by (path, moniker). Only the justification is ever edited,
    and only one character at a time at the end of the string.
    """

    diagnostic_type: str
    severity: str  # "Error" | "Warning" | "Informational" | ...
    path: str
    moniker: str
    message: str = ""
    justification: str = ""
    element_type: str = ""

    @property
    def key(self) -> tuple[str, str]:
        return (self.path, self.moniker)

    @property
    def is_informational(self) -> bool:
        return self.severity == INFORMATIONAL

    def append_justification(self, char: str) -> None:
        self.justification += char

    def backspace_justification(self) -> None:
        self.justification = self.justification[:-1]

    def summary(self) -> str:
        return f"Message: {self.message}  --  Path: {self.path}"


def without_informational(diagnostics: list[Diagnostic]) -> list[Diagnostic]:
    """Drop diagnostics that are informational only; they are never reviewed."""
    return [d for d in diagnostics if not d.is_informational]
