"""Suppression record data models.

Decoupled from bplens_core so the store layer can be used independently:
anything exposing the finding attributes below can be folded into a ledger.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


class Finding(Protocol):
    """Structural shape of a live diagnostic as seen by the store."""

    diagnostic_type: str
    severity: str
    path: str
    moniker: str
    justification: str


@dataclass
class SuppressionEntry:
    """A persisted decision to suppress one diagnostic.

    Keyed by (path, moniker). An entry may outlive the diagnostic it was
    written for; stale entries are kept untouched.
    """

    diagnostic_type: str
    severity: str
    path: str
    moniker: str
    message: str = ""
    justification: str = ""
    element_type: str = ""

    @property
    def key(self) -> tuple[str, str]:
        return (self.path, self.moniker)

    @classmethod
    def from_finding(cls, finding: Finding) -> SuppressionEntry:
        """Copy a live finding into a new entry.

        The finding's message is explanatory text from the report and is
        never written into the suppression file.
        """
        return cls(
            diagnostic_type=finding.diagnostic_type,
            severity=finding.severity,
            path=finding.path,
            moniker=finding.moniker,
            justification=finding.justification,
        )
