"""Fold user-entered justifications into a suppression ledger.

The merge is a key-based upsert: the live findings propose, the ledger
accumulates. Nothing is ever removed from the ledger and an existing
justification is only overwritten by a non-empty one, so entries for
diagnostics that have since disappeared from the report survive every save.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from bplens_store.ledger import SuppressionLedger, UpsertOutcome
from bplens_store.models import Finding, SuppressionEntry

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """Counts of what a reconcile pass did to the ledger."""

    added: int = 0
    updated: int = 0
    unchanged: int = 0
    skipped: int = 0  # findings without a justification

    @property
    def changed(self) -> bool:
        return bool(self.added or self.updated)


def reconcile(findings: Iterable[Finding], ledger: SuppressionLedger) -> ReconcileResult:
    """Upsert every justified finding into ledger, in iteration order."""
    result = ReconcileResult()
    for finding in findings:
        if finding.justification == "":
            result.skipped += 1
            continue
        outcome = ledger.upsert(SuppressionEntry.from_finding(finding))
        if outcome is UpsertOutcome.ADDED:
            result.added += 1
        elif outcome is UpsertOutcome.UPDATED:
            result.updated += 1
        else:
            result.unchanged += 1
    return result


def apply_justifications(findings: Iterable[Finding], path: str | Path) -> ReconcileResult:
    """Re-read the suppression file at path, merge findings into it, and write it back.

    The file is read fresh on every call so edits made outside this process
    between two saves are not clobbered. Load, serialize and write failures
    propagate as LedgerError subclasses; the file is only replaced once the
    new content has been fully produced.
    """
    ledger = SuppressionLedger.load(path)
    result = reconcile(findings, ledger)
    ledger.save(path)
    logger.debug(
        "Reconciled %s: %d added, %d updated, %d unchanged, %d skipped",
        path,
        result.added,
        result.updated,
        result.unchanged,
        result.skipped,
    )
    return result
