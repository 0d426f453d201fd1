"""SessionDriver — executes the effects the review session asks for.

The session state machine is pure; this is where its effects meet the
filesystem. The driver is also the bridge between the two libraries:
bplens_core supplies diagnostics, bplens_store persists them, and neither
imports the other.

Every recoverable failure (configuration, report loading, suppression file
load/serialize/write) is caught here and fed back as ActionFailed, which
puts the session on its error screen. Nothing in this path ends the process.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Protocol

from bplens_core.errors import BplensError
from bplens_core.models import Diagnostic
from bplens_core.session import (
    ActionFailed,
    DiagnosticsLoaded,
    Effect,
    Event,
    LoadDiagnostics,
    ReviewSession,
    SaveCompleted,
    Terminate,
    WriteSuppressions,
    step,
)
from bplens_store.errors import LedgerError
from bplens_store.reconcile import ReconcileResult, apply_justifications

logger = logging.getLogger(__name__)


class DiagnosticSource(Protocol):
    def list_models(self) -> list[str]: ...

    def load_diagnostics(self, model: str) -> list[Diagnostic]: ...

    def suppressions_path(self, model: str) -> Path: ...


SuppressionWriter = Callable[[list[Diagnostic], Path], ReconcileResult]


class SessionDriver:
    """Feeds events into a ReviewSession and runs the resulting effects to completion."""

    def __init__(
        self,
        session: ReviewSession,
        source: DiagnosticSource,
        writer: SuppressionWriter = apply_justifications,
    ):
        self.session = session
        self._source = source
        self._writer = writer
        self.finished = False

    def dispatch(self, event: Event) -> bool:
        """Apply event and any follow-up feedback events.

        Returns False once the session has asked to terminate.
        """
        pending: list[Event] = [event]
        while pending and not self.finished:
            effects = step(self.session, pending.pop(0))
            for effect in effects:
                feedback = self._execute(effect)
                if feedback is not None:
                    pending.append(feedback)
        return not self.finished

    def _execute(self, effect: Effect) -> Event | None:
        if isinstance(effect, Terminate):
            logger.debug("Session terminated")
            self.finished = True
            return None
        if isinstance(effect, LoadDiagnostics):
            return self._load(effect.model)
        if isinstance(effect, WriteSuppressions):
            return self._write(effect.model, list(effect.diagnostics))
        raise TypeError(f"Unknown effect: {effect!r}")

    def _load(self, model: str) -> Event:
        try:
            diagnostics = self._source.load_diagnostics(model)
        except BplensError as e:
            logger.warning("Could not load diagnostics for %s: %s", model, e)
            return ActionFailed(str(e))
        return DiagnosticsLoaded(model=model, diagnostics=tuple(diagnostics))

    def _write(self, model: str, diagnostics: list[Diagnostic]) -> Event:
        try:
            path = self._source.suppressions_path(model)
            result = self._writer(diagnostics, path)
        except (BplensError, LedgerError) as e:
            logger.warning("Could not save suppressions for %s (%s): %s", model, type(e).__name__, e)
            return ActionFailed(str(e))
        logger.debug("Saved suppressions for %s: %d added, %d updated", model, result.added, result.updated)
        return SaveCompleted(added=result.added, updated=result.updated)
