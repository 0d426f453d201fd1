"""Model and diagnostic source adapter.

Resolves a model name to its BPCheck.xml report and reads the diagnostics
from it. Informational diagnostics are filtered out here, before the review
session ever sees them.

Report shape:

  <Diagnostics>
    <Items>
      <Diagnostic>
        <DiagnosticType>BestPractices</DiagnosticType>
        <Severity>Warning</Severity>
        <ElementType>AxTable</ElementType>
        <Path>dynamics://Table/CustTable</Path>
        <Moniker>BPErrorTableNoTitleField</Moniker>
        <Message>Table has no title field.</Message>
      </Diagnostic>
    </Items>
  </Diagnostics>
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

from bplens_core.config import list_models, model_paths
from bplens_core.errors import DiagnosticLoadError
from bplens_core.models import Diagnostic, without_informational

logger = logging.getLogger(__name__)

_REQUIRED = ("DiagnosticType", "Severity", "Path", "Moniker")
_OPTIONAL = ("ElementType", "Message", "Justification")
_ATTRS = {
    "DiagnosticType": "diagnostic_type",
    "Severity": "severity",
    "ElementType": "element_type",
    "Path": "path",
    "Moniker": "moniker",
    "Message": "message",
    "Justification": "justification",
}


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _children(elem: ET.Element, name: str) -> list[ET.Element]:
    return [c for c in elem if isinstance(c.tag, str) and _local(c.tag) == name]


def _parse_diagnostic(elem: ET.Element, position: int) -> Diagnostic:
    fields = {_local(c.tag): c.text or "" for c in elem if isinstance(c.tag, str)}
    missing = [name for name in _REQUIRED if name not in fields]
    if missing:
        raise DiagnosticLoadError(f"Diagnostic #{position + 1} is missing {', '.join(missing)}")
    return Diagnostic(**{_ATTRS[name]: fields[name] for name in _REQUIRED + _OPTIONAL if name in fields})


def read_diagnostics(path: str | Path) -> list[Diagnostic]:
    """Read every diagnostic from a report file, informational ones included."""
    path = Path(path)
    if not path.exists():
        raise DiagnosticLoadError(f"{path.name} doesn't exist in model")
    try:
        root = ET.parse(path).getroot()
    except ET.ParseError as e:
        raise DiagnosticLoadError(f"Could not parse {path.name}: {e}") from e
    except OSError as e:
        raise DiagnosticLoadError(f"Could not read {path.name}: {e}") from e

    diagnostics: list[Diagnostic] = []
    for items in _children(root, "Items"):
        for elem in _children(items, "Diagnostic"):
            diagnostics.append(_parse_diagnostic(elem, len(diagnostics)))
    return diagnostics


class ModelSource:
    """Supplies model names and per-model diagnostics from the configured model path."""

    def __init__(self, config: dict):
        self._config = config

    def list_models(self) -> list[str]:
        return list_models(self._config)

    def load_diagnostics(self, model: str) -> list[Diagnostic]:
        """Return the reviewable diagnostics for model (informational ones removed).

        Raises ConfigError if the model cannot be located and
        DiagnosticLoadError if its report is missing or malformed.
        """
        paths = model_paths(self._config, model)
        diagnostics = read_diagnostics(paths.report)
        reviewable = without_informational(diagnostics)
        logger.debug(
            "Loaded %d diagnostic(s) for %s (%d informational skipped)",
            len(reviewable),
            model,
            len(diagnostics) - len(reviewable),
        )
        return reviewable

    def suppressions_path(self, model: str) -> Path:
        return model_paths(self._config, model).suppressions
