"""SuppressionLedger — the hand-curated suppression file, held in memory for one save.

File shape (element names as written by the Dynamics best-practice tooling):

  <IgnoreDiagnostics>
    <Name>ContosoCore_BPSuppressions</Name>
    <Items>
      <Diagnostic>
        <DiagnosticType>BestPractices</DiagnosticType>
        <Severity>Warning</Severity>
        <Path>dynamics://Table/CustTable/Method/validate</Path>
        <Moniker>BPErrorMethodNotDocumented</Moniker>
        <Justification>Legacy API, documented externally.</Justification>
      </Diagnostic>
    </Items>
  </IgnoreDiagnostics>

The ledger is an ordered list of entries plus an index from (path, moniker)
to list position. Order is significant: existing entries never move and new
entries go to the tail, so a save produces the smallest possible diff.

A loaded ledger keeps the parsed document and edits it in place: an update
rewrites one <Justification> element, an addition appends one <Diagnostic>
under <Items>. Everything else in the file (comments, unknown elements,
prefixes and namespace declarations) is written back as it was read.
There is no long-lived ledger: every save re-reads the file first.
"""

from __future__ import annotations

import enum
import logging
import os
import shutil
import tempfile
import xml.etree.ElementTree as ET
from dataclasses import replace
from pathlib import Path
from typing import Iterable, Iterator

from bplens_store.errors import (
    LedgerLoadError,
    LedgerNotFoundError,
    LedgerParseError,
    LedgerSerializeError,
    LedgerWriteError,
)
from bplens_store.models import SuppressionEntry
from bplens_store.xmlformat import XML_NAMESPACE, format_xml, qualify_name

logger = logging.getLogger(__name__)

DEFAULT_ROOT_TAG = "IgnoreDiagnostics"

# (element name, entry attribute, required on load, written when empty)
_FIELDS = (
    ("DiagnosticType", "diagnostic_type", True, True),
    ("Severity", "severity", True, True),
    ("ElementType", "element_type", False, False),
    ("Path", "path", True, True),
    ("Moniker", "moniker", True, True),
    ("Message", "message", False, False),
    ("Justification", "justification", False, True),
)


class UpsertOutcome(enum.Enum):
    ADDED = "added"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


class _DocumentBuilder:
    """XMLParser target building a tree whose names are kept as written.

    ElementTree normally expands prefixed names to {uri}local and invents
    its own prefixes on output. Here every tag keeps its prefix and every
    namespace declaration stays a plain xmlns attribute on the element that
    made it, so the tree serializes back to the same document. Comments and
    processing instructions inside the root element are kept.
    """

    def __init__(self):
        self._builder = ET.TreeBuilder(insert_comments=True, insert_pis=True)
        self._pending: list[tuple[str, str]] = []
        self._scopes: list[dict[str, str]] = [{"xml": XML_NAMESPACE}]
        self._names: list[str] = []

    def start_ns(self, prefix, uri):
        self._pending.append((prefix or "", uri))

    def start(self, tag, attrib):
        bindings = dict(self._scopes[-1])
        attrs = {}
        for prefix, uri in self._pending:
            bindings[prefix] = uri
            attrs[_xmlns(prefix)] = uri
        self._pending = []
        for key, value in attrib.items():
            attrs[qualify_name(key, bindings, attribute=True)] = value

        name = qualify_name(tag, bindings)
        self._scopes.append(bindings)
        self._names.append(name)
        return self._builder.start(name, attrs)

    def end(self, tag):
        self._scopes.pop()
        return self._builder.end(self._names.pop())

    def data(self, data):
        self._builder.data(data)

    def comment(self, text):
        return self._builder.comment(text)

    def pi(self, target, data):
        return self._builder.pi(target, data)

    def close(self):
        return self._builder.close()


def _xmlns(prefix: str) -> str:
    return f"xmlns:{prefix}" if prefix else "xmlns"


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1].rsplit(":", 1)[-1]


def _prefix(tag: str) -> str:
    """Return the "p:" part of a prefixed tag, or an empty string."""
    return tag[: len(tag) - len(_local(tag))]


def _child(elem: ET.Element, name: str) -> ET.Element | None:
    for child in elem:
        if isinstance(child.tag, str) and _local(child.tag) == name:
            return child
    return None


def _children(elem: ET.Element, name: str) -> list[ET.Element]:
    return [c for c in elem if isinstance(c.tag, str) and _local(c.tag) == name]


def _child_text(elem: ET.Element, name: str) -> str | None:
    child = _child(elem, name)
    return None if child is None else child.text or ""


def _entry_from_element(elem: ET.Element, position: int) -> SuppressionEntry:
    values = {}
    for name, attr, required, _ in _FIELDS:
        text = _child_text(elem, name)
        if text is None:
            if required:
                raise LedgerParseError(f"Suppression entry #{position + 1} is missing <{name}>")
            text = ""
        values[attr] = text
    return SuppressionEntry(**values)


def _element_from_entry(entry: SuppressionEntry, prefix: str = "") -> ET.Element:
    diag = ET.Element(f"{prefix}Diagnostic")
    for name, attr, _, write_empty in _FIELDS:
        value = getattr(entry, attr)
        if value or write_empty:
            ET.SubElement(diag, f"{prefix}{name}").text = value
    return diag


class SuppressionLedger:
    """Ordered suppression entries with O(1) lookup by (path, moniker).

    When the file contains the same key twice the first occurrence is the
    one that gets updated; later duplicates are carried through untouched.
    """

    def __init__(
        self,
        name: str,
        entries: Iterable[SuppressionEntry] = (),
        root_tag: str = DEFAULT_ROOT_TAG,
        namespaces: dict[str, str] | None = None,
    ):
        self.name = name
        self.root_tag = root_tag
        self.namespaces = dict(namespaces or {})

        prefix = _prefix(root_tag)
        self._root = ET.Element(root_tag, {_xmlns(p): uri for p, uri in self.namespaces.items()})
        ET.SubElement(self._root, f"{prefix}Name").text = name
        self._items = ET.SubElement(self._root, f"{prefix}Items")

        # _elements[i] is the <Diagnostic> element holding _entries[i].
        self._entries: list[SuppressionEntry] = []
        self._elements: list[ET.Element] = []
        self._index: dict[tuple[str, str], int] = {}
        for entry in entries:
            self._append(entry)

    def _reindex(self) -> None:
        self._index = {}
        for position, entry in enumerate(self._entries):
            self._index.setdefault(entry.key, position)

    def _append(self, entry: SuppressionEntry) -> None:
        element = _element_from_entry(entry, _prefix(self._items.tag))
        self._items.append(element)
        self._entries.append(entry)
        self._elements.append(element)
        self._index.setdefault(entry.key, len(self._entries) - 1)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, path: str | Path) -> SuppressionLedger:
        """Read a suppression file from disk."""
        path = Path(path)
        try:
            data = path.read_bytes()
        except FileNotFoundError as e:
            raise LedgerNotFoundError(f"Suppressions file doesn't exist: {path}") from e
        except OSError as e:
            raise LedgerLoadError(f"Could not read suppressions file {path}: {e}") from e

        ledger = cls.from_xml(data)
        logger.debug("Loaded %d suppression(s) from %s", len(ledger), path)
        return ledger

    @classmethod
    def from_xml(cls, data: bytes | str) -> SuppressionLedger:
        parser = ET.XMLParser(target=_DocumentBuilder())
        try:
            parser.feed(data)
            root = parser.close()
        except (ET.ParseError, ValueError) as e:
            raise LedgerParseError(f"Suppressions file is not valid XML: {e}") from e
        if root is None:
            raise LedgerParseError("Suppressions file has no root element")

        name_elem = _child(root, "Name")
        if name_elem is None:
            raise LedgerParseError("Suppressions file is missing <Name>")

        namespaces = {
            key.partition(":")[2]: uri
            for key, uri in root.attrib.items()
            if key == "xmlns" or key.startswith("xmlns:")
        }
        ledger = cls(name=name_elem.text or "", root_tag=root.tag, namespaces=namespaces)

        items = _child(root, "Items")
        if items is None:
            items = ET.SubElement(root, f"{_prefix(name_elem.tag)}Items")
        elements = _children(items, "Diagnostic")

        ledger._root = root
        ledger._items = items
        ledger._entries = [_entry_from_element(elem, i) for i, elem in enumerate(elements)]
        ledger._elements = elements
        ledger._reindex()
        return ledger

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    @property
    def entries(self) -> tuple[SuppressionEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[SuppressionEntry]:
        return iter(self._entries)

    def __contains__(self, key: tuple[str, str]) -> bool:
        return key in self._index

    def get(self, key: tuple[str, str]) -> SuppressionEntry | None:
        position = self._index.get(key)
        return None if position is None else self._entries[position]

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def upsert(self, entry: SuppressionEntry) -> UpsertOutcome:
        """Insert entry, or update the justification of the entry with the same key.

        An existing entry keeps its position and every stored field other
        than the justification. A new entry is copied onto the tail.
        """
        position = self._index.get(entry.key)
        if position is None:
            self._append(replace(entry))
            return UpsertOutcome.ADDED

        existing = self._entries[position]
        if existing.justification == entry.justification:
            return UpsertOutcome.UNCHANGED
        existing.justification = entry.justification

        element = self._elements[position]
        justification = _child(element, "Justification")
        if justification is None:
            justification = ET.SubElement(element, f"{_prefix(element.tag)}Justification")
        justification.text = entry.justification
        return UpsertOutcome.UPDATED

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------

    def to_element(self) -> ET.Element:
        """Return the live document tree the ledger edits."""
        return self._root

    def to_xml(self) -> bytes:
        """Serialize without any canonical formatting applied."""
        try:
            return ET.tostring(self._root, encoding="utf-8")
        except (TypeError, ValueError) as e:
            raise LedgerSerializeError(f"Could not serialize suppressions: {e}") from e

    def save(self, path: str | Path) -> None:
        """Serialize, canonicalize, and atomically replace the file at path.

        Serialization and formatting both complete before the file is
        opened, so a failure there leaves the existing file untouched. The
        replaced file keeps its permission bits.
        """
        path = Path(path)
        text = format_xml(self.to_xml())

        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", newline="\n", dir=path.parent, prefix=f".{path.name}.", delete=False
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(text)
            if path.exists():
                shutil.copymode(path, tmp_name)
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise LedgerWriteError(f"Could not write suppressions file {path}: {e}") from e

        logger.debug("Wrote %d suppression(s) to %s", len(self), path)
