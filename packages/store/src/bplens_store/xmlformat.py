"""Canonical re-indentation of serialized XML.

The suppression file is edited and diffed by hand, and ElementTree makes no
promise about the whitespace it writes. Every write therefore goes through
format_xml(), which parses the document into a flat stream of structural
events and re-emits it with two-space indentation per nesting depth.

Rules:
  - whitespace-only text runs are dropped, adjacent text runs are merged
  - an element with only text stays on one line: <Path>x</Path>
  - an empty element is written as <a></a>, never self-closed
  - comments are kept verbatim at their depth, without padding
  - namespace declarations stay on the element that declared them

Formatting an already formatted document returns it byte for byte.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from xml.sax.saxutils import escape, quoteattr

from bplens_store.errors import FormatError

DECLARATION = '<?xml version="1.0" encoding="utf-8"?>'
INDENT = "  "

XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"
_ATTR_ENTITIES = {"\n": "&#10;", "\r": "&#13;", "\t": "&#9;"}
_TEXT_ENTITIES = {"\r": "&#13;"}


class _EventCollector:
    """XMLParser target that records the document as a list of events."""

    def __init__(self):
        self.events: list[tuple] = []
        self._text: list[str] = []
        self._pending_ns: list[tuple[str, str]] = []

    def _flush_text(self) -> None:
        if not self._text:
            return
        text = "".join(self._text)
        self._text = []
        if text.strip():
            self.events.append(("text", text))

    def start_ns(self, prefix, uri):
        self._pending_ns.append((prefix or "", uri))

    def start(self, tag, attrib):
        self._flush_text()
        self.events.append(("start", tag, dict(attrib), self._pending_ns))
        self._pending_ns = []

    def end(self, tag):
        self._flush_text()
        self.events.append(("end", tag))

    def data(self, data):
        self._text.append(data)

    def comment(self, text):
        self._flush_text()
        self.events.append(("comment", text))

    def pi(self, target, data):
        self._flush_text()
        self.events.append(("pi", target, data or ""))

    def close(self):
        self._flush_text()
        return self.events


def parse_events(src: bytes | str) -> list[tuple]:
    """Parse src into structural events, raising FormatError if malformed."""
    collector = _EventCollector()
    parser = ET.XMLParser(target=collector)
    try:
        parser.feed(src)
        return parser.close()
    except (ET.ParseError, ValueError) as e:
        raise FormatError(f"Malformed XML: {e}") from e


def qualify_name(name: str, bindings: dict[str, str], attribute: bool = False) -> str:
    """Turn an expanded {uri}local name back into prefix:local."""
    if not name.startswith("{"):
        return name
    uri, local = name[1:].split("}", 1)
    prefixes = [p for p, u in bindings.items() if u == uri]
    if attribute:
        # Attributes never pick up the default namespace.
        prefixes = [p for p in prefixes if p]
    if not prefixes:
        raise FormatError(f"Namespace {uri!r} used without a declaration")
    prefix = "" if "" in prefixes else prefixes[0]
    return f"{prefix}:{local}" if prefix else local


def _open_tag(name: str, attrib: dict, ns_decls: list[tuple[str, str]], bindings: dict[str, str]) -> str:
    parts = [name]
    for prefix, uri in ns_decls:
        attr = f"xmlns:{prefix}" if prefix else "xmlns"
        parts.append(f"{attr}={quoteattr(uri, _ATTR_ENTITIES)}")
    for key, value in attrib.items():
        parts.append(f"{qualify_name(key, bindings, attribute=True)}={quoteattr(value, _ATTR_ENTITIES)}")
    return "<" + " ".join(parts) + ">"


def _emit(events: list[tuple]) -> str:
    lines = [DECLARATION]
    # Each open element carries its qualified name and the prefix bindings in scope.
    stack: list[tuple[str, dict[str, str]]] = []
    root_bindings = {"xml": XML_NAMESPACE}
    i = 0
    n = len(events)

    while i < n:
        event = events[i]
        kind = event[0]
        indent = INDENT * len(stack)

        if kind == "start":
            _, tag, attrib, ns_decls = event
            bindings = dict(stack[-1][1] if stack else root_bindings)
            for prefix, uri in ns_decls:
                bindings[prefix] = uri
            name = qualify_name(tag, bindings)
            open_tag = _open_tag(name, attrib, ns_decls, bindings)

            following = events[i + 1][0] if i + 1 < n else None
            if following == "end":
                lines.append(f"{indent}{open_tag}</{name}>")
                i += 2
                continue
            if following == "text" and i + 2 < n and events[i + 2][0] == "end":
                lines.append(f"{indent}{open_tag}{escape(events[i + 1][1], _TEXT_ENTITIES)}</{name}>")
                i += 3
                continue

            lines.append(f"{indent}{open_tag}")
            stack.append((name, bindings))
        elif kind == "end":
            name, _ = stack.pop()
            lines.append(f"{INDENT * len(stack)}</{name}>")
        elif kind == "text":
            # Mixed content: each text run gets its own line.
            lines.append(f"{indent}{escape(event[1].strip(), _TEXT_ENTITIES)}")
        elif kind == "comment":
            lines.append(f"{indent}<!--{event[1]}-->")
        elif kind == "pi":
            _, target, data = event
            lines.append(f"{indent}<?{target} {data}?>" if data else f"{indent}<?{target}?>")
        i += 1

    return "\n".join(lines) + "\n"


def format_xml(src: bytes | str) -> str:
    """Return src re-indented in canonical form.

    Raises FormatError if src is not well-formed XML.
    """
    return _emit(parse_events(src))
