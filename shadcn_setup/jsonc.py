"""JSON-with-comments documents that can be edited without reformatting.

`parse` builds an offset-carrying node tree next to the plain Python value, so
`compute_edit` can describe a change as a handful of text replacements. Text
outside the replaced spans (comments, blank lines, key order, indentation) is
left exactly as the user wrote it.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Sequence

PathSegment = str | int
JsonPath = Sequence[PathSegment]

_NUMBER_RE = re.compile(r"-?(?:0|[1-9][0-9]*)(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?")
_LITERALS: dict[str, Any] = {"true": True, "false": False, "null": None}
_TRIVIA = " \t\r\n\ufeff"


class JsoncSyntaxError(ValueError):
    """Raised when text cannot be read as a JSON-with-comments document."""


class JsonNumber(float):
    """A non-integer number literal that re-serializes as its source token."""

    def __new__(cls, raw: str) -> JsonNumber:
        obj = super().__new__(cls, raw)
        obj.raw = raw
        return obj

    def __reduce__(self):
        return (JsonNumber, (self.raw,))


@dataclass(eq=False)
class Node:
    type: str
    offset: int
    length: int = 0
    value: Any = None
    children: list[Node] = field(default_factory=list)
    parent: Node | None = field(default=None, repr=False)

    @property
    def end(self) -> int:
        return self.offset + self.length


@dataclass(frozen=True)
class ConfigDocument:
    text: str
    root: Node | None
    data: dict[str, Any]

    def node(self, path: JsonPath) -> Node | None:
        return find_node(self.root, path)

    def serialize(self) -> str:
        return self.text


@dataclass(frozen=True)
class Edit:
    offset: int
    length: int
    content: str


@dataclass(frozen=True)
class FormattingOptions:
    tab_size: int = 2
    insert_spaces: bool = True
    eol: str | None = None

    @property
    def indent_unit(self) -> str:
        return " " * self.tab_size if self.insert_spaces else "\t"


@dataclass(frozen=True)
class PlannedEdit:
    path: tuple[PathSegment, ...]
    value: Any


@dataclass
class EditPlan:
    edits: list[PlannedEdit] = field(default_factory=list)

    def set(self, path: JsonPath, value: Any) -> None:
        self.edits.append(PlannedEdit(path=tuple(path), value=value))

    def __len__(self) -> int:
        return len(self.edits)

    def __bool__(self) -> bool:
        return bool(self.edits)


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def _at(self, ch: str) -> bool:
        return self.pos < len(self.text) and self.text[self.pos] == ch

    def _fail(self, msg: str) -> JsoncSyntaxError:
        return JsoncSyntaxError(f"{msg} at offset {self.pos}")

    def skip_trivia(self) -> None:
        text = self.text
        n = len(text)
        while self.pos < n:
            if text[self.pos] in _TRIVIA:
                self.pos += 1
                continue
            if text.startswith("//", self.pos):
                end = text.find("\n", self.pos)
                self.pos = n if end == -1 else end
                continue
            if text.startswith("/*", self.pos):
                end = text.find("*/", self.pos + 2)
                if end == -1:
                    raise self._fail("unterminated block comment")
                self.pos = end + 2
                continue
            break

    def parse_document(self) -> Node:
        self.skip_trivia()
        node = self.parse_value(None)
        self.skip_trivia()
        if self.pos != len(self.text):
            raise self._fail("unexpected trailing content")
        return node

    def parse_value(self, parent: Node | None) -> Node:
        if self.pos >= len(self.text):
            raise self._fail("unexpected end of input")
        ch = self.text[self.pos]
        if ch == "{":
            return self.parse_object(parent)
        if ch == "[":
            return self.parse_array(parent)
        start = self.pos
        if ch == '"':
            value = self.parse_string()
            return Node("string", start, self.pos - start, value, parent=parent)
        m = _NUMBER_RE.match(self.text, self.pos)
        if m:
            raw = m.group(0)
            self.pos = m.end()
            value: Any = int(raw) if raw.lstrip("-").isdigit() and raw != "-0" else JsonNumber(raw)
            return Node("number", start, len(raw), value, parent=parent)
        for word, value in _LITERALS.items():
            if self.text.startswith(word, self.pos):
                self.pos += len(word)
                kind = "null" if value is None else "boolean"
                return Node(kind, start, len(word), value, parent=parent)
        raise self._fail(f"unexpected character {ch!r}")

    def parse_string(self) -> str:
        text = self.text
        start = self.pos
        i = start + 1
        while i < len(text):
            ch = text[i]
            if ch == "\\":
                i += 2
                continue
            if ch == '"':
                self.pos = i + 1
                try:
                    return json.loads(text[start : i + 1])
                except ValueError as e:
                    raise JsoncSyntaxError(f"invalid string at offset {start}: {e}") from e
            if ch == "\n":
                break
            i += 1
        raise JsoncSyntaxError(f"unterminated string at offset {start}")

    def parse_object(self, parent: Node | None) -> Node:
        node = Node("object", self.pos, parent=parent)
        self.pos += 1
        self.skip_trivia()
        while not self._at("}"):
            if not self._at('"'):
                raise self._fail("expected property name")
            prop = Node("property", self.pos, parent=node)
            key_start = self.pos
            key = self.parse_string()
            key_node = Node("string", key_start, self.pos - key_start, key, parent=prop)
            self.skip_trivia()
            if not self._at(":"):
                raise self._fail("expected ':'")
            self.pos += 1
            self.skip_trivia()
            value_node = self.parse_value(prop)
            prop.children = [key_node, value_node]
            prop.length = value_node.end - prop.offset
            node.children.append(prop)
            self.skip_trivia()
            if self._at(","):
                self.pos += 1
                self.skip_trivia()
            elif not self._at("}"):
                raise self._fail("expected ',' or '}'")
        self.pos += 1
        node.length = self.pos - node.offset
        return node

    def parse_array(self, parent: Node | None) -> Node:
        node = Node("array", self.pos, parent=parent)
        self.pos += 1
        self.skip_trivia()
        while not self._at("]"):
            node.children.append(self.parse_value(node))
            self.skip_trivia()
            if self._at(","):
                self.pos += 1
                self.skip_trivia()
            elif not self._at("]"):
                raise self._fail("expected ',' or ']'")
        self.pos += 1
        node.length = self.pos - node.offset
        return node


def node_value(node: Node) -> Any:
    if node.type == "object":
        return {p.children[0].value: node_value(p.children[1]) for p in node.children}
    if node.type == "array":
        return [node_value(c) for c in node.children]
    return node.value


def parse(text: str) -> ConfigDocument:
    """Parse JSONC text; anything that is not a readable object is an empty document."""
    try:
        root = _Parser(text).parse_document()
        if root.type != "object":
            return ConfigDocument(text=text, root=None, data={})
        data = node_value(root)
    except (JsoncSyntaxError, RecursionError):
        return ConfigDocument(text=text, root=None, data={})
    return ConfigDocument(text=text, root=root, data=data)


def _find_property(obj: Node, key: str) -> Node | None:
    found = None
    for prop in obj.children:
        if prop.children[0].value == key:
            found = prop
    return found


def find_node(root: Node | None, path: JsonPath) -> Node | None:
    node = root
    for segment in path:
        if node is None:
            return None
        if isinstance(segment, str):
            if node.type != "object":
                return None
            prop = _find_property(node, segment)
            node = prop.children[1] if prop is not None else None
        else:
            if node.type != "array" or not 0 <= segment < len(node.children):
                return None
            node = node.children[segment]
    return node


def _detect_eol(text: str) -> str:
    return "\r\n" if "\r\n" in text else "\n"


def _line_start(text: str, offset: int) -> int:
    return text.rfind("\n", 0, offset) + 1


def _line_indent(text: str, offset: int) -> str:
    start = _line_start(text, offset)
    m = re.match(r"[ \t]*", text[start:offset])
    return m.group(0) if m else ""


def _member_indent(text: str, member: Node, container: Node, unit: str) -> str:
    # Indentation of a member that starts its own line; otherwise one level
    # deeper than the line holding the container's opening bracket.
    prefix = text[_line_start(text, member.offset) : member.offset]
    if not prefix.strip():
        return prefix
    return _line_indent(text, container.offset) + unit


def _encode(value: Any, unit: str, depth: int = 0) -> str:
    # Same layout as json.dumps(indent=unit); parsed number literals keep their source text.
    if isinstance(value, JsonNumber):
        return value.raw
    if isinstance(value, dict):
        if not value:
            return "{}"
        inner = unit * (depth + 1)
        members = [
            f"{inner}{json.dumps(str(k), ensure_ascii=False)}: {_encode(v, unit, depth + 1)}"
            for k, v in value.items()
        ]
        return "{\n" + ",\n".join(members) + "\n" + unit * depth + "}"
    if isinstance(value, (list, tuple)):
        if not value:
            return "[]"
        inner = unit * (depth + 1)
        items = [inner + _encode(v, unit, depth + 1) for v in value]
        return "[\n" + ",\n".join(items) + "\n" + unit * depth + "]"
    return json.dumps(value, ensure_ascii=False)


def _serialize(value: Any, indent: str, unit: str, eol: str) -> str:
    lines = _encode(value, unit).split("\n")
    return eol.join([lines[0]] + [indent + line for line in lines[1:]])


def _insert_member(text: str, container: Node, member_text: str, indent: str, eol: str) -> Edit:
    if container.children:
        last = container.children[-1]
        return Edit(last.end, 0, "," + eol + indent + member_text)
    inner_start = container.offset + 1
    inner_end = container.end - 1
    if text[inner_start:inner_end].strip():
        return Edit(inner_start, 0, eol + indent + member_text)
    closing = eol + _line_indent(text, container.offset)
    return Edit(inner_start, inner_end - inner_start, eol + indent + member_text + closing)


def compute_edit(
    text: str,
    path: JsonPath,
    value: Any,
    options: FormattingOptions | None = None,
) -> list[Edit]:
    """Return the edits that set `path` to `value` inside `text`."""
    options = options or FormattingOptions()
    segments = list(path)
    if not segments:
        raise ValueError("edit path must not be empty")
    eol = options.eol or _detect_eol(text)
    unit = options.indent_unit
    root = parse(text).root

    if root is None:
        if not all(isinstance(s, str) for s in segments):
            raise ValueError("cannot create array elements in an empty document")
        for segment in reversed(segments):
            value = {segment: value}
        return [Edit(0, len(text), _serialize(value, "", unit, eol))]

    parent_path = segments
    while True:
        last = parent_path.pop()
        parent = find_node(root, parent_path)
        if parent is not None:
            break
        if not isinstance(last, str):
            raise ValueError(f"cannot create array element {last!r} under a missing parent")
        value = {last: value}

    if parent.type == "object" and isinstance(last, str):
        prop = _find_property(parent, last)
        if prop is not None:
            target = prop.children[1]
            indent = _member_indent(text, prop, parent, unit)
            return [Edit(target.offset, target.length, _serialize(value, indent, unit, eol))]
        if parent.children:
            indent = _member_indent(text, parent.children[-1], parent, unit)
        else:
            indent = _line_indent(text, parent.offset) + unit
        member = json.dumps(last, ensure_ascii=False) + ": " + _serialize(value, indent, unit, eol)
        return [_insert_member(text, parent, member, indent, eol)]

    if parent.type == "array" and isinstance(last, int):
        if 0 <= last < len(parent.children):
            target = parent.children[last]
            indent = _member_indent(text, target, parent, unit)
            return [Edit(target.offset, target.length, _serialize(value, indent, unit, eol))]
        if last in (-1, len(parent.children)):
            if parent.children:
                indent = _member_indent(text, parent.children[-1], parent, unit)
            else:
                indent = _line_indent(text, parent.offset) + unit
            return [_insert_member(text, parent, _serialize(value, indent, unit, eol), indent, eol)]
        raise ValueError(f"array index {last} out of range")

    raise ValueError(f"cannot set {last!r} on a {parent.type} node")


def apply_edits(text: str, edits: Sequence[Edit]) -> str:
    out = text
    limit = len(text)
    for edit in sorted(edits, key=lambda e: e.offset, reverse=True):
        if edit.offset < 0 or edit.offset + edit.length > limit:
            raise ValueError(f"overlapping or out-of-range edit at offset {edit.offset}")
        out = out[: edit.offset] + edit.content + out[edit.offset + edit.length :]
        limit = edit.offset
    return out


def apply_plan(text: str, plan: EditPlan, options: FormattingOptions | None = None) -> str:
    for item in plan.edits:
        text = apply_edits(text, compute_edit(text, item.path, item.value, options))
    return text
