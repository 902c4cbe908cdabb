# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Record schemas written in Pig's field notation, e.g.

    time:chararray, hits:long, where:(host:chararray, port:int),
    tags:map[], visits:{t:(page:chararray, ms:double)}

``(...)`` is a nested record (``tuple(...)`` also accepted), ``{...}`` a
collection whose single element is a record (``bag{...}`` also accepted);
an unnamed record inside a collection is named ``t``.
"""

from __future__ import annotations
import re
from typing import List
from pimo.errors import SchemaSyntaxError
from pimo.schemas import FieldSchema, RecordSchema, TypeTag

_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*(?:::[A-Za-z_][A-Za-z0-9_]*)*")
_WORD_RE = re.compile(r"[A-Za-z]+")

_SCALARS = {
    "int": TypeTag.INT32,
    "long": TypeTag.INT64,
    "float": TypeTag.FLOAT32,
    "double": TypeTag.FLOAT64,
    "bytearray": TypeTag.BYTES,
    "chararray": TypeTag.TEXT,
}

DEFAULT_ELEMENT_NAME = "t"


class _Parser:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def fail(self, reason: str):
        raise SchemaSyntaxError(self.text, self.pos, reason)

    def skip_ws(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def peek(self) -> str:
        self.skip_ws()
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def expect(self, ch: str) -> None:
        if self.peek() != ch:
            self.fail(f"expected {ch!r}")
        self.pos += 1

    def match(self, regex: re.Pattern) -> str | None:
        self.skip_ws()
        m = regex.match(self.text, self.pos)
        if m is None:
            return None
        self.pos = m.end()
        return m.group(0)

    # schema := [field (',' field)*]
    def fields(self, close: str, element: bool = False) -> List[FieldSchema]:
        out: List[FieldSchema] = []
        if self.peek() == close:
            return out
        while True:
            out.append(self.field(element))
            if self.peek() != ",":
                return out
            self.pos += 1

    def field(self, element: bool) -> FieldSchema:
        start = self.pos
        if element and self.peek() == "(":
            return self.typed(DEFAULT_ELEMENT_NAME)
        name = self.match(_NAME_RE)
        if name is None:
            self.fail("expected a field name")
        if element and name.lower() == "tuple" and self.peek() == "(":
            return self.typed(DEFAULT_ELEMENT_NAME)
        if self.peek() != ":":
            self.pos = start
            self.fail(f"expected ':' after field name {name!r}")
        self.pos += 1
        return self.typed(name)

    def typed(self, name: str) -> FieldSchema:
        ch = self.peek()
        if ch == "(":
            return FieldSchema(name=name, type=TypeTag.RECORD, subschema=self.record())
        if ch == "{":
            return FieldSchema(name=name, type=TypeTag.COLLECTION, subschema=self.collection())
        word = self.match(_WORD_RE)
        if word is None:
            self.fail(f"expected a type for field {name!r}")
        word = word.lower()
        if word in _SCALARS:
            return FieldSchema(name=name, type=_SCALARS[word])
        if word == "map":
            self.map_params()
            return FieldSchema(name=name, type=TypeTag.MAP)
        if word == "tuple" and self.peek() == "(":
            return FieldSchema(name=name, type=TypeTag.RECORD, subschema=self.record())
        if word == "bag" and self.peek() == "{":
            return FieldSchema(name=name, type=TypeTag.COLLECTION, subschema=self.collection())
        self.fail(f"unsupported type {word!r} for field {name!r}")

    def record(self) -> RecordSchema:
        self.expect("(")
        fs = self.fields(")")
        self.expect(")")
        return RecordSchema(fields=tuple(fs))

    def collection(self) -> RecordSchema:
        self.expect("{")
        fs = self.fields("}", element=True)
        self.expect("}")
        return RecordSchema(fields=tuple(fs))

    def map_params(self) -> None:
        # value types inside map[...] carry no meaning for transcoding
        self.expect("[")
        depth = 1
        while self.pos < len(self.text):
            ch = self.text[self.pos]
            self.pos += 1
            if ch == "[":
                depth += 1
            elif ch == "]":
                depth -= 1
                if depth == 0:
                    return
        self.fail("unterminated map type")

    def parse(self) -> RecordSchema:
        braced = self.peek() == "{"
        if braced:
            self.pos += 1
        fs = self.fields("}" if braced else "")
        if braced:
            self.expect("}")
        if self.peek():
            self.fail("unexpected trailing input")
        return RecordSchema(fields=tuple(fs))


def parse_schema(text: str) -> RecordSchema:
    """Parse a schema string; raises SchemaSyntaxError when malformed."""
    if text is None:
        raise SchemaSyntaxError("", 0, "no schema given")
    return _Parser(text).parse()


def _format_field(field: FieldSchema) -> str:
    match field.type:
        case TypeTag.RECORD:
            body = format_schema(field.subschema) if field.subschema else ""
            return f"{field.name}:({body})"
        case TypeTag.COLLECTION:
            body = format_schema(field.subschema) if field.subschema else ""
            return f"{field.name}:{{{body}}}"
        case TypeTag.MAP:
            return f"{field.name}:map[]"
        case _:
            return f"{field.name}:{field.type.value}"


def format_schema(schema: RecordSchema) -> str:
    """Render a schema back into the notation parse_schema() reads."""
    return ",".join(_format_field(f) for f in schema.fields)
