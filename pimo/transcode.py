# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations
import re
from typing import Any, Dict, Iterable, Mapping, Sequence, Tuple
from bson.int64 import Int64
from pimo.dates import coerce_text
from pimo.errors import MalformedCollectionError, MissingSchemaError
from pimo.schemas import FieldSchema, RecordSchema, StorageOptions, TypeTag

# Pure functions: (schema, values, options) -> fresh document, no shared state.

ID_KEY = "_id"
OPERATOR_MARK = "$"

INT32_MIN, INT32_MAX = -(2 ** 31), 2 ** 31 - 1
INT64_MIN, INT64_MAX = -(2 ** 63), 2 ** 63 - 1
_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


class _Omit:
    __slots__ = ()

    def __repr__(self) -> str:
        return "OMIT"


OMIT = _Omit()


def output_key(name: str, options: StorageOptions) -> str:
    """The id rename wins over the operator prefix; at most one applies."""
    id_key = options.get_id_key()
    if id_key is not None and name == id_key:
        return ID_KEY
    prefix = options.get_op_prefix()
    if prefix is not None and name.startswith(prefix):
        return OPERATOR_MARK + name[len(prefix):]
    return name


def _bytes_text(value: Any) -> str:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def coerce_map_value(value: Any) -> Any:
    """int32, then int64, then text (timestamp-shaped text becomes a datetime)."""
    if not isinstance(value, str):
        return value
    if _INTEGER_RE.fullmatch(value):
        n = int(value)
        if INT32_MIN <= n <= INT32_MAX:
            return n
        if INT64_MIN <= n <= INT64_MAX:
            return Int64(n)
    return coerce_text(value)


def _missing_schema(name: str) -> MissingSchemaError:
    return MissingSchemaError(
        "Schemas must be fully specified to use this storage function. "
        f"No schema found for field {name}")


def _record_subschema(field: FieldSchema) -> RecordSchema:
    if field.subschema is None:
        raise _missing_schema(field.name)
    return field.subschema


def _collection_subschema(field: FieldSchema) -> RecordSchema:
    """Drill down a collection's single record field to that record's schema."""
    outer = _record_subschema(field)
    if len(outer.fields) != 1 or outer.fields[0].type is not TypeTag.RECORD:
        raise MalformedCollectionError(
            f"Found a bag without a tuple inside for field {field.name}")
    inner = outer.fields[0].subschema
    if inner is None:
        raise _missing_schema(field.name)
    return inner


def write_field(field: FieldSchema, value: Any,
                options: StorageOptions) -> Tuple[str, Any] | _Omit:
    if value is None:
        # null policy ignores the field type; the raw name is kept
        if options.should_drop_null():
            return OMIT
        return field.name, None

    key = output_key(field.name, options)

    match field.type:
        case TypeTag.INT32 | TypeTag.INT64 | TypeTag.FLOAT32 | TypeTag.FLOAT64:
            return key, value
        case TypeTag.BYTES:
            return key, _bytes_text(value)
        case TypeTag.TEXT:
            return key, coerce_text(value) if isinstance(value, str) else value
        case TypeTag.MAP:
            return key, {k: coerce_map_value(v) for k, v in _items(value)}
        case TypeTag.RECORD:
            return key, transcode(_record_subschema(field), value, options)
        case TypeTag.COLLECTION:
            inner = _collection_subschema(field)
            return key, [transcode(inner, element, options) for element in value]
    raise TypeError(f"unsupported field type {field.type!r} for field {field.name}")


def _items(value: Any) -> Iterable[Tuple[Any, Any]]:
    if isinstance(value, Mapping):
        return value.items()
    return value


def transcode(schema: RecordSchema | None, values: Sequence[Any],
              options: StorageOptions) -> Dict[str, Any]:
    """
    Build the document for one record. Values align positionally with the
    schema fields; missing trailing values count as nulls. Omitted fields
    are skipped, the rest keep schema order.
    """
    if schema is None:
        raise MissingSchemaError("no record schema available")
    values = tuple(values)
    doc: Dict[str, Any] = {}
    for i, field in enumerate(schema.fields):
        pair = write_field(field, values[i] if i < len(values) else None, options)
        if pair is OMIT:
            continue
        key, out = pair
        doc[key] = out
    return doc
