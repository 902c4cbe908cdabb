# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations
from typing import Any, Dict, Iterable, Sequence
from pimo.errors import MissingSchemaError
from pimo.log import get_logger, ops_event
from pimo.metrics import inc as m_inc, set_error
from pimo.options import parse_arguments
from pimo.schema_parser import format_schema, parse_schema
from pimo.schemas import RecordSchema, StorageOptions, UpdateSpec
from pimo.transcode import output_key, transcode
from pimo.writers.base import BaseWriter

log = get_logger("service")


def _field_count(args, kwargs, result):
    return len(result) if result is not None else None


class MongoStorage:
    """
    Store function: turns positional records into documents and hands them
    to a writer.

    Takes a list of arguments of three kinds:
      - a single set of keys to base updating on, 'update [time, user]' or
        'multi [time, user]' for multi updates
      - properties, 'dropnull=true', 'id=time', 'mongo=op_'
      - indexes to ensure, '{time: 1, user: 1},{unique: true}'
        (the syntax is exactly like db.col.ensureIndex())

    Lifecycle: check_schema() once, prepare_to_write() once, then
    put_next() per record.
    """

    def __init__(self, *args: str, options: StorageOptions | None = None):
        self.options = options if options is not None else parse_arguments(args)
        self.schema: RecordSchema | None = None
        self._schema_text: str | None = None
        self._writer: BaseWriter | None = None

    def check_schema(self, schema: RecordSchema | str) -> None:
        if isinstance(schema, str):
            schema = parse_schema(schema)
        log.info("checking schema %s", format_schema(schema))
        self.schema = schema
        # kept in serialized form, as it would be shipped to remote workers;
        # JSON keeps missing subschemas and any field name intact
        self._schema_text = schema.model_dump_json()

    def update_spec(self) -> UpdateSpec | None:
        """Update keys as they are named in the written documents."""
        update = self.options.update
        if update is None:
            return None
        keys = tuple(output_key(k, self.options) for k in update.keys)
        return UpdateSpec(keys=keys, multi=update.multi)

    @ops_event("prepare", indexes=lambda a, kw, r: len(a[0].options.indexes))
    def prepare_to_write(self, writer: BaseWriter) -> None:
        if writer is None:
            raise ValueError("Invalid record writer")
        if self._schema_text is None:
            set_error("no schema to write with")
            raise MissingSchemaError("Could not find schema in store context")
        self._writer = writer
        self.schema = RecordSchema.model_validate_json(self._schema_text)
        log.info("preparing to write with %s", type(writer).__name__)
        for ix in self.options.indexes:
            writer.ensure_index(dict(ix.keys), dict(ix.options))
            m_inc("indexes_ensured_total")

    @ops_event("put", fields=_field_count)
    def put_next(self, values: Sequence[Any]) -> Dict[str, Any]:
        if self._writer is None:
            raise RuntimeError("put_next() called before prepare_to_write()")
        log.debug("writing %r", values)
        try:
            doc = transcode(self.schema, values, self.options)
        except Exception as e:
            set_error(f"transcode: {e}")
            raise
        log.debug("writing out: %r", doc)
        self._writer.write(doc)
        m_inc("documents_written_total")
        return doc

    def store(self, records: Iterable[Sequence[Any]]) -> int:
        n = 0
        for values in records:
            self.put_next(values)
            n += 1
        return n
