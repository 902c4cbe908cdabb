# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations
from typing import Any, Dict
from pymongo import MongoClient
from pimo.errors import InvalidURIError, MissingUpdateKeyError
from pimo.log import get_logger
from pimo.schemas import UpdateSpec
from .base import BaseWriter, Document

log = get_logger("writers.mongo")

URI_SCHEMES = ("mongodb://", "mongodb+srv://")
# ignored by servers since 3.0, rejected by some drivers
_UNSENT_INDEX_OPTIONS = frozenset({"dropDups"})


def update_document(document: Document, update: UpdateSpec) -> tuple[Dict[str, Any], Dict[str, Any]]:
    """
    Split a transcoded document into (query, update) for an upsert.
    Operator keys ($inc, ...) pass through; plain keys go under $set, and
    the _id only on insert unless it is part of the match.
    """
    missing = [k for k in update.keys if k not in document]
    if missing:
        raise MissingUpdateKeyError(
            f"update keys {missing} missing from document {sorted(document)}")
    query = {k: document[k] for k in update.keys}
    ops: Dict[str, Any] = {}
    plain: Dict[str, Any] = {}
    for k, v in document.items():
        if k.startswith("$"):
            ops[k] = dict(v) if isinstance(v, dict) else v
        else:
            plain[k] = v
    if "_id" in plain and "_id" not in query:
        ops.setdefault("$setOnInsert", {})["_id"] = plain.pop("_id")
    plain.pop("_id", None)
    if plain:
        ops.setdefault("$set", {}).update(plain)
    return query, ops


class MongoWriter(BaseWriter):
    def __init__(self, uri: str, database: str, collection: str,
                 update: UpdateSpec | None = None, client: MongoClient | None = None):
        if not uri or not str(uri).startswith(URI_SCHEMES):
            raise InvalidURIError(uri)
        self._owns_client = client is None
        self._client = client if client is not None else MongoClient(uri)
        self._coll = self._client[database][collection]
        self.update = update
        log.info("writing to %s.%s (update=%s)", database, collection,
                 update.model_dump() if update else None)

    def write(self, document: Document) -> None:
        if self.update is None:
            # insert_one adds _id to the dict it is given
            self._coll.insert_one(dict(document))
            return
        query, ops = update_document(document, self.update)
        if self.update.multi:
            self._coll.update_many(query, ops, upsert=True)
        else:
            self._coll.update_one(query, ops, upsert=True)

    def ensure_index(self, keys: Dict[str, int], options: Dict[str, bool]) -> None:
        kwargs = {k: v for k, v in options.items() if k not in _UNSENT_INDEX_OPTIONS}
        name = self._coll.create_index(list(keys.items()), **kwargs)
        log.info("ensured index %s %s", name, kwargs)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
