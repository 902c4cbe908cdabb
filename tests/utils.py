# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

from typing import Any, Dict, List, Tuple
from pimo.writers.base import BaseWriter, Document


class SpyWriter(BaseWriter):
    def __init__(self, impl: BaseWriter):
        self.impl = impl
        self.calls: List[Tuple] = []

    def write(self, document: Document) -> None:
        self.calls.append(("write", document))
        return self.impl.write(document)

    def ensure_index(self, keys: Dict[str, int], options: Dict[str, bool]) -> None:
        self.calls.append(("ensure_index", keys, options))
        return self.impl.ensure_index(keys, options)

    def close(self) -> None:
        self.calls.append(("close",))
        return self.impl.close()

    def names(self) -> List[str]:
        return [c[0] for c in self.calls]


class FakeCollection:
    """Records the pymongo collection calls MongoWriter makes."""
    def __init__(self):
        self.calls: List[Tuple] = []

    def insert_one(self, doc):
        self.calls.append(("insert_one", doc))
        doc["_id"] = doc.get("_id", "generated")

    def update_one(self, query, update, upsert=False):
        self.calls.append(("update_one", query, update, upsert))

    def update_many(self, query, update, upsert=False):
        self.calls.append(("update_many", query, update, upsert))

    def create_index(self, keys, **kwargs):
        self.calls.append(("create_index", keys, kwargs))
        return "_".join(f"{k}_{v}" for k, v in keys)


class FakeClient:
    def __init__(self):
        self.collections: Dict[Tuple[str, str], FakeCollection] = {}
        self.closed = False

    def __getitem__(self, db: str) -> Any:
        client = self

        class _Db:
            def __getitem__(self, coll: str) -> FakeCollection:
                return client.collections.setdefault((db, coll), FakeCollection())
        return _Db()

    def close(self):
        self.closed = True
