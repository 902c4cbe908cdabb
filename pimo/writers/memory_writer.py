# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later
from __future__ import annotations
import copy
from typing import Any, Dict, List, Tuple
from pimo.schemas import UpdateSpec
from .base import BaseWriter, Document

class MemoryWriter(BaseWriter):
    """Keeps everything in process. Used for dry runs."""

    def __init__(self, update: UpdateSpec | None = None):
        self.update = update
        self.documents: List[Document] = []
        self.indexes: List[Tuple[Dict[str, int], Dict[str, bool]]] = []
        self.closed = False

    def write(self, document: Document) -> None:
        self.documents.append(copy.deepcopy(document))

    def ensure_index(self, keys: Dict[str, int], options: Dict[str, bool]) -> None:
        self.indexes.append((dict(keys), dict(options)))

    def close(self) -> None:
        self.closed = True

    def as_dict(self) -> Dict[str, Any]:
        return {
            "update": self.update.model_dump() if self.update else None,
            "indexes": [{"keys": k, "options": o} for k, o in self.indexes],
            "documents": list(self.documents),
        }
