# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations
from .base import BaseWriter
from ..config import CFG
from ..schemas import UpdateSpec

def get_writer(cfg: CFG = CFG, update: UpdateSpec | None = None) -> BaseWriter:
    wtype = (cfg.get("writer.type", "mongo") or "mongo").lower()
    match wtype:
        case "mongo" | "default":
            from .mongo_writer import MongoWriter
            return MongoWriter(
                cfg.get("writer.uri"),
                cfg.get("writer.database"),
                cfg.get("writer.collection"),
                update=update,
            )
        case "memory":
            from .memory_writer import MemoryWriter
            return MemoryWriter(update=update)
        case _:
            raise RuntimeError(f"Unknown writer.type: {wtype}")
