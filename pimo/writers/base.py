# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Dict, Any


Document = Dict[str, Any]

class BaseWriter(ABC):
    @abstractmethod
    def write(self, document: Document) -> None: ...

    @abstractmethod
    def ensure_index(self, keys: Dict[str, int], options: Dict[str, bool]) -> None: ...

    def close(self) -> None:
        return None
