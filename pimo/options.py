# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Storage argument grammar.

Each argument is one clause, tried in this order:

  update [time, user]         match on these keys, update one document
  multi [time, user]          same, but may update many documents
  dropnull = true             property (key is lower-cased)
  {time: 1, user: -1}, {unique: true, dropDups: true}
                              index to ensure before writing, like
                              db.col.ensureIndex()
"""

from __future__ import annotations
import re
from typing import Dict, Iterable, List, Optional, Tuple
from pimo.errors import MalformedOptionError
from pimo.log import get_logger
from pimo.schemas import IndexSpec, StorageOptions, UpdateSpec

log = get_logger("options")

UPDATE_RE = re.compile(r"(update|multi)\s*\[(.*)\]")
PROPERTY_RE = re.compile(r"(\w*)\s*=\s*(\w*)\s*")
INDEX_RE = re.compile(r"\{(.*)\}\s*,\s*\{(.*)\}")
KEY_VALUE_RE = re.compile(r"(\w*)\s*:\s*(-?\w*)\s*")


def parse_update(arg: str) -> Optional[UpdateSpec]:
    m = UPDATE_RE.fullmatch(arg)
    if m is None:
        return None
    keys = tuple(k.strip() for k in m.group(2).split(",") if k.strip())
    return UpdateSpec(keys=keys, multi=m.group(1) == "multi")


def parse_property(arg: str) -> Optional[Tuple[str, str]]:
    m = PROPERTY_RE.fullmatch(arg)
    if m is None:
        return None
    return m.group(1).lower(), m.group(2)


def _pairs(body: str) -> List[Tuple[str, str]]:
    return [(m.group(1), m.group(2)) for m in KEY_VALUE_RE.finditer(body)]


def parse_index(arg: str) -> Optional[IndexSpec]:
    m = INDEX_RE.fullmatch(arg)
    if m is None:
        return None
    keys: Dict[str, int] = {}
    for name, direction in _pairs(m.group(1)):
        try:
            value = int(direction)
        except ValueError:
            raise MalformedOptionError(arg, f"index direction for {name!r} is not an integer") from None
        if value not in (1, -1):
            raise MalformedOptionError(arg, f"index direction for {name!r} must be 1 or -1")
        keys[name] = value
    if not keys:
        raise MalformedOptionError(arg, "index has no keys")
    options = {name: value.lower() == "true" for name, value in _pairs(m.group(2))}
    return IndexSpec(keys=keys, options=options)


def parse_arguments(args: Iterable[str]) -> StorageOptions:
    """
    Build StorageOptions from storage arguments. Raises MalformedOptionError
    on the first argument matching none of the clause shapes. Only the last
    update clause is kept.
    """
    update: Optional[UpdateSpec] = None
    indexes: List[IndexSpec] = []
    properties: Dict[str, str] = {}
    for arg in args:
        up = parse_update(arg)
        if up is not None:
            if update is not None:
                log.warning("update clause %r replaces %r", arg, update)
            update = up
            continue
        prop = parse_property(arg)
        if prop is not None:
            properties[prop[0]] = prop[1]
            continue
        ix = parse_index(arg)
        if ix is not None:
            indexes.append(ix)
            continue
        raise MalformedOptionError(arg)
    opts = StorageOptions(update=update, indexes=tuple(indexes), properties=properties)
    log.debug("parsed storage options: %s", opts.describe())
    return opts
