# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations
import re
from datetime import datetime
from pimo.errors import TimestampParseError
from pimo.log import get_logger
from pimo.metrics import inc as m_inc

log = get_logger("dates")

TIMESTAMP_RE = re.compile(r"[0-9-]+T[0-9:.]+Z")
UTC_SUFFIX = "+0000"
# yyyy-MM-dd'T'HH:mm:ss.SSS'Z'Z
_LAYOUT = "%Y-%m-%dT%H:%M:%S.%fZ%z"

def looks_like_timestamp(text: str) -> bool:
    return TIMESTAMP_RE.fullmatch(text) is not None

def parse_timestamp(text: str) -> datetime:
    """
    Parse an ISO-8601-like UTC timestamp such as ``2013-01-02T03:04:05.678Z``.
    The zero offset is appended before parsing, so the result is always a
    timezone-aware UTC datetime. Raises TimestampParseError otherwise.
    """
    try:
        return datetime.strptime(text + UTC_SUFFIX, _LAYOUT)
    except ValueError as e:
        raise TimestampParseError(text) from e

def coerce_text(text: str):
    """
    Timestamp-shaped text becomes a datetime; anything else, including
    timestamp-shaped text that fails to parse, is returned unchanged.
    """
    if not looks_like_timestamp(text):
        return text
    try:
        return parse_timestamp(text)
    except TimestampParseError as e:
        log.debug("keeping %r as text: %s", text, e)
        m_inc("timestamp_fallbacks_total")
        return text
