# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

"""Error taxonomy. Every error carries a stable ``code`` for the ops log."""

from __future__ import annotations
from typing import Any, Dict


class PimoError(Exception):
    code = "pimo_error"

    def as_dict(self) -> Dict[str, Any]:
        return {"ok": False, "code": self.code, "error": str(self)}


class ConfigurationParseError(PimoError, ValueError):
    """A construction-time configuration string could not be understood."""
    code = "config_parse_error"


class MalformedOptionError(ConfigurationParseError):
    """A storage argument matched none of the update/property/index clauses."""
    code = "malformed_option"

    def __init__(self, argument: str, reason: str | None = None):
        self.argument = argument
        self.reason = reason
        msg = f"Error parsing argument: {argument}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)

    def as_dict(self) -> Dict[str, Any]:
        out = super().as_dict()
        out["argument"] = self.argument
        return out


class SchemaSyntaxError(ConfigurationParseError):
    code = "schema_syntax_error"

    def __init__(self, text: str, pos: int, reason: str):
        self.text = text
        self.pos = pos
        super().__init__(f"{reason} at position {pos} in schema {text!r}")


class MissingSchemaError(PimoError):
    """Structure-dependent data met without a schema to describe it."""
    code = "missing_schema"


class MalformedCollectionError(PimoError):
    code = "malformed_collection"


class TimestampParseError(PimoError, ValueError):
    code = "timestamp_parse_error"

    def __init__(self, text: str):
        self.text = text
        super().__init__(f"unparseable timestamp: {text!r}")


class InvalidURIError(ConfigurationParseError):
    code = "invalid_uri"

    def __init__(self, uri: str):
        self.uri = uri
        super().__init__(
            f"Invalid URI Format {uri!r}. URIs must begin with a mongodb:// protocol string.")


class MissingUpdateKeyError(PimoError):
    """A document lacks a field the update clause matches on."""
    code = "missing_update_key"


class MalformedRecordError(PimoError):
    code = "malformed_record"

    def __init__(self, lineno: int, reason: str):
        self.lineno = lineno
        super().__init__(f"record on line {lineno} is not valid JSON: {reason}")
