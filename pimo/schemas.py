# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

"""Pydantic models for record schemas and parsed storage options."""

from __future__ import annotations
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class TypeTag(str, Enum):
    """Closed set of field types a record schema can describe."""
    INT32 = "int"
    INT64 = "long"
    FLOAT32 = "float"
    FLOAT64 = "double"
    BYTES = "bytearray"
    TEXT = "chararray"
    MAP = "map"
    RECORD = "tuple"
    COLLECTION = "bag"


class FieldSchema(BaseModel):
    """
    One named, typed field. ``subschema`` describes the nested structure of
    RECORD and COLLECTION fields and is ignored for every other type; its
    presence is checked when a value is transcoded, not here.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    type: TypeTag
    subschema: Optional[RecordSchema] = None


class RecordSchema(BaseModel):
    """Ordered fields, positionally aligned with a record's values."""
    model_config = ConfigDict(frozen=True)

    fields: Tuple[FieldSchema, ...] = ()


FieldSchema.model_rebuild()
RecordSchema.model_rebuild()


INDEX_FLAGS = ("sparse", "unique", "dropDups", "background")


class UpdateSpec(BaseModel):
    """Output fields matching the target document(s) of an update write."""
    model_config = ConfigDict(frozen=True)

    keys: Tuple[str, ...]
    multi: bool = False


class IndexSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    keys: Mapping[str, int]
    options: Mapping[str, bool] = Field(default_factory=dict, validate_default=True)

    @field_validator("keys")
    @classmethod
    def _freeze_keys(cls, v: Mapping[str, int]) -> Mapping[str, int]:
        return MappingProxyType(dict(v))

    @field_validator("options")
    @classmethod
    def _default_flags(cls, v: Mapping[str, bool]) -> Mapping[str, bool]:
        out = dict(v)
        for flag in INDEX_FLAGS:
            out.setdefault(flag, False)
        return MappingProxyType(out)

    @field_serializer("keys", "options")
    def _thaw(self, v: Mapping[str, Any]) -> Dict[str, Any]:
        return dict(v)


DROPNULL = "dropnull"
IDKEY = "id"
OPKEY = "mongo"


class StorageOptions(BaseModel):
    """
    Parsed storage arguments. Built once by ``pimo.options.parse_arguments``
    and read-only afterwards; the id and operator-prefix rules are disabled
    when their property is absent or empty.
    """
    model_config = ConfigDict(frozen=True)

    update: Optional[UpdateSpec] = None
    indexes: Tuple[IndexSpec, ...] = ()
    properties: Mapping[str, str] = Field(default_factory=dict, validate_default=True)

    @field_validator("properties")
    @classmethod
    def _freeze_properties(cls, v: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(v))

    @field_serializer("properties")
    def _thaw(self, v: Mapping[str, str]) -> Dict[str, str]:
        return dict(v)

    def get_property(self, key: str) -> Optional[str]:
        return self.properties.get(key)

    def should_drop_null(self) -> bool:
        return (self.get_property(DROPNULL) or "").lower() == "true"

    def get_id_key(self) -> Optional[str]:
        return self.get_property(IDKEY) or None

    def get_op_prefix(self) -> Optional[str]:
        return self.get_property(OPKEY) or None

    def should_update(self) -> bool:
        return self.update is not None

    def describe(self) -> Dict[str, Any]:
        return {
            "drop_null": self.should_drop_null(),
            "id_key": self.get_id_key(),
            "op_prefix": self.get_op_prefix(),
            "update": self.update.model_dump() if self.update else None,
            "indexes": [ix.model_dump() for ix in self.indexes],
            "properties": dict(self.properties),
        }
