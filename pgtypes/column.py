"""Decoding column values by their PostgreSQL type OID."""

from __future__ import annotations

import dataclasses
import enum
import json
from typing import Any

from .append import append_string
from .array import Data, scan_float64_array, scan_int64_array, scan_string_array
from .scan import (
    scan_bool,
    scan_bytes,
    scan_float32,
    scan_float64,
    scan_int64,
    scan_string,
    scan_time,
)

__all__ = ["ColumnInfo", "RawValue", "read_column_value"]


class _Oid(enum.IntEnum):
    BOOL = 16
    INT2 = 21
    INT4 = 23
    INT8 = 20
    FLOAT4 = 700
    FLOAT8 = 701
    TEXT = 25
    VARCHAR = 1043
    BYTEA = 17
    JSON = 114
    JSONB = 3802
    TIMESTAMP = 1114
    TIMESTAMPTZ = 1184
    INT4_ARRAY = 1007
    INT8_ARRAY = 1016
    FLOAT8_ARRAY = 1022
    TEXT_ARRAY = 1009
    UUID = 2950


@dataclasses.dataclass(frozen=True)
class ColumnInfo:
    """Name and type OID of a result column."""

    name: str
    data_type: int


@dataclasses.dataclass(frozen=True)
class RawValue:
    """Text of a column whose type has no dedicated decoder."""

    type: int
    value: str

    def append_value(self, flags: int = 0) -> str:
        return append_string(self.value, flags)

    def to_json(self) -> str:
        """Return the value as a JSON string."""
        return json.dumps(self.value, ensure_ascii=False)


def read_column_value(col: ColumnInfo, data: Data) -> Any:
    """Decode ``data`` according to the column's type OID."""
    oid = col.data_type
    if oid == _Oid.BOOL:
        return scan_bool(data)
    if oid == _Oid.INT2:
        return scan_int64(data, 16)
    if oid == _Oid.INT4:
        return scan_int64(data, 32)
    if oid == _Oid.INT8:
        return scan_int64(data)
    if oid == _Oid.FLOAT4:
        return scan_float32(data)
    if oid == _Oid.FLOAT8:
        return scan_float64(data)
    if oid == _Oid.BYTEA:
        return scan_bytes(data)
    if oid in (_Oid.TEXT, _Oid.VARCHAR, _Oid.UUID, _Oid.JSON, _Oid.JSONB):
        return scan_string(data)
    if oid in (_Oid.TIMESTAMP, _Oid.TIMESTAMPTZ):
        return scan_time(data)
    if oid in (_Oid.INT4_ARRAY, _Oid.INT8_ARRAY):
        return scan_int64_array(data)
    if oid == _Oid.FLOAT8_ARRAY:
        return scan_float64_array(data)
    if oid == _Oid.TEXT_ARRAY:
        return scan_string_array(data)
    return RawValue(type=oid, value=scan_string(data))