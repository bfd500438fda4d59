"""Decoding of PostgreSQL text-format column values into Python values.

Column data is passed as ``bytes`` (or ``str``); ``None`` stands for SQL NULL.
"""

from __future__ import annotations

import dataclasses
import ipaddress
import json
import math
import re
import struct
import threading
from collections.abc import Callable, Mapping
from datetime import datetime
from datetime import time as clock_time
from datetime import timezone
from typing import Any, Optional, Protocol, Union, runtime_checkable

from .append import append_null
from .pgtime import append_time, parse_time, parse_time_string

__all__ = [
    "ValueScanner",
    "NullTime",
    "scan",
    "scan_string",
    "scan_bytes",
    "read_bytes",
    "scan_int",
    "scan_int64",
    "scan_uint64",
    "scan_float32",
    "scan_float64",
    "scan_time",
    "scan_bool",
    "register_scanner",
    "scanner",
    "scan_value",
]

Data = Union[bytes, bytearray, memoryview, str, None]
ScannerFunc = Callable[[Data], Any]

_INT_RE = re.compile(r"[+-]?[0-9]+")
_UINT_RE = re.compile(r"[0-9]+")
_INF_WORDS = {"inf", "+inf", "-inf", "infinity", "+infinity", "-infinity"}


@runtime_checkable
class ValueScanner(Protocol):
    """An object that fills itself from column data."""

    def scan_value(self, data: Data) -> None:
        """Decode ``data`` (None for NULL) into this object."""


def _as_bytes(data: Data) -> Optional[bytes]:
    if data is None:
        return None
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def _as_text(data: Data) -> str:
    raw = _as_bytes(data)
    return "" if raw is None else raw.decode("utf-8")


def scan_string(data: Data) -> str:
    """Decode a text value; NULL and empty data give an empty string."""
    return _as_text(data)


def read_bytes(data: Data) -> bytes:
    """Decode bytea text in ``\\x`` hex format."""
    raw = _as_bytes(data) or b""
    if len(raw) < 2 or raw[:2] != b"\\x":
        raise ValueError(f"pg: can't parse bytea: {raw!r}")
    try:
        return bytes.fromhex(raw[2:].decode("ascii"))
    except (UnicodeDecodeError, ValueError) as err:
        raise ValueError(f"pg: can't parse bytea: {raw!r}") from err


def scan_bytes(data: Data) -> Optional[bytes]:
    """Decode a bytea value; NULL gives None."""
    raw = _as_bytes(data)
    if raw is None:
        return None
    if not raw:
        return b""
    return read_bytes(raw)


def _parse_int(text: str, bit_size: int) -> int:
    if not _INT_RE.fullmatch(text):
        raise ValueError(f"pg: can't parse int {text!r}: invalid syntax")
    num = int(text)
    limit = 1 << (bit_size - 1)
    if not -limit <= num < limit:
        raise ValueError(f"pg: can't parse int {text!r}: value out of range")
    return num


def scan_int64(data: Data, bit_size: int = 64) -> int:
    """Decode a signed integer that must fit in ``bit_size`` bits; NULL gives 0."""
    text = _as_text(data)
    if not text:
        return 0
    return _parse_int(text, bit_size)


def scan_int(data: Data) -> int:
    """Decode a 64-bit signed integer; NULL gives 0."""
    return scan_int64(data, 64)


def scan_uint64(data: Data) -> int:
    """Decode an unsigned 64-bit integer; NULL gives 0.

    Negative 64-bit values are accepted and wrapped to their unsigned form.
    """
    text = _as_text(data)
    if not text:
        return 0
    if text.startswith("-"):
        return _parse_int(text, 64) & ((1 << 64) - 1)
    if not _UINT_RE.fullmatch(text):
        raise ValueError(f"pg: can't parse uint {text!r}: invalid syntax")
    num = int(text)
    if num >= 1 << 64:
        raise ValueError(f"pg: can't parse uint {text!r}: value out of range")
    return num


def _parse_float(text: str) -> float:
    if "_" in text or text != text.strip():
        raise ValueError(f"pg: can't parse float {text!r}: invalid syntax")
    try:
        num = float(text)
    except ValueError as err:
        raise ValueError(f"pg: can't parse float {text!r}: invalid syntax") from err
    if math.isinf(num) and text.lower() not in _INF_WORDS:
        raise ValueError(f"pg: can't parse float {text!r}: value out of range")
    return num


def scan_float64(data: Data) -> float:
    """Decode a double precision value; NULL gives 0.0."""
    text = _as_text(data)
    if not text:
        return 0.0
    return _parse_float(text)


def scan_float32(data: Data) -> float:
    """Decode a single precision value, rounded to float32; NULL gives 0.0."""
    text = _as_text(data)
    if not text:
        return 0.0
    num = _parse_float(text)
    try:
        return struct.unpack("f", struct.pack("f", num))[0]
    except OverflowError as err:
        raise ValueError(f"pg: can't parse float {text!r}: value out of range") from err


def scan_time(data: Data) -> Union[datetime, clock_time, None]:
    """Decode a date/time value; NULL and empty data give None."""
    raw = _as_bytes(data)
    if not raw:
        return None
    return parse_time(raw)


def scan_bool(data: Data) -> bool:
    """Decode a boolean: true only for ``t`` or ``1``."""
    raw = _as_bytes(data)
    return raw in (b"t", b"1")


@dataclasses.dataclass
class NullTime:
    """A datetime that is rendered as NULL (and JSON null) when unset."""

    time: Optional[datetime] = None

    @property
    def is_zero(self) -> bool:
        return self.time is None

    def to_json(self) -> str:
        """Return the JSON text for this value."""
        if self.time is None:
            return "null"
        tm = self.time
        if tm.tzinfo is None:
            tm = tm.replace(tzinfo=timezone.utc)
        text = (
            f"{tm.year:04d}-{tm.month:02d}-{tm.day:02d}"
            f"T{tm.hour:02d}:{tm.minute:02d}:{tm.second:02d}"
        )
        if tm.microsecond:
            text += "." + f"{tm.microsecond:06d}".rstrip("0")
        offset = int(tm.utcoffset().total_seconds())
        if offset == 0:
            text += "Z"
        else:
            sign = "-" if offset < 0 else "+"
            hours, rest = divmod(abs(offset), 3600)
            text += f"{sign}{hours:02d}:{rest // 60:02d}"
        return json.dumps(text)

    @classmethod
    def from_json(cls, text: Union[str, bytes]) -> "NullTime":
        """Build a value from JSON text: ``null`` or an RFC 3339 string."""
        if isinstance(text, (bytes, bytearray)):
            text = bytes(text).decode("utf-8")
        if text.strip() == "null":
            return cls()
        value = json.loads(text)
        if not isinstance(value, str):
            raise ValueError(f"pg: can't parse time from JSON {text!r}")
        parsed = parse_time_string(value)
        if not isinstance(parsed, datetime):
            raise ValueError(f"pg: can't parse time from JSON {text!r}")
        return cls(parsed)

    def append_value(self, flags: int = 0) -> str:
        if self.time is None:
            return append_null(flags)
        return append_time(self.time, flags)

    def scan(self, data: Data) -> None:
        """Fill from column data; NULL clears the value."""
        raw = _as_bytes(data)
        if raw is None:
            self.time = None
            return
        self.time = parse_time(raw)


def _scan_bool_value(data: Data) -> bool:
    if data is None:
        return False
    return scan_bool(data)


def _scan_ip_value(data: Data) -> Any:
    if data is None:
        return None
    text = _as_text(data)
    try:
        return ipaddress.ip_address(text)
    except ValueError as err:
        raise ValueError(f"pg: invalid ip={text!r}") from err


def _ip_scanner(typ: type) -> ScannerFunc:
    def scan_ip(data: Data) -> Any:
        value = _scan_ip_value(data)
        if value is not None and not isinstance(value, typ):
            raise ValueError(f"pg: invalid ip={_as_text(data)!r}")
        return value

    return scan_ip


def _network_scanner(typ: type) -> ScannerFunc:
    def scan_network(data: Data) -> Any:
        if data is None:
            return None
        text = _as_text(data)
        if "/" not in text:
            raise ValueError(f"pg: invalid cidr={text!r}")
        try:
            value = ipaddress.ip_network(text, strict=False)
        except ValueError as err:
            raise ValueError(f"pg: invalid cidr={text!r}") from err
        if not isinstance(value, typ):
            raise ValueError(f"pg: invalid cidr={text!r}")
        return value

    return scan_network


def _json_scanner(typ: type) -> ScannerFunc:
    def scan_json(data: Data) -> Any:
        raw = _as_bytes(data)
        if raw is None:
            if dataclasses.is_dataclass(typ) or typ is object:
                return None
            return typ()
        value = json.loads(raw.decode("utf-8"))
        if dataclasses.is_dataclass(typ):
            if not isinstance(value, dict):
                raise ValueError(f"pg: can't decode {typ.__name__} from {raw!r}")
            return typ(**value)
        if typ is object:
            return value
        if not isinstance(value, (list, dict)):
            raise ValueError(f"pg: can't decode {typ.__name__} from {raw!r}")
        return typ(value)

    return scan_json


def _value_scanner_scanner(typ: type) -> ScannerFunc:
    def scan_with(data: Data) -> Any:
        target = typ()
        target.scan_value(data)
        return target

    return scan_with


def _sql_scanner_scanner(typ: type) -> ScannerFunc:
    def scan_with(data: Data) -> Any:
        target = typ()
        target.scan(_as_bytes(data))
        return target

    return scan_with


def _has_sql_scan(typ: type) -> bool:
    return callable(getattr(typ, "scan", None))


def _make_scanner(typ: type) -> Optional[ScannerFunc]:
    if issubclass(typ, (datetime, clock_time)):
        return scan_time
    if issubclass(typ, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return _ip_scanner(typ)
    if issubclass(typ, (ipaddress.IPv4Network, ipaddress.IPv6Network)):
        return _network_scanner(typ)
    if issubclass(typ, ValueScanner):
        return _value_scanner_scanner(typ)
    if _has_sql_scan(typ) and not issubclass(typ, (str, bytes, list, dict, tuple)):
        return _sql_scanner_scanner(typ)
    if issubclass(typ, bool):
        return _scan_bool_value
    if issubclass(typ, int):
        return scan_int
    if issubclass(typ, float):
        return scan_float64
    if issubclass(typ, str):
        return scan_string
    if issubclass(typ, bytes):
        return scan_bytes
    if typ is object or issubclass(typ, (list, tuple, Mapping)) or dataclasses.is_dataclass(typ):
        return _json_scanner(typ)
    return None


_scanners: dict[type, Optional[ScannerFunc]] = {}
_scanners_lock = threading.Lock()


def register_scanner(typ: type, fn: ScannerFunc) -> None:
    """Register ``fn(data)`` as the scanner for ``typ``.

    Raises ValueError if a scanner for the type is already known.
    """
    with _scanners_lock:
        if typ in _scanners:
            raise ValueError(f"pg: scanner for the type={typ.__name__} is already registered")
        _scanners[typ] = fn


def scanner(typ: type) -> Optional[ScannerFunc]:
    """Return the scanner for ``typ``, or None if the type is unsupported."""
    with _scanners_lock:
        if typ in _scanners:
            return _scanners[typ]
    fn = _make_scanner(typ)
    with _scanners_lock:
        return _scanners.setdefault(typ, fn)


def scan_value(typ: Optional[type], data: Data) -> Any:
    """Decode ``data`` into a new value of type ``typ``."""
    if typ is None:
        raise TypeError("pg: Scan(nil)")
    fn = scanner(typ)
    if fn is None:
        raise TypeError(f"pg: Scan(unsupported {typ.__name__})")
    return fn(data)


def scan(target: Any, data: Data) -> Any:
    """Decode ``data`` into ``target`` and return the result.

    ``target`` is either a type, in which case a new value is returned, or an
    object with a ``scan_value`` or ``scan`` method that is filled in place
    and returned.
    """
    if target is None:
        raise TypeError("pg: Scan(nil)")
    if isinstance(target, type):
        return scan_value(target, data)
    if isinstance(target, ValueScanner):
        target.scan_value(data)
        return target
    if callable(getattr(target, "scan", None)):
        target.scan(_as_bytes(data))
        return target
    raise TypeError(f"pg: Scan(non-pointer {type(target).__name__})")