"""Rendering of Python values as PostgreSQL literals."""

from __future__ import annotations

import base64
import dataclasses
import ipaddress
import json
import math
import re
import threading
from collections.abc import Callable, Mapping
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, Protocol, runtime_checkable

from .flags import Flag, has_flag
from .pgtime import append_time

__all__ = [
    "ValueAppender",
    "Safe",
    "Ident",
    "append",
    "append_null",
    "append_error",
    "append_bool",
    "append_float",
    "append_string",
    "append_array_string",
    "append_bytes",
    "append_ident",
    "append_jsonb",
    "register_appender",
    "appender",
]

AppenderFunc = Callable[[Any, int], str]


@runtime_checkable
class ValueAppender(Protocol):
    """An object that renders itself as a SQL literal."""

    def append_value(self, flags: int) -> str:
        """Return the SQL text for this value."""
        ...


class Safe(str):
    """SQL text that is inserted verbatim."""

    def append_value(self, flags: int = 0) -> str:
        return str(self)


class Ident(str):
    """A SQL identifier such as a table or column name."""

    def append_value(self, flags: int = 0) -> str:
        return append_ident(str(self), flags)


def append_null(flags: int = 0) -> str:
    """Render NULL; empty text when quoting is off."""
    return "NULL" if has_flag(flags, Flag.QUOTE) else ""


def append_error(err: BaseException) -> str:
    """Render an error marker in place of a value."""
    return f"?!({err})"


def append_bool(value: bool) -> str:
    """Render a boolean as TRUE or FALSE."""
    return "TRUE" if value else "FALSE"


def _special_float(value: float) -> Optional[str]:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    return None


def _format_float(value: float) -> str:
    # Shortest round-trip digits, always in positional notation.
    return format(Decimal(repr(float(value))).normalize(), "f")


def append_float(value: float, flags: int = 0) -> str:
    """Render a float; NaN and infinities are quoted unless inside an array."""
    value = float(value)
    special = _special_float(value)
    if special is None:
        return _format_float(value)
    if not has_flag(flags, Flag.ARRAY) and has_flag(flags, Flag.QUOTE):
        return f"'{special}'"
    return special


def append_string(s: str, flags: int = 0) -> str:
    """Render a string literal; NUL characters are dropped."""
    if has_flag(flags, Flag.ARRAY):
        return append_array_string(s, flags)
    text = s.replace("\0", "")
    if has_flag(flags, Flag.QUOTE):
        return "'" + text.replace("'", "''") + "'"
    return text


def append_array_string(s: str, flags: int = 0) -> str:
    """Render a string as a double-quoted array element."""
    text = s.replace("\0", "").replace("\\", "\\\\").replace('"', '\\"')
    if has_flag(flags, Flag.QUOTE):
        text = text.replace("'", "''")
    return '"' + text + '"'


def append_bytes(data: Optional[bytes], flags: int = 0) -> str:
    """Render bytes in bytea hex format."""
    if data is None:
        return append_null(flags)
    body = "\\x" + bytes(data).hex()
    if has_flag(flags, Flag.ARRAY):
        return '"\\' + body + '"'
    if has_flag(flags, Flag.QUOTE):
        return "'" + body + "'"
    return body


def append_ident(field: str, flags: int = 0) -> str:
    """Render a possibly dotted identifier, quoting each part."""
    if isinstance(field, (bytes, bytearray)):
        field = bytes(field).decode("utf-8")
    quote = has_flag(flags, Flag.QUOTE)
    out: list[str] = []
    quoted = False
    for c in field:
        if c == "*" and not quoted:
            out.append("*")
            continue
        if c == ".":
            if quoted and quote:
                out.append('"')
                quoted = False
            out.append(".")
            continue
        if not quoted and quote:
            out.append('"')
            quoted = True
        out.append('""' if c == '"' else c)
    if quoted and quote:
        out.append('"')
    return "".join(out)


_JSONB_TOKEN_RE = re.compile(r"\\u0000|\\.?|[\"'\x00]", re.DOTALL)


def append_jsonb(jsonb: bytes | str, flags: int = 0) -> str:
    """Render JSON text as a jsonb literal, escaping ``\\u0000``."""
    if isinstance(jsonb, (bytes, bytearray, memoryview)):
        jsonb = bytes(jsonb).decode("utf-8")
    in_array = has_flag(flags, Flag.ARRAY)
    quote = has_flag(flags, Flag.QUOTE)

    def replace(m: re.Match) -> str:
        token = m.group(0)
        if token == "\\u0000":
            return "\\\\u0000"
        if token.startswith("\\"):
            return token
        if token == '"':
            return '\\"' if in_array else '"'
        if token == "'":
            return "''" if quote else "'"
        return ""

    body = _JSONB_TOKEN_RE.sub(replace, jsonb)
    if in_array:
        return '"' + body + '"'
    if quote:
        return "'" + body + "'"
    return body


def _json_default(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(obj)).decode("ascii")
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def _append_json_value(value: Any, flags: int) -> str:
    try:
        text = json.dumps(
            value,
            ensure_ascii=False,
            separators=(",", ":"),
            allow_nan=False,
            default=_json_default,
        )
    except (TypeError, ValueError) as err:
        return append_error(err)
    return append_jsonb(text, flags)


def _append_appender(value: ValueAppender, flags: int) -> str:
    try:
        return value.append_value(flags)
    except Exception as err:  # an appender failure is rendered in-line
        return append_error(err)


def _append_str_value(value: str, flags: int) -> str:
    return append_string(value, flags)


def _append_int_value(value: int, flags: int) -> str:
    return str(int(value))


def _append_bool_value(value: bool, flags: int) -> str:
    return append_bool(bool(value))


def _append_bytes_value(value: Any, flags: int) -> str:
    return append_bytes(bytes(value), flags)


def _append_address_value(value: Any, flags: int) -> str:
    return append_string(str(value), flags)


_ADDRESS_TYPES = (
    ipaddress.IPv4Address,
    ipaddress.IPv6Address,
    ipaddress.IPv4Network,
    ipaddress.IPv6Network,
)

_DIRECT: dict[type, AppenderFunc] = {
    bool: _append_bool_value,
    int: _append_int_value,
    float: append_float,
    str: _append_str_value,
    datetime: append_time,
    bytes: _append_bytes_value,
}

_appenders: dict[type, Optional[AppenderFunc]] = {}
_appenders_lock = threading.Lock()


def register_appender(typ: type, fn: AppenderFunc) -> None:
    """Register ``fn(value, flags)`` as the appender for ``typ``.

    Raises ValueError if an appender for the type is already known.
    """
    with _appenders_lock:
        if typ in _appenders:
            raise ValueError(
                f"pg: appender for the type={typ.__name__} is already registered"
            )
        _appenders[typ] = fn


def _make_appender(typ: type) -> Optional[AppenderFunc]:
    if issubclass(typ, datetime):
        return append_time
    if issubclass(typ, _ADDRESS_TYPES):
        return _append_address_value
    if issubclass(typ, ValueAppender):
        return _append_appender
    if issubclass(typ, bool):
        return _append_bool_value
    if issubclass(typ, int):
        return _append_int_value
    if issubclass(typ, float):
        return append_float
    if issubclass(typ, str):
        return _append_str_value
    if issubclass(typ, (bytes, bytearray, memoryview)):
        return _append_bytes_value
    if issubclass(typ, (list, tuple, Mapping)) or dataclasses.is_dataclass(typ):
        return _append_json_value
    return None


def appender(typ: type) -> Optional[AppenderFunc]:
    """Return the appender for ``typ``, or None if the type is unsupported."""
    with _appenders_lock:
        if typ in _appenders:
            return _appenders[typ]
    fn = _make_appender(typ)
    with _appenders_lock:
        return _appenders.setdefault(typ, fn)


def append(value: Any, flags: int = 0) -> str:
    """Render any supported value as SQL text."""
    if value is None:
        return append_null(flags)
    direct = _DIRECT.get(type(value))
    if direct is not None:
        return direct(value, flags)
    if isinstance(value, ValueAppender):
        return _append_appender(value, flags)
    fn = appender(type(value))
    if fn is None:
        raise TypeError(f"pg: Append(unsupported {type(value).__name__})")
    return fn(value, flags)