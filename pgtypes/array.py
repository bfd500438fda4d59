"""PostgreSQL array literals: rendering, parsing and decoding."""

from __future__ import annotations

import typing
from collections.abc import Callable, Iterator
from typing import Any, Optional, Protocol, Union, runtime_checkable

from .append import append, append_null
from .flags import Flag, should_quote_array
from .scan import scan_float64, scan_int, scan_int64, scan_string, scanner

__all__ = [
    "ArrayParser",
    "ArrayValueScanner",
    "Array",
    "append_array",
    "scan_array",
    "scan_string_array",
    "scan_int_array",
    "scan_int64_array",
    "scan_float64_array",
    "scan_array_value_scanner",
]

Data = Union[bytes, bytearray, memoryview, str, None]

_QUOTE = ord('"')
_BACKSLASH = ord("\\")
_COMMA = ord(",")
_LBRACE = ord("{")
_RBRACE = ord("}")


def _to_bytes(data: Data) -> bytes:
    if data is None:
        return b""
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


class _ByteReader:
    """Cursor over a byte string with the small set of reads the parsers need."""

    def __init__(self, data: bytes) -> None:
        self._data = data
        self._pos = 0

    def read_byte(self) -> int:
        if self._pos >= len(self._data):
            raise EOFError("unexpected end of data")
        c = self._data[self._pos]
        self._pos += 1
        return c

    def unread_byte(self) -> None:
        self._pos -= 1

    def skip_byte(self, wanted: int) -> None:
        c = self.read_byte()
        if c != wanted:
            self.unread_byte()
            raise ValueError(f"pg: got {chr(c)!r}, wanted {chr(wanted)!r}")

    def read_through(self, delim: int) -> tuple[bytes, bool]:
        """Read up to and including ``delim``; report whether it was found."""
        idx = self._data.find(bytes([delim]), self._pos)
        if idx < 0:
            chunk = self._data[self._pos:]
            self._pos = len(self._data)
            return chunk, False
        chunk = self._data[self._pos:idx + 1]
        self._pos = idx + 1
        return chunk, True

    def read_substring(self) -> bytes:
        """Read a double-quoted string body; the opening quote is already consumed."""
        out = bytearray()
        c = self.read_byte()
        while c != _QUOTE:
            nxt = self.read_byte()
            if c == _BACKSLASH:
                if nxt in (_BACKSLASH, _QUOTE):
                    out.append(nxt)
                    c = self.read_byte()
                else:
                    out.append(_BACKSLASH)
                    c = nxt
                continue
            out.append(c)
            c = nxt
        return bytes(out)


class ArrayParser:
    """Splits the text of a PostgreSQL array into its top-level elements.

    Elements are returned as bytes; NULL elements are returned as None and
    nested arrays as their raw text.
    """

    def __init__(self, data: Data) -> None:
        self._rd = _ByteReader(_to_bytes(data))
        self._error: Optional[Exception] = None
        try:
            self._rd.skip_byte(_LBRACE)
        except EOFError:
            self._error = ValueError("pg: unexpected end of array data")
        except ValueError as err:
            self._error = err

    def next_elem(self) -> Optional[bytes]:
        """Return the next element; raise StopIteration at the end of the array."""
        if self._error is not None:
            raise self._error
        try:
            c = self._rd.read_byte()
        except EOFError:
            raise StopIteration from None
        if c == _RBRACE:
            raise StopIteration
        try:
            if c == _QUOTE:
                elem = self._rd.read_substring()
                self._read_comma_brace()
                return elem
            if c == _LBRACE:
                elem = self._read_sub_array()
                self._read_comma_brace()
                return elem
            self._rd.unread_byte()
            elem = self._read_simple()
        except EOFError as err:
            raise ValueError("pg: unexpected end of array data") from err
        return None if elem == b"NULL" else elem

    def __iter__(self) -> Iterator[Optional[bytes]]:
        while True:
            try:
                elem = self.next_elem()
            except StopIteration:
                return
            yield elem

    def _read_simple(self) -> bytes:
        chunk, found = self._rd.read_through(_COMMA)
        if found:
            return chunk[:-1]
        if chunk.endswith(b"}"):
            return chunk[:-1]
        raise ValueError("pg: unexpected end of array data")

    def _read_sub_array(self) -> bytes:
        out = bytearray(b"{")
        while True:
            c = self._rd.read_byte()
            if c == _RBRACE:
                out.append(_RBRACE)
                return bytes(out)
            if c == _QUOTE:
                out.append(_QUOTE)
                while True:
                    chunk, found = self._rd.read_through(_QUOTE)
                    out += chunk
                    if not found:
                        raise EOFError("unexpected end of data")
                    if len(out) > 1 and out[-2] != _BACKSLASH:
                        break
                continue
            out.append(c)

    def _read_comma_brace(self) -> None:
        c = self._rd.read_byte()
        if c not in (_COMMA, _RBRACE):
            raise ValueError(f"pg: got {chr(c)!r}, wanted ',' or '}}'")


@runtime_checkable
class ArrayValueScanner(Protocol):
    """An object that consumes array elements one at a time."""

    def before_scan_array_value(self, data: Data) -> None:
        """Called once with the whole array text before any element."""

    def scan_array_value(self, data: Data) -> None:
        """Called for each element; None stands for NULL."""

    def after_scan_array_value(self) -> None:
        """Called once after the last element."""


def append_array(values: Optional[typing.Sequence[Any]], flags: int = 0) -> str:
    """Render a list or tuple as a PostgreSQL array literal."""
    flags = int(flags) | Flag.ARRAY
    if values is None:
        return append_null(flags)
    if not isinstance(values, (list, tuple)):
        raise TypeError(f"pg: Array(unsupported {type(values).__name__})")
    quote = should_quote_array(flags)
    flags |= Flag.SUB_ARRAY
    body = ",".join(_append_elem(value, flags) for value in values)
    text = "{" + body + "}"
    return f"'{text}'" if quote else text


def _append_elem(value: Any, flags: int) -> str:
    if isinstance(value, (list, tuple)):
        return append_array(value, flags)
    return append(value, flags)


def _type_name(typ: Any) -> str:
    return getattr(typ, "__name__", repr(typ))


def _elem_scanner(elem_type: Any) -> Callable[[Data], Any]:
    origin = typing.get_origin(elem_type)
    if origin in (list, tuple) or elem_type in (list, tuple):
        args = typing.get_args(elem_type)
        inner = args[0] if args else str
        return lambda data: scan_array(data, inner)
    fn = scanner(elem_type) if isinstance(elem_type, type) else None
    if fn is None:
        raise TypeError(f"pg: Scan(unsupported {_type_name(elem_type)})")
    return fn


def scan_array(data: Data, elem_type: Any = str) -> Optional[list]:
    """Decode an array of ``elem_type`` values; NULL gives None.

    ``elem_type`` may be a generic alias such as ``list[int]`` for nested arrays.
    """
    if data is None:
        return None
    scan_elem = _elem_scanner(elem_type)
    return [scan_elem(elem) for elem in ArrayParser(data)]


def scan_string_array(data: Data) -> Optional[list[str]]:
    """Decode a text array; NULL elements become empty strings."""
    if data is None:
        return None
    return [scan_string(elem) for elem in ArrayParser(data)]


def scan_int_array(data: Data) -> Optional[list[int]]:
    """Decode an integer array; NULL elements become 0."""
    if data is None:
        return None
    return [scan_int(elem) for elem in ArrayParser(data)]


def scan_int64_array(data: Data) -> Optional[list[int]]:
    """Decode a bigint array; NULL elements become 0."""
    if data is None:
        return None
    return [scan_int64(elem) for elem in ArrayParser(data)]


def scan_float64_array(data: Data) -> Optional[list[float]]:
    """Decode a double precision array; NULL elements become 0.0."""
    if data is None:
        return None
    return [scan_float64(elem) for elem in ArrayParser(data)]


def scan_array_value_scanner(target: ArrayValueScanner, data: Data) -> ArrayValueScanner:
    """Feed every element of the array to ``target`` and return it."""
    if data is None:
        return target
    target.before_scan_array_value(data)
    for elem in ArrayParser(data):
        target.scan_array_value(elem)
    target.after_scan_array_value()
    return target


class Array:
    """Wraps a list so it is rendered and decoded as a PostgreSQL array."""

    def __init__(self, value: Any = None, elem_type: Any = None) -> None:
        self.value = value
        self.elem_type = elem_type

    def append_value(self, flags: int = 0) -> str:
        return append_array(self.value, flags)

    def scan_value(self, data: Data) -> None:
        """Decode ``data`` into ``self.value``."""
        if isinstance(self.value, ArrayValueScanner):
            scan_array_value_scanner(self.value, data)
            return
        self.value = scan_array(data, self._resolve_elem_type())

    def _resolve_elem_type(self) -> Any:
        if self.elem_type is not None:
            return self.elem_type
        if isinstance(self.value, (list, tuple)) and self.value:
            first = self.value[0]
            if first is not None:
                return type(first)
        return str

    def __repr__(self) -> str:
        return f"Array({self.value!r})"