"""PostgreSQL hstore literals: rendering and parsing."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any, Optional

from .append import append_array_string, append_error, append_null
from .array import Data, _ByteReader, _to_bytes
from .flags import Flag, has_flag

__all__ = ["Hstore", "iter_hstore", "append_hstore", "scan_hstore"]

_QUOTE = ord('"')


def iter_hstore(data: Data) -> Iterator[tuple[str, str]]:
    """Yield the key/value pairs of hstore text in order."""
    rd = _ByteReader(_to_bytes(data))
    while True:
        try:
            rd.skip_byte(_QUOTE)
        except EOFError:
            return
        try:
            key = rd.read_substring()
            rd.skip_byte(ord("="))
            rd.skip_byte(ord(">"))
            rd.skip_byte(_QUOTE)
            value = rd.read_substring()
        except EOFError as err:
            raise ValueError("pg: unexpected end of hstore data") from err
        try:
            rd.skip_byte(ord(","))
            rd.skip_byte(ord(" "))
        except (EOFError, ValueError):
            pass
        yield key.decode("utf-8"), value.decode("utf-8")


def scan_hstore(data: Data) -> Optional[dict[str, str]]:
    """Decode hstore text into a dict; NULL gives None."""
    if data is None:
        return None
    return dict(iter_hstore(data))


def append_hstore(mapping: Optional[Mapping[str, str]], flags: int = 0) -> str:
    """Render a str-to-str mapping as an hstore literal."""
    if mapping is None:
        return append_null(flags)
    parts = []
    for key, value in mapping.items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise TypeError(
                f"pg.Hstore(unsupported {type(key).__name__}->{type(value).__name__})"
            )
        parts.append(append_array_string(key, flags) + "=>" + append_array_string(value, flags))
    text = ",".join(parts)
    if has_flag(flags, Flag.QUOTE):
        return f"'{text}'"
    return text


class Hstore:
    """Wraps a mapping so it is rendered and decoded as hstore."""

    def __init__(self, value: Any = None) -> None:
        if value is not None and not isinstance(value, Mapping):
            raise TypeError(f"pg.Hstore(unsupported {type(value).__name__})")
        self.value = value

    def append_value(self, flags: int = 0) -> str:
        try:
            return append_hstore(self.value, flags)
        except TypeError as err:
            return append_error(err)

    def scan_value(self, data: Data) -> None:
        """Decode ``data`` into ``self.value``."""
        self.value = scan_hstore(data)

    def __repr__(self) -> str:
        return f"Hstore({self.value!r})"