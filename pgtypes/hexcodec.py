"""Streaming bytea hex encoding and decoding."""

from __future__ import annotations

import binascii
import io
from typing import Optional

from .append import append_null
from .flags import Flag, has_flag

__all__ = ["HexEncoder", "hex_decoder"]


class HexEncoder:
    """Writable sink that renders the bytes written to it as a bytea literal."""

    def __init__(self, flags: int = 0) -> None:
        self.flags = flags
        self._parts: list[str] = []
        self._written = False
        self._closed = False

    def write(self, data: bytes) -> int:
        """Encode ``data`` and return the number of bytes consumed."""
        if self._closed:
            raise ValueError("write to closed HexEncoder")
        data = bytes(data)
        if not self._written:
            if has_flag(self.flags, Flag.ARRAY):
                self._parts.append('"\\')
            elif has_flag(self.flags, Flag.QUOTE):
                self._parts.append("'")
            self._parts.append("\\x")
            self._written = True
        self._parts.append(data.hex())
        return len(data)

    def close(self) -> None:
        """Finish the literal; with nothing written it renders NULL."""
        if self._closed:
            return
        self._closed = True
        if self._written:
            if has_flag(self.flags, Flag.ARRAY):
                self._parts.append('"')
            elif has_flag(self.flags, Flag.QUOTE):
                self._parts.append("'")
        else:
            self._parts = [append_null(self.flags)]

    def getvalue(self) -> str:
        """Return the text produced so far."""
        return "".join(self._parts)

    def __enter__(self) -> "HexEncoder":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def hex_decoder(data: Optional[bytes]) -> io.BytesIO:
    """Return a readable stream of the bytes in a ``\\x``-prefixed bytea text."""
    if not data:
        return io.BytesIO()
    data = bytes(data)
    for position, wanted in enumerate(b"\\x"):
        if position >= len(data):
            raise EOFError("unexpected end of bytea data")
        got = data[position]
        if got != wanted:
            raise ValueError(f"got {chr(got)!r}, wanted {chr(wanted)!r}")
    return io.BytesIO(binascii.unhexlify(data[2:]))