"""Rendering of value lists for SQL ``IN (...)`` expressions."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Optional

from .append import append

__all__ = ["InOp", "in_values", "in_multi"]


class InOp:
    """A list of values rendered comma separated; nested lists become tuples."""

    def __init__(self, values: Optional[Sequence[Any]], error: Optional[Exception] = None) -> None:
        self.values = values
        self.error = error

    def append_value(self, flags: int = 0) -> str:
        if self.error is not None:
            raise self.error
        return _append_in(self.values or (), flags)

    def __repr__(self) -> str:
        return f"InOp({self.values!r})"


def _append_in(values: Sequence[Any], flags: int) -> str:
    parts = []
    for value in values:
        if isinstance(value, (list, tuple)):
            parts.append("(" + _append_in(value, flags) + ")")
        else:
            parts.append(append(value, flags))
    return ",".join(parts)


def in_values(values: Any) -> InOp:
    """Wrap a list or tuple; anything else renders as an error."""
    if not isinstance(values, (list, tuple)):
        return InOp(None, TypeError(f"pg: In(non-slice {type(values).__name__})"))
    return InOp(values)


def in_multi(*args: Any) -> InOp:
    """Wrap the given values."""
    return InOp(list(args))