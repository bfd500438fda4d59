"""Formatting flags that control how values are rendered into SQL text."""

from __future__ import annotations

import enum

__all__ = ["Flag", "has_flag", "should_quote_array"]


class Flag(enum.IntFlag):
    """Bit flags passed to every append function."""

    QUOTE = 1
    ARRAY = 2
    SUB_ARRAY = 4


def has_flag(flags: int, flag: int) -> bool:
    """Return True when every bit of ``flag`` is set in ``flags``."""
    return flags & flag == flag


def should_quote_array(flags: int) -> bool:
    """Return True when an array literal must be wrapped in single quotes."""
    return has_flag(flags, Flag.QUOTE) and not has_flag(flags, Flag.SUB_ARRAY)