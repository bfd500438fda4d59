"""Release version of the package."""

from __future__ import annotations

__all__ = ["version"]


def version() -> str:
    """Return the current release version."""
    return "10.11.1"