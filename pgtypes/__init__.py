"""Encoding and decoding of PostgreSQL text-format values."""

__version__ = "10.11.1"

__all__ = [
    "append",
    "array",
    "column",
    "flags",
    "hexcodec",
    "hstore",
    "in_op",
    "pgtime",
    "scan",
    "version",
]