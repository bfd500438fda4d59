# pgtypes

Turn Python values into PostgreSQL literals, and turn the text that
PostgreSQL sends back into Python values.

The package handles only PostgreSQL's text format. You can use it to build
SQL fragments that are safe to send, or to decode result columns that a driver
gives you as raw bytes.

## Installation

```
pip install pgtypes
```

To run the test suite:

```
pip install "pgtypes[test]"
pytest
```

## Flags

Every encoder takes a `flags` integer built from `pgtypes.flags.Flag`:

- `Flag.QUOTE` produces a complete SQL literal: strings in single quotes,
  `NULL` for `None`, and quoted `'NaN'` and `'Infinity'`.
- `Flag.ARRAY` produces an element inside an array literal, with double
  quotes and backslash escapes.
- With no flags you get the bare text. `None` then becomes an empty string.

`has_flag(flags, flag)` and `should_quote_array(flags)` are the helpers that
the encoders use to test these bits.

## Encoding values

```python
from pgtypes.append import append, append_ident, Safe, Ident
from pgtypes.flags import Flag

append("it's", Flag.QUOTE)        # "'it''s'"
append(None, Flag.QUOTE)          # "NULL"
append(True, 0)                   # "TRUE"
append(float("nan"), Flag.QUOTE)  # "'NaN'"
append(b"\x01\xff", Flag.QUOTE)   # "'\\x01ff'"

append_ident("table.id", Flag.QUOTE)  # '"table"."id"'
append_ident("table.*", Flag.QUOTE)   # '"table".*'

Safe("id = 1").append_value(Flag.QUOTE)  # "id = 1", inserted verbatim
Ident("user").append_value(Flag.QUOTE)   # '"user"'
```

How `append` renders each kind of value:

- Integers and booleans are written as plain numbers and as `TRUE` or `FALSE`.
- Floats are written in positional notation.
- Strings have their NUL characters dropped.
- `datetime` values are written as UTC timestamps.
- `ipaddress` addresses and networks are written as strings.
- Lists, tuples, mappings and dataclasses are written as JSON, through
  `append_jsonb`. That function also escapes `\u0000`.
- An object with an `append_value(flags)` method (see `ValueAppender`) is
  asked to render itself. If that method raises, the output is `?!(message)`
  (see `append_error`).
- Any other type raises `TypeError`.

`register_appender(typ, fn)` installs your own `fn(value, flags)` for a type.
It raises `ValueError` if that type already has an appender, and that includes
an appender that `appender(typ)` has already looked up and cached. Register
your appenders before you encode any values of those types.

## Bytea streams

`pgtypes.hexcodec.HexEncoder` is a writable sink that you can use as a
context manager. It builds a bytea hex literal from the chunks you write to it
and gives you the text through `getvalue()`. If nothing was written before
`close()`, the result renders as NULL. `hex_decoder(data)` takes `\x…` text
and returns an `io.BytesIO` holding the decoded bytes.

## Arrays, hstore and IN lists

```python
from pgtypes.array import Array, ArrayParser, append_array, scan_array, scan_int_array
from pgtypes.hstore import Hstore, scan_hstore, iter_hstore
from pgtypes.in_op import in_values, in_multi
from pgtypes.flags import Flag

append_array(["a", "b"], Flag.QUOTE)          # '\'{"a","b"}\''
Array([1, 2]).append_value(0)                 # "{1,2}"
scan_int_array(b"{1,2,NULL}")                 # [1, 2, 0]
scan_array(b"{{1,2},{3}}", list[int])         # [[1, 2], [3]]
list(ArrayParser(b'{1,"two",NULL}'))          # [b"1", b"two", None]

Hstore({"k": "v"}).append_value(Flag.QUOTE)   # '\'"k"=>"v"\''
scan_hstore(b'"foo"=>"bar","k"=>"v"')         # {"foo": "bar", "k": "v"}

in_multi(1, 2, 3).append_value(0)             # "1,2,3"
in_values([[1, 2], [3, 4]]).append_value(0)   # "(1,2),(3,4)"
```

Other array helpers:

- `scan_string_array`, `scan_int64_array` and `scan_float64_array` decode
  arrays of those types. In them a NULL element becomes `""`, `0` or `0.0`.
- An object that implements `ArrayValueScanner` can take the elements one at
  a time through `scan_array_value_scanner`.
- `in_values` given something other than a list or tuple raises `TypeError`
  when the value is rendered.

## Decoding values

The scanners take raw column text as `bytes` or `str`. `None` stands for SQL
`NULL`.

```python
from pgtypes.scan import scan, scan_int, scan_bytes, scan_bool, scan_time
from pgtypes.pgtime import parse_time_string

scan_int(b"42")          # 42
scan_bytes(b"\\x0102")   # b"\x01\x02"
scan_bool(b"t")          # True
scan(float, b"1.5")      # 1.5
parse_time_string("2006-01-02 15:04:05.999999-07")
```

Integer scanners check the range of the value, and `scan_int64(data, bit_size)`
takes the width in bits. `scan_uint64` accepts negative values and wraps them
to their unsigned form.

`scan(target, data)` works in two ways:

- Given a type, it decodes into a new value of that type, using
  `scanner(typ)`. You can add scanners with `register_scanner`.
- Given an object with a `scan_value` or `scan` method, it fills that object
  in place.

`pgtypes.column.read_column_value(col, data)` decodes a value according to the
type OID in a `ColumnInfo`. It returns JSON and JSONB columns as strings. Any
OID it does not recognise comes back as a `RawValue`.

## Times

`pgtypes.pgtime.parse_time_string` accepts these forms:

- dates
- times of day, which come back as a UTC `datetime.time`
- timestamps with or without an offset
- RFC 3339 text

A value without an offset is taken to be UTC. `append_time` always writes UTC
in the form `2006-01-02 15:04:05.999999+00:00:00`, and quotes the result only
when `flags` is exactly `Flag.QUOTE`. `scan_time` returns `None` for NULL.

`pgtypes.scan.NullTime` holds an optional `datetime`. When it is unset it
renders as SQL `NULL` and as JSON `null` (see `to_json` and `from_json`).

## What it does not do

This is a codec library and nothing more. It does not:

- connect to a server
- send queries
- manage transactions or connection pools
- map rows onto model classes

Pair it with a driver for those tasks.

## Version

`pgtypes.version.version()` returns the release string.