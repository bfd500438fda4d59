import ipaddress
import math
from dataclasses import dataclass
from datetime import datetime, time, timezone

import pytest
from hypothesis import given
from hypothesis import strategies as st

from pgtypes.append import append, append_bytes, append_float
from pgtypes.flags import Flag
from pgtypes.pgtime import append_time
from pgtypes.scan import (
    NullTime,
    read_bytes,
    register_scanner,
    scan,
    scan_bool,
    scan_bytes,
    scan_float32,
    scan_float64,
    scan_int,
    scan_int64,
    scan_string,
    scan_time,
    scan_uint64,
    scan_value,
    scanner,
)

utc_datetimes = st.datetimes(timezones=st.just(timezone.utc))


def test_scan_string():
    assert scan_string(None) == ""
    assert scan_string(b"") == ""
    assert scan_string(b"hello") == "hello"


def test_scan_bytes_null_and_empty():
    assert scan_bytes(None) is None
    assert scan_bytes(b"") == b""


@given(st.binary(min_size=1))
def test_scan_bytes_round_trip(data):
    assert scan_bytes(append_bytes(data).encode()) == data


@pytest.mark.parametrize("raw", [b"x", b"ab12", b"\\xzz"])
def test_read_bytes_errors(raw):
    with pytest.raises(ValueError, match="can't parse bytea"):
        read_bytes(raw)


def test_scan_int():
    assert scan_int(b"42") == 42
    assert scan_int(b"-7") == -7
    assert scan_int(None) == 0
    with pytest.raises(ValueError):
        scan_int(b"abc")


def test_scan_int64_bit_size():
    assert scan_int64(b"32767", 16) == 32767
    with pytest.raises(ValueError, match="out of range"):
        scan_int64(b"32768", 16)


@given(st.integers(min_value=-(2**63), max_value=2**63 - 1))
def test_scan_int_round_trip(n):
    assert scan_int(append(n).encode()) == n


def test_scan_uint64_wraps_negative():
    assert scan_uint64(b"-1") == scan_uint64(b"18446744073709551615")
    assert scan_uint64(None) == 0
    with pytest.raises(ValueError):
        scan_uint64(b"18446744073709551616")


@given(st.floats(allow_nan=False))
def test_scan_float64_round_trip(x):
    assert scan_float64(append_float(x).encode()) == x


def test_scan_float64_specials():
    assert scan_float64(append_float(float("inf")).encode()) == float("inf")
    assert math.isnan(scan_float64(append_float(float("nan")).encode()))
    assert scan_float64(None) == 0.0
    with pytest.raises(ValueError):
        scan_float64(b"1e400")


@pytest.mark.parametrize(
    "raw, expected",
    [(b"t", True), (b"1", True), (b"f", False), (b"true", False), (None, False)],
)
def test_scan_bool(raw, expected):
    assert scan_bool(raw) is expected


@given(utc_datetimes)
def test_scan_time_round_trip(dt):
    assert scan_time(append_time(dt).encode()) == dt


def test_scan_time_variants():
    assert scan_time(None) is None
    assert scan_time(b"15:04:05") == time(15, 4, 5, tzinfo=timezone.utc)


def test_scan_value_builtin_types():
    assert scan_value(int, b"5") == 5
    assert scan_value(bool, b"t") is True
    assert scan_value(str, None) == ""
    assert scan_value(dict, b'{"a": 1}') == {"a": 1}
    assert scan_value(list, None) == []


def test_scan_value_dataclass():
    @dataclass
    class Point:
        x: int
        y: int

    assert scan_value(Point, b'{"x": 1, "y": 2}') == Point(1, 2)
    assert scan_value(Point, None) is None


def test_scan_value_ip():
    assert scan_value(ipaddress.IPv4Address, b"10.0.0.1") == ipaddress.ip_address("10.0.0.1")
    with pytest.raises(ValueError, match="pg: invalid ip"):
        scan_value(ipaddress.IPv4Address, b"nope")


def test_scan_value_network():
    got = scan_value(ipaddress.IPv4Network, b"192.168.1.5/24")
    assert got == ipaddress.ip_network("192.168.1.0/24")


def test_scan_value_errors():
    with pytest.raises(TypeError, match="unsupported"):
        scan_value(complex, b"1")
    with pytest.raises(TypeError, match=r"Scan\(nil\)"):
        scan_value(None, b"1")
    assert scanner(complex) is None


def test_register_scanner():
    class Celsius(float):
        pass

    register_scanner(Celsius, lambda data: Celsius(scan_float64(data)))
    assert scan_value(Celsius, b"3") == Celsius(3)
    with pytest.raises(ValueError, match="already registered"):
        register_scanner(Celsius, lambda data: None)


class Recorder:
    def __init__(self):
        self.data = "unset"

    def scan_value(self, data):
        self.data = data


class Lines:
    def __init__(self):
        self.value = "unset"

    def scan(self, data):
        self.value = None if data is None else data.decode().split("\n")


def test_scan_into_value_scanner():
    target = Recorder()
    assert scan(target, b"abc") is target
    assert target.data == b"abc"
    assert scan_value(Recorder, b"x").data == b"x"


def test_scan_into_sql_scanner():
    assert scan_value(Lines, b"foo\nbar").value == ["foo", "bar"]
    assert scan_value(Lines, None).value is None


def test_scan_dispatch_and_errors():
    assert scan(int, b"3") == 3
    with pytest.raises(TypeError, match=r"Scan\(nil\)"):
        scan(None, b"1")
    with pytest.raises(TypeError, match="non-pointer"):
        scan(42, b"1")


def test_null_time_zero():
    zero = NullTime()
    assert zero.to_json() == "null"
    assert NullTime.from_json("null") == zero
    assert zero.append_value(Flag.QUOTE) == "NULL"


@given(utc_datetimes)
def test_null_time_json_round_trip(dt):
    assert NullTime.from_json(NullTime(dt).to_json()).time == dt


@given(utc_datetimes)
def test_null_time_append_and_scan(dt):
    assert NullTime(dt).append_value(Flag.QUOTE) == append_time(dt, Flag.QUOTE)
    target = NullTime()
    target.scan(append_time(dt).encode())
    assert target.time == dt


def test_null_time_scan_null_and_bad_json():
    target = NullTime(datetime(2006, 1, 2, tzinfo=timezone.utc))
    target.scan(None)
    assert target.time is None
    with pytest.raises(ValueError):
        NullTime.from_json("123")