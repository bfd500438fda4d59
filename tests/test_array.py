import math

import pytest
from hypothesis import given
from hypothesis import strategies as st

from pgtypes.array import (
    Array,
    ArrayParser,
    append_array,
    scan_array,
    scan_array_value_scanner,
    scan_float64_array,
    scan_int64_array,
    scan_int_array,
    scan_string_array,
)
from pgtypes.flags import Flag
from pgtypes.scan import scan_int

ARRAY_TESTS = [
    ("{}", []),
    ('{""}', [b""]),
    ('{"\\\\"}', [b"\\"]),
    ("{\"''\"}", [b"''"]),
    ("{{\"''\\\"{}\"}}", [b"{\"''\\\"{}\"}"]),
    ("{\"''\\\"{}\"}", [b"''\"{}"]),
    ("{1,2}", [b"1", b"2"]),
    ("{1,NULL}", [b"1", None]),
    ('{"1","2"}', [b"1", b"2"]),
    ('{"{1}","{2}"}', [b"{1}", b"{2}"]),
    ("{{1,2},{3}}", [b"{1,2}", b"{3}"]),
]


@pytest.mark.parametrize("text,wanted", ARRAY_TESTS)
def test_array_parser(text, wanted):
    assert list(ArrayParser(text.encode())) == wanted


def test_next_elem_stops_at_end():
    parser = ArrayParser(b"{a}")
    assert parser.next_elem() == b"a"
    with pytest.raises(StopIteration):
        parser.next_elem()


def test_parser_rejects_missing_brace():
    with pytest.raises(ValueError):
        ArrayParser(b"[1]").next_elem()


def test_parser_rejects_empty_data():
    with pytest.raises(ValueError):
        list(ArrayParser(b""))


@pytest.mark.parametrize("text", [b'{"a"x}', b'{"abc', b"{1,2", b"{{1,2"])
def test_parser_rejects_malformed(text):
    with pytest.raises(ValueError):
        list(ArrayParser(text))


def test_append_ints():
    assert append_array([1, 2, 3]) == "{1,2,3}"


def test_append_empty_and_null():
    assert append_array([]) == "{}"
    assert append_array([], Flag.QUOTE) == "'{}'"
    assert append_array(None, Flag.QUOTE) == "NULL"
    assert append_array(None) == ""


def test_append_strings_quoted():
    assert append_array(["a'b", 'c"d'], Flag.QUOTE) == "'{\"a''b\",\"c\\\"d\"}'"


def test_append_nested_quoted_once():
    assert append_array([[1, 2], [3, 4]], Flag.QUOTE) == "'{{1,2},{3,4}}'"


def test_append_null_elements():
    assert append_array([1, None], Flag.QUOTE) == "'{1,NULL}'"


def test_append_special_floats_unquoted_inside():
    assert append_array([1.5, float("nan")], Flag.QUOTE) == "'{1.5,NaN}'"


def test_append_rejects_non_sequence():
    with pytest.raises(TypeError):
        append_array(42)


def test_bytes_round_trip():
    text = append_array([b"\x01\xff"])
    assert scan_array(text, bytes) == [b"\x01\xff"]


def test_scan_typed_arrays():
    assert scan_int_array(b"{1,NULL,3}") == [1, 0, 3]
    assert scan_int64_array(b"{-9223372036854775808}") == [-9223372036854775808]
    assert scan_string_array(b'{foo,NULL,"b\\"r"}') == ["foo", "", 'b"r']
    floats = scan_float64_array(b"{1.5,NaN}")
    assert floats[0] == 1.5 and math.isnan(floats[1])


def test_scan_null_gives_none():
    assert scan_string_array(None) is None
    assert scan_int_array(None) is None
    assert scan_array(None, int) is None


def test_scan_nested():
    assert scan_array(b"{{1,2},{3}}", list[int]) == [[1, 2], [3]]


def test_scan_bad_int():
    with pytest.raises(ValueError):
        scan_int_array(b"{1,x}")


def test_scan_unsupported_type():
    with pytest.raises(TypeError):
        scan_array(b"{1}", complex)


class _Summer:
    def __init__(self):
        self.total = 0
        self.finished = False

    def before_scan_array_value(self, data):
        self.total = 0

    def scan_array_value(self, data):
        self.total += scan_int(data)

    def after_scan_array_value(self):
        self.finished = True


def test_array_value_scanner_sum():
    text = "{" + ",".join(str(i) for i in range(11)) + "}"
    summer = scan_array_value_scanner(_Summer(), text)
    assert summer.total == 55
    assert summer.finished


def test_array_wrapper_round_trip():
    src = Array(["one@example.com", "two@example.com"])
    text = src.append_value(0)
    dst = Array(None, str)
    dst.scan_value(text)
    assert dst.value == ["one@example.com", "two@example.com"]


def test_array_wrapper_infers_type():
    dst = Array([0])
    dst.scan_value(b"{4,5}")
    assert dst.value == [4, 5]


def test_array_wrapper_with_scanner():
    summer = _Summer()
    Array(summer).scan_value(b"{1,2,3}")
    assert summer.total == 6


def test_array_wrapper_unsupported():
    with pytest.raises(TypeError):
        Array(42).append_value(0)


_text = st.text(alphabet=st.characters(min_codepoint=1, max_codepoint=0xD7FF))


@given(st.lists(_text))
def test_string_round_trip(values):
    assert scan_string_array(append_array(values)) == values


@given(st.lists(st.integers(min_value=-(2**63), max_value=2**63 - 1)))
def test_int_round_trip(values):
    assert scan_int64_array(append_array(values)) == values