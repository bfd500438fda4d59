import pytest
from hypothesis import given
from hypothesis import strategies as st

from pgtypes.flags import Flag
from pgtypes.hstore import Hstore, append_hstore, iter_hstore, scan_hstore

HSTORE_TESTS = [
    ('""=>""', {"": ""}),
    ("\"k''k\"=>\"k''k\"", {"k''k": "k''k"}),
    ('"k\\"k"=>"k\\"k"', {'k"k': 'k"k'}),
    ('"k\\k"=>"k\\k"', {"k\\k": "k\\k"}),
    ('"foo"=>"bar"', {"foo": "bar"}),
    ('"foo"=>"bar","k"=>"v"', {"foo": "bar", "k": "v"}),
]


@pytest.mark.parametrize("text,wanted", HSTORE_TESTS)
def test_hstore_parser(text, wanted):
    assert scan_hstore(text.encode()) == wanted


def test_parser_skips_space_after_comma():
    assert list(iter_hstore(b'"a"=>"1", "b"=>"2"')) == [("a", "1"), ("b", "2")]


def test_scan_null():
    assert scan_hstore(None) is None
    assert scan_hstore(b"") == {}


@pytest.mark.parametrize("text", [b'"a"=>NULL', b'"a"="b"', b'"a"=>"b', b"x"])
def test_parser_errors(text):
    with pytest.raises(ValueError):
        scan_hstore(text)


def test_append():
    assert append_hstore({"hello": "world"}) == '"hello"=>"world"'
    assert append_hstore({"hello": "world"}, Flag.QUOTE) == "'\"hello\"=>\"world\"'"
    assert append_hstore({"a": "1", "b": "2"}) == '"a"=>"1","b"=>"2"'


def test_append_null_and_empty():
    assert append_hstore(None, Flag.QUOTE) == "NULL"
    assert append_hstore({}, Flag.QUOTE) == "''"


def test_hstore_wrapper_round_trip():
    src = Hstore({"hello": "world"})
    dst = Hstore()
    dst.scan_value(src.append_value(0))
    assert dst.value == {"hello": "world"}


def test_hstore_rejects_non_mapping():
    with pytest.raises(TypeError):
        Hstore(42)


def test_hstore_non_string_values_render_error():
    assert Hstore({1: 2}).append_value(0).startswith("?!(pg.Hstore(unsupported")


_text = st.text(alphabet=st.characters(min_codepoint=1, max_codepoint=0xD7FF))


@given(st.dictionaries(_text, _text))
def test_round_trip(mapping):
    assert scan_hstore(append_hstore(mapping)) == mapping