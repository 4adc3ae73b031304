import io

from json_parser import json_array, json_object, number, parser, string

from pycombinators.Prim import run_parser
from pycombinators.State import ParseState


def test_number():
    assert run_parser(number(), "-1.2e0")[0] == -1.2


def test_string():
    assert run_parser(string(), '"Hello, World\n"')[0] == "Hello, World\n"


def test_list():
    assert run_parser(json_array(), '[1, 2, "Hello",]')[0] == [1.0, 2.0, "Hello"]


def test_dict():
    want = {"hello": ["world", []], "x": 4.0}
    assert run_parser(json_object(), '{"hello": ["world", []], "x": 4}')[0] == want


def test_value():
    res, err = run_parser(parser, '{"hello": ["world", []], "x": 4}')
    assert err is None
    assert res == {"hello": ["world", []], "x": 4}


def test_null_and_nesting():
    res, err = run_parser(parser, '[null, {"a": {"b": [1, [2, [3]]]}}, ]')
    assert err is None
    assert res == [None, {"a": {"b": [1.0, [2.0, [3.0]]]}}]


def test_non_string_key_fails():
    state = ParseState('{1: 2}')
    res = parser.parse(state)
    assert res.error is not None
    assert state.index() == 0
    assert state.outstanding_holds == 0


def test_streamed_document():
    doc = "[" + ", ".join('{"n": %d}' % i for i in range(2000)) + "]"
    state = ParseState.from_reader(io.BytesIO(doc.encode("utf-8")), prefill=64)
    res = parser.parse(state)
    assert res.error is None
    assert len(res.value) == 2000
    assert res.value[-1] == {"n": 1999.0}
