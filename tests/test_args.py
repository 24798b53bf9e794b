from __future__ import annotations

import pytest

from fakes import T, U32, demo_wasm, fn_entry, make_wasm
from hostcall.contract.args import (
    TypedArg,
    XdrArg,
    build_host_function_parameters,
    host_function_parameters,
    marshal_arguments,
    merge_arguments,
)
from hostcall.contract.wasm import custom_sections, read_contract_spec
from hostcall.errors import (
    ArgumentParseError,
    ErrorCode,
    FunctionNameTooLong,
    FunctionNotFound,
    MalformedSpec,
    MaxArgumentsReached,
    UnexpectedArgumentCount,
    XdrArgumentParseError,
)
from hostcall.types.scval import ScVal
from hostcall.types.spec import ScSpecType

CID = b"\x11" * 32


def test_reads_spec_from_custom_section():
    spec = read_contract_spec(demo_wasm())
    add = spec.function("add")
    assert add is not None
    assert [i.name for i in add.inputs] == ["a", "b"]
    assert add.signature() == "add(a: u32, b: u32)"
    assert spec.function("missing") is None


def test_other_custom_sections_are_ignored():
    wasm = make_wasm([b"whatever"], section="name")
    assert list(custom_sections(wasm)) == [("name", b"whatever")]
    assert read_contract_spec(wasm).functions == {}


def test_malformed_spec_and_module():
    with pytest.raises(MalformedSpec):
        read_contract_spec(b"not wasm at all")
    with pytest.raises(MalformedSpec):
        read_contract_spec(make_wasm([b"\x00\x00\x00\x63"]))


def test_count_mismatch_fails_before_parsing():
    wasm = demo_wasm()
    # the single argument is not even a valid u32; the count check comes first
    with pytest.raises(UnexpectedArgumentCount) as ei:
        build_host_function_parameters(CID, wasm, "add", [TypedArg("not-a-number", 0)])
    err = ei.value
    assert (err.provided, err.expected, err.function) == (1, 2, "add")
    assert err.code == ErrorCode.ARG_COUNT
    assert err.data == {"provided": 1, "expected": 2, "function": "add"}


def test_parameters_are_prefixed_with_contract_and_symbol():
    params = build_host_function_parameters(CID, demo_wasm(), "add", [TypedArg("1", 0), TypedArg("2", 1)])
    assert params == (ScVal.bytes_(CID), ScVal.symbol("add"), ScVal.u32(1), ScVal.u32(2))


def test_typed_and_xdr_arguments_merge_by_position():
    second = XdrArg(ScVal.u32(7).to_xdr_base64(), 0)
    first = TypedArg("3", 1)
    assert merge_arguments([first, second]) == [second, first]

    params = build_host_function_parameters(CID, demo_wasm(), "add", [first, second])
    assert params[2:] == (ScVal.u32(7), ScVal.u32(3))


def test_xdr_arguments_are_not_type_checked():
    spec = read_contract_spec(demo_wasm())
    sym = XdrArg(ScVal.symbol("any").to_xdr_base64(), 0)
    out = marshal_arguments(spec.function("add"), [sym, TypedArg("1", 1)], spec=spec)
    assert out[0] == ScVal.symbol("any")


def test_bad_xdr_argument():
    with pytest.raises(XdrArgumentParseError) as ei:
        build_host_function_parameters(CID, demo_wasm(), "add", [XdrArg("@@@", 0), TypedArg("1", 1)])
    assert ei.value.arg == "@@@"


def test_bad_typed_argument_reports_text_and_type():
    with pytest.raises(ArgumentParseError) as ei:
        build_host_function_parameters(CID, demo_wasm(), "add", [TypedArg("-1", 0), TypedArg("1", 1)])
    assert ei.value.arg == "-1"
    assert ei.value.type_name == "u32"


def test_unknown_function():
    with pytest.raises(FunctionNotFound) as ei:
        build_host_function_parameters(CID, demo_wasm(), "nope", [])
    assert "add" in ei.value.data["available"]


def test_function_name_must_be_a_symbol():
    with pytest.raises(FunctionNameTooLong):
        host_function_parameters(CID, "a_very_long_name", [])
    # the spec may declare such a name; the host function still cannot carry it
    wasm = make_wasm([fn_entry("bad-name", [])])
    with pytest.raises(FunctionNameTooLong):
        build_host_function_parameters(CID, wasm, "bad-name", [])


def test_parameter_vector_limit(monkeypatch):
    from hostcall.contract import args as args_mod

    monkeypatch.setattr(args_mod, "SCVEC_MAX_LEN", 3)
    host_function_parameters(CID, "f", [ScVal.u32(1)])
    with pytest.raises(MaxArgumentsReached) as ei:
        host_function_parameters(CID, "f", [ScVal.u32(1), ScVal.u32(2)])
    assert (ei.value.current, ei.value.maximum) == (4, 3)


def test_symbol_argument_is_plain_text():
    params = build_host_function_parameters(CID, demo_wasm(), "hello", [TypedArg("world", 0)])
    assert params[2] == ScVal.symbol("world")


def test_vec_argument_uses_json():
    wasm = make_wasm([fn_entry("sum", [("xs", T(ScSpecType.VEC, U32))])])
    params = build_host_function_parameters(CID, wasm, "sum", [TypedArg("[1, 2, 3]", 0)])
    assert params[2] == ScVal.vec([ScVal.u32(1), ScVal.u32(2), ScVal.u32(3)])
