import pytest
from eth_abi.grammar import BasicType, TupleType

from ethereum_provider.abi.types import array_length, parse_type
from ethereum_provider.exceptions import UnsupportedType


@pytest.mark.parametrize(
    "type_string, canonical",
    [
        ("uint", "uint256"),
        ("int", "int256"),
        ("uint8", "uint8"),
        ("bytes32", "bytes32"),
        ("address[]", "address[]"),
        ("uint8[2][]", "uint8[2][]"),
        ("tuple(address,uint)", "(address,uint256)"),
        ("(uint256, (bool,string)[])", "(uint256,(bool,string)[])"),
        (" string ", "string"),
    ],
)
def test_canonical_form(type_string: str, canonical: str) -> None:
    assert parse_type(type_string).to_type_str() == canonical


def test_parsed_structure() -> None:
    int16 = parse_type("int16")
    assert isinstance(int16, BasicType)
    assert (int16.base, int16.sub) == ("int", 16)

    nested = parse_type("uint8[2][]")
    assert nested.is_array
    assert array_length(nested) is None
    assert nested.item_type.to_type_str() == "uint8[2]"
    assert array_length(nested.item_type) == 2

    pair = parse_type("(address,bytes)")
    assert isinstance(pair, TupleType)
    assert [c.to_type_str() for c in pair.components] == ["address", "bytes"]


def test_dynamic_types() -> None:
    assert not parse_type("uint256").is_dynamic
    assert not parse_type("uint256[3]").is_dynamic
    assert not parse_type("(uint256,bool)").is_dynamic
    assert parse_type("bytes").is_dynamic
    assert parse_type("string[2]").is_dynamic
    assert parse_type("(uint256,bytes)").is_dynamic
    assert parse_type("uint256[]").is_dynamic


@pytest.mark.parametrize(
    "type_string",
    [
        "",
        "uint7",
        "uint0",
        "uint264",
        "int512",
        "bytes0",
        "bytes33",
        "float",
        "hash32",
        "fixed128x18",
        "(uint256,ufixed)",
        "uint256[0]",
        "uint256[",
        "uint256[x]",
        "(uint256",
        "uint256)",
        "()",
    ],
)
def test_invalid_types(type_string: str) -> None:
    with pytest.raises(UnsupportedType):
        parse_type(type_string)
