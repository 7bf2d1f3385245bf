"""
ABI Types
^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Contract ABI type strings such as `uint256`, `bytes32[]` or
`(address,string)[2]`, parsed with the grammar of `eth_abi`.

`parse_type` narrows that grammar to the types the codec handles: fixed
point numbers and unknown base names are refused up front, with
`UnsupportedType`, instead of failing later inside the encoder.
"""

import re
from typing import Optional

from eth_abi.exceptions import ParseError
from eth_abi.grammar import ABIType, BasicType, TupleType, normalize, parse

from ..exceptions import UnsupportedType

AbiType = ABIType

SUPPORTED_BASES = ("uint", "int", "address", "bool", "bytes", "string")


def _check_supported(abi_type: AbiType, type_string: str) -> None:
    if isinstance(abi_type, TupleType):
        for component in abi_type.components:
            _check_supported(component, type_string)
        return

    if isinstance(abi_type, BasicType) and abi_type.base in SUPPORTED_BASES:
        return
    raise UnsupportedType(
        f"unknown ABI type {abi_type.to_type_str()!r} in {type_string!r}"
    )


def parse_type(type_string: str) -> AbiType:
    """
    Parse an ABI type string.

    Whitespace is ignored, `uint`/`int` are read as their 256 bit versions
    and array suffixes apply left to right, so `uint8[2][]` is a dynamic
    array of `uint8[2]`. A leading `tuple` keyword is accepted.

    Parameters
    ----------
    type_string :
        The type to parse, e.g. `"(address,uint256)[]"`.

    Returns
    -------
    abi_type : `AbiType`
        The parsed type. `abi_type.to_type_str()` is its canonical spelling.

    Raises
    ------
    UnsupportedType
        If `type_string` is not a valid ABI type, or names a type the codec
        does not handle.
    """
    text = re.sub(r"\s+", "", type_string)
    if text.startswith("tuple("):
        text = text[len("tuple") :]
    if not text:
        raise UnsupportedType("empty ABI type")

    try:
        abi_type = parse(normalize(text))
        abi_type.validate()
    except (ParseError, ValueError) as error:
        raise UnsupportedType(
            f"invalid ABI type {type_string!r}: {error}"
        ) from error

    _check_supported(abi_type, type_string)
    return abi_type


def array_length(abi_type: AbiType) -> Optional[int]:
    """
    Length of the outermost dimension of an array type, `None` when that
    dimension is dynamic.
    """
    dimension = abi_type.arrlist[-1]
    return dimension[0] if dimension else None
