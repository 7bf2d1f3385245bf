"""
ABI Codec
^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Encoding of native Python values into contract call data, and decoding of
return data, logs and revert payloads.

The byte layout is produced and parsed by `eth_abi`. This module sits in
front of it: values are checked against their declared `AbiType` before
encoding, so that a mismatch is reported as `UnsupportedType` with the
offending type, and decoded values are turned back into the types the rest
of the package works with (`Address` for addresses, `list` for arrays).
"""

from typing import Any, Optional, Sequence, Tuple

import eth_abi
from eth_abi.exceptions import DecodingError, EncodingError
from eth_utils import (
    function_signature_to_4byte_selector,
    is_hex_address,
    to_canonical_address,
)
from ethereum_types.bytes import Bytes, Bytes32
from ethereum_types.numeric import Unsigned

from ..account_types import Address
from ..exceptions import (
    ArityMismatch,
    DecodeError,
    TopicCountMismatch,
    UnsupportedType,
)
from ..utils.byte import right_pad_zero_bytes
from ..utils.hexadecimal import has_hex_prefix
from .signatures import EventSignature, FunctionSignature, Parameter
from .types import AbiType, TupleType, array_length, parse_type

ERROR_SELECTOR = function_signature_to_4byte_selector("Error(string)")
PANIC_SELECTOR = function_signature_to_4byte_selector("Panic(uint256)")


#
# Encoding
#


def _as_int(name: str, value: Any) -> int:
    # bool is an int subclass, but never a valid integer argument.
    if isinstance(value, bool):
        raise UnsupportedType(f"expected an integer for {name}, got bool")
    if isinstance(value, int):
        return value
    if isinstance(value, Unsigned):
        return int(value)
    raise UnsupportedType(
        f"expected an integer for {name}, got {type(value).__name__}"
    )


def _as_bytes(name: str, value: Any) -> Bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise UnsupportedType(
        f"expected bytes for {name}, got {type(value).__name__}"
    )


def _as_address(value: Any) -> Address:
    if isinstance(value, str):
        if not has_hex_prefix(value) or not is_hex_address(value):
            raise UnsupportedType(f"invalid address string {value!r}")
        return Address(to_canonical_address(value))
    if isinstance(value, (bytes, bytearray)) and len(value) == 20:
        return Address(value)
    raise UnsupportedType(
        f"expected a 20 byte address, got {type(value).__name__}"
    )


def _as_sequence(name: str, value: Any) -> Sequence[Any]:
    if isinstance(value, (list, tuple)):
        return value
    raise UnsupportedType(
        f"expected a list or tuple for {name}, got {type(value).__name__}"
    )


def _to_abi(abi_type: AbiType, value: Any) -> Any:
    """
    Check `value` against `abi_type` and convert it into the plain Python
    value `eth_abi` expects for it.
    """
    name = abi_type.to_type_str()

    if abi_type.is_array:
        items = _as_sequence(name, value)
        length = array_length(abi_type)
        if length is not None and len(items) != length:
            raise UnsupportedType(
                f"expected {length} items for {name}, got {len(items)}"
            )
        return [_to_abi(abi_type.item_type, item) for item in items]

    if isinstance(abi_type, TupleType):
        items = _as_sequence(name, value)
        if len(items) != len(abi_type.components):
            raise UnsupportedType(
                f"expected {len(abi_type.components)} items for {name}, "
                f"got {len(items)}"
            )
        return tuple(
            _to_abi(component, item)
            for component, item in zip(abi_type.components, items)
        )

    base, sub = abi_type.base, abi_type.sub

    if base == "uint":
        number = _as_int(name, value)
        if not 0 <= number < 2**sub:
            raise UnsupportedType(f"{number} does not fit in {name}")
        return number

    if base == "int":
        number = _as_int(name, value)
        bound = 2 ** (sub - 1)
        if not -bound <= number < bound:
            raise UnsupportedType(f"{number} does not fit in {name}")
        return number

    if base == "address":
        return bytes(_as_address(value))

    if base == "bool":
        if not isinstance(value, bool):
            raise UnsupportedType(
                f"expected a bool, got {type(value).__name__}"
            )
        return value

    if base == "bytes" and sub is not None:
        data = _as_bytes(name, value)
        if len(data) > sub:
            raise UnsupportedType(f"{len(data)} bytes do not fit in {name}")
        return right_pad_zero_bytes(data, sub)

    if base == "bytes":
        return _as_bytes(name, value)

    if base == "string":
        if not isinstance(value, str):
            raise UnsupportedType(
                f"expected a str for string, got {type(value).__name__}"
            )
        return value

    raise UnsupportedType(f"cannot encode {name}")


def _encode_sequence(types: Sequence[AbiType], values: Sequence[Any]) -> Bytes:
    checked = [_to_abi(t, v) for t, v in zip(types, values)]
    try:
        return eth_abi.encode([t.to_type_str() for t in types], checked)
    except EncodingError as error:
        raise UnsupportedType(str(error)) from error


def encode(types: Sequence[AbiType], values: Sequence[Any]) -> Bytes:
    """
    ABI encode `values` as a sequence of the given `types`.

    Parameters
    ----------
    types :
        Declared type of each value.
    values :
        Python values, one per type.

    Returns
    -------
    encoded : `bytes`
        ABI encoding of the values.

    Raises
    ------
    ArityMismatch
        If the number of values differs from the number of types.
    UnsupportedType
        If a value cannot be represented as its declared type.
    """
    if len(types) != len(values):
        raise ArityMismatch(
            f"expected {len(types)} values, got {len(values)}"
        )
    return _encode_sequence(types, values)


def encode_arguments(
    parameters: Sequence[Parameter], arguments: Sequence[Any]
) -> Bytes:
    """
    ABI encode `arguments` for `parameters` without a selector, as appended
    to init code for constructor arguments.
    """
    if len(parameters) != len(arguments):
        raise ArityMismatch(
            f"expected {len(parameters)} arguments, got {len(arguments)}"
        )
    return _encode_sequence([p.type for p in parameters], arguments)


def encode_call(
    signature: FunctionSignature, arguments: Sequence[Any]
) -> Bytes:
    """
    Build the call data invoking `signature` with `arguments`: the four byte
    selector followed by the encoded arguments.

    Raises
    ------
    ArityMismatch
        If the number of arguments differs from the signature.
    UnsupportedType
        If an argument cannot be represented as its declared type.
    """
    if len(arguments) != len(signature.inputs):
        raise ArityMismatch(
            f"{signature.canonical} takes {len(signature.inputs)} arguments, "
            f"got {len(arguments)}"
        )
    return signature.selector + _encode_sequence(
        signature.input_types, arguments
    )


def encode_return(signature: FunctionSignature, values: Any) -> Bytes:
    """
    Encode the return values of `signature`, the inverse of
    `decode_return`. A function with a single output takes the bare value,
    otherwise a tuple of values is expected.
    """
    outputs = signature.output_types
    if len(outputs) == 1:
        values = (values,)
    elif not isinstance(values, (list, tuple)):
        raise ArityMismatch(
            f"{signature.canonical} returns {len(outputs)} values"
        )
    return encode(outputs, values)


#
# Decoding
#


def _from_abi(abi_type: AbiType, value: Any) -> Any:
    """
    Convert a value returned by `eth_abi` into the package's own types.
    """
    if abi_type.is_array:
        return [_from_abi(abi_type.item_type, item) for item in value]
    if isinstance(abi_type, TupleType):
        return tuple(
            _from_abi(component, item)
            for component, item in zip(abi_type.components, value)
        )
    if abi_type.base == "address":
        return Address(to_canonical_address(value))
    return value


def decode(types: Sequence[AbiType], data: Bytes) -> Tuple[Any, ...]:
    """
    Decode ABI encoded `data` as a sequence of the given `types`.

    Parameters
    ----------
    types :
        Expected type of each value.
    data :
        The encoded payload.

    Returns
    -------
    values : `tuple`
        One Python value per type: `int` for integers, `bool`, `Address`,
        `bytes` for `bytes` and `bytesN`, `str`, `list` for arrays and
        `tuple` for tuples.

    Raises
    ------
    DecodeError
        If `data` is shorter than the layout of `types` requires, or holds
        values that are not canonically encoded.
    """
    types = list(types)
    try:
        raw = eth_abi.decode([t.to_type_str() for t in types], bytes(data))
    except (DecodingError, UnicodeDecodeError) as error:
        raise DecodeError(str(error)) from error
    return tuple(_from_abi(t, v) for t, v in zip(types, raw))


def decode_return(signature: FunctionSignature, data: Bytes) -> Any:
    """
    Decode the return data of a call to `signature`.

    Returns `()` for functions without outputs, the bare value for a single
    output and a tuple otherwise.
    """
    values = decode(signature.output_types, data)
    if len(values) == 1:
        return values[0]
    return values


def decode_log(
    event: EventSignature, topics: Sequence[Bytes32], data: Bytes
) -> Tuple[Any, ...]:
    """
    Decode the parameters of `event` from a log's topics and data.

    Indexed parameters are read from the topics, in declared order,
    following the signature topic (absent for anonymous events). Indexed
    values of dynamic types are only available as their keccak256 hash,
    which is returned as is. The remaining parameters are decoded from
    `data`.

    Returns
    -------
    values : `tuple`
        All parameters, in declared order.

    Raises
    ------
    TopicCountMismatch
        If the topics do not match the indexed parameters.
    DecodeError
        If topic 0 is not the event's signature hash, or `data` is
        malformed.
    """
    indexed = event.indexed_inputs
    if event.anonymous:
        value_topics = list(topics)
    else:
        if not topics:
            raise TopicCountMismatch(
                f"{event.canonical} expects a signature topic"
            )
        if bytes(topics[0]) != event.topic:
            raise DecodeError(f"log is not a {event.canonical} event")
        value_topics = list(topics[1:])

    if len(value_topics) != len(indexed):
        raise TopicCountMismatch(
            f"{event.canonical} has {len(indexed)} indexed parameters, "
            f"log has {len(value_topics)} value topics"
        )

    topic_values = iter(value_topics)
    data_values = iter(decode([p.type for p in event.data_inputs], data))

    values = []
    for parameter in event.inputs:
        if parameter.indexed:
            topic = bytes(next(topic_values))
            if (
                parameter.type.is_dynamic
                or parameter.type.is_array
                or isinstance(parameter.type, TupleType)
            ):
                values.append(Bytes32(topic))
            else:
                (value,) = decode([parameter.type], topic)
                values.append(value)
        else:
            values.append(next(data_values))
    return tuple(values)


def decode_revert_reason(data: Bytes) -> Optional[str]:
    """
    Decode a revert payload using the standard `Error(string)` and
    `Panic(uint256)` encodings. Returns `None` for anything else, including
    empty payloads.
    """
    data = bytes(data)
    try:
        if data[:4] == ERROR_SELECTOR:
            (reason,) = decode((parse_type("string"),), data[4:])
            return reason
        if data[:4] == PANIC_SELECTOR:
            (code,) = decode((parse_type("uint256"),), data[4:])
            return f"Panic(0x{code:02x})"
    except DecodeError:
        return None
    return None
