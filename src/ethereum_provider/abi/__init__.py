"""
Contract ABI
^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

The standard contract application binary interface: type strings,
function/event/error signatures, and the codec translating between native
Python values and call data, return data and logs.
"""

from .codec import (
    decode,
    decode_log,
    decode_return,
    decode_revert_reason,
    encode,
    encode_arguments,
    encode_call,
    encode_return,
)
from .human import parse_abi
from .signatures import (
    ConstructorSignature,
    ErrorSignature,
    EventSignature,
    FunctionSignature,
    Parameter,
)
from .types import AbiType, parse_type

__all__ = (
    "AbiType",
    "ConstructorSignature",
    "ErrorSignature",
    "EventSignature",
    "FunctionSignature",
    "Parameter",
    "decode",
    "decode_log",
    "decode_return",
    "decode_revert_reason",
    "encode",
    "encode_arguments",
    "encode_call",
    "encode_return",
    "parse_abi",
    "parse_type",
)
