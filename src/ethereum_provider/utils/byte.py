"""
Utility Functions For Byte Strings
^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Padding helpers for 32-byte ABI and EVM words.
"""
from typing import Union

from ethereum_types.bytes import Bytes
from ethereum_types.numeric import FixedUnsigned, Uint


def left_pad_zero_bytes(
    value: Bytes, size: Union[int, FixedUnsigned, Uint]
) -> Bytes:
    """
    Left pad zeroes to `value` if its length is less than the given `size`.

    Parameters
    ----------
    value :
        The byte string that needs to be padded.
    size :
        The length of the padded result.

    Returns
    -------
    left_padded_value: `bytes`
        left padded byte string of given `size`.
    """
    return bytes(value).rjust(int(size), b"\x00")


def right_pad_zero_bytes(
    value: Bytes, size: Union[int, FixedUnsigned, Uint]
) -> Bytes:
    """
    Right pad zeroes to `value` if its length is less than the given `size`.

    Parameters
    ----------
    value :
        The byte string that needs to be padded.
    size :
        The length of the padded result.

    Returns
    -------
    right_padded_value: `bytes`
        right padded byte string of given `size`.
    """
    return bytes(value).ljust(int(size), b"\x00")
