"""
Utility Functions For Addresses
^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Address construction helpers. Contract addresses are derived with
`ethereum.cancun.utils.address.compute_contract_address`.
"""
from ..account_types import Address
from .byte import left_pad_zero_bytes


def address_from_low_u64_be(value: int) -> Address:
    """
    Build an address whose low-order 8 bytes hold `value` (big endian).

    Handy for well-known test accounts: `address_from_low_u64_be(1)` is
    `0x0000000000000000000000000000000000000001`.
    """
    return Address(left_pad_zero_bytes(value.to_bytes(8, "big"), 20))
